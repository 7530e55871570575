"""Chat router."""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from youtube_chat_agent.agent.core import ChatOrchestrator
from youtube_chat_agent.errors import ChatAgentError
from youtube_chat_agent.web.dependencies import get_orchestrator
from youtube_chat_agent.web.schemas.errors import APIError, ErrorCode
from youtube_chat_agent.web.schemas.requests import ChatReply, ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=ChatReply)
async def chat(
    chat_request: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> Any:
    """Answer a message, calling YouTube tools when the model asks for them.

    Returns ``{reply, videos}`` where ``videos`` holds the results of the
    last ``youtube_search`` call (empty when no search ran).
    """
    try:
        response = await orchestrator.chat(chat_request.message)
    except ChatAgentError:
        # Mapped to HTTP responses by the app's exception handlers
        raise
    except Exception as e:
        logger.exception(f"Error in /chat: {e}")
        error = APIError(
            code=ErrorCode.INTERNAL_ERROR,
            message="Internal server error",
            details=str(e),
        )
        return JSONResponse(status_code=500, content=error.to_dict())

    return response.to_payload()
