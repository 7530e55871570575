"""Actions on the connected YouTube account."""

import json
import logging
from typing import Any, TypeVar

import pydantic
from fastapi import APIRouter, Depends, Request
from starlette.responses import JSONResponse

from youtube_chat_agent.api.youtube_service import YouTubeService
from youtube_chat_agent.errors import ChatAgentError, ValidationError
from youtube_chat_agent.web.dependencies import get_youtube_service, require_youtube_account
from youtube_chat_agent.web.schemas.errors import APIError, ErrorCode
from youtube_chat_agent.web.schemas.requests import PlaylistAddRequest, VideoActionRequest

logger = logging.getLogger(__name__)

# Account check runs as a router dependency, before any body is read
router = APIRouter(
    prefix="/media",
    tags=["media"],
    dependencies=[Depends(require_youtube_account)],
)

RequestModel = TypeVar("RequestModel", bound=pydantic.BaseModel)


async def read_body(request: Request, model: type[RequestModel]) -> RequestModel:
    """Parse and validate a JSON body, reporting problems as ValidationError."""
    raw = await request.body()
    try:
        payload = json.loads(raw) if raw else {}
    except json.JSONDecodeError as e:
        raise ValidationError("Request body must be JSON") from e
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        missing = [
            str(err["loc"][-1]) for err in e.errors() if err.get("loc")
        ]
        raise ValidationError(f"Missing {' or '.join(missing) or 'fields'}") from e


def internal_error(request: Request, e: Exception) -> JSONResponse:
    """JSON 500 for failures outside the domain error taxonomy."""
    logger.exception(f"Error in {request.url.path}: {e}")
    error = APIError(
        code=ErrorCode.INTERNAL_ERROR,
        message="Internal server error",
        details=str(e),
    )
    return JSONResponse(status_code=500, content=error.to_dict())


@router.get("/watched")
async def watched(
    request: Request,
    youtube: YouTubeService = Depends(get_youtube_service),
) -> Any:
    """Recently watched videos (cached briefly)."""
    try:
        videos = await youtube.watch_history()
    except ChatAgentError:
        raise
    except Exception as e:
        return internal_error(request, e)
    return {"success": True, "items": [video.to_payload() for video in videos]}


@router.get("/recommended")
async def recommended(
    request: Request,
    youtube: YouTubeService = Depends(get_youtube_service),
) -> Any:
    """Most popular videos for the configured region."""
    try:
        videos = await youtube.recommended()
    except ChatAgentError:
        raise
    except Exception as e:
        return internal_error(request, e)
    return {"success": True, "items": [video.to_payload() for video in videos]}


@router.post("/like")
async def like(
    request: Request,
    youtube: YouTubeService = Depends(get_youtube_service),
) -> Any:
    """Like a video on the connected account."""
    body = await read_body(request, VideoActionRequest)
    try:
        await youtube.like(body.video_id)
    except ChatAgentError:
        raise
    except Exception as e:
        return internal_error(request, e)
    return {"success": True, "message": "Video liked", "videoId": body.video_id}


@router.post("/save-for-later")
async def save_for_later(
    request: Request,
    youtube: YouTubeService = Depends(get_youtube_service),
) -> Any:
    """Save a video to the agent's watch-later playlist."""
    body = await read_body(request, VideoActionRequest)
    try:
        result = await youtube.save_for_later(body.video_id)
    except ChatAgentError:
        raise
    except Exception as e:
        return internal_error(request, e)
    return {
        "success": True,
        "message": f"Saved to {youtube.playlist_title}",
        "playlistId": result.playlist_id,
        "item": result.item,
    }


@router.post("/playlist/add")
async def add_to_playlist(
    request: Request,
    youtube: YouTubeService = Depends(get_youtube_service),
) -> Any:
    """Add a video to an existing playlist."""
    body = await read_body(request, PlaylistAddRequest)
    try:
        result = await youtube.add_to_playlist(body.video_id, body.playlist_id)
    except ChatAgentError:
        raise
    except Exception as e:
        return internal_error(request, e)
    return {
        "success": True,
        "message": f"Added to playlist {result.playlist_id}",
        "data": result.item,
    }
