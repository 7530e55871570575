"""Tool-calling chat orchestrator."""

import logging
import time
from typing import Any

from youtube_chat_agent.agent.prompts import build_system_prompt
from youtube_chat_agent.api.gemini_client import GeminiClient
from youtube_chat_agent.errors import ChatAgentError, EmptyInputError
from youtube_chat_agent.models.conversation import (
    ChatSession,
    ChatState,
    ConversationTurn,
    ToolCallRecord,
    ToolCallRequest,
)
from youtube_chat_agent.models.result import ChatResponse
from youtube_chat_agent.models.video import VideoSummary
from youtube_chat_agent.tools.base import ToolResult
from youtube_chat_agent.tools.registry import ToolRegistry
from youtube_chat_agent.tools.youtube import SEARCH_TOOL_NAME
from youtube_chat_agent.utils import elapsed_ms

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "Sorry, something went wrong while preparing the answer. Please try again in a moment."
)


class ChatOrchestrator:
    """Answers one user message with at most one round of tool calls.

    The first model call sees every registered tool and decides whether to
    call any. Requested tools run sequentially in the order the model listed
    them, their results (or errors) are appended as tool turns, and a second
    model call without tools writes the final answer.
    """

    def __init__(
        self,
        model: GeminiClient,
        registry: ToolRegistry,
        system_prompt: str | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            model: Language model client.
            registry: Tools the model may call.
            system_prompt: Override for the system instruction. Defaults to
                the dated prompt from ``build_system_prompt``.
        """
        self.model = model
        self.registry = registry
        self._system_prompt = system_prompt

    @property
    def system_prompt(self) -> str:
        return self._system_prompt or build_system_prompt()

    def get_tool_health(self) -> dict[str, dict[str, Any]]:
        """Health status of every registered tool."""
        return self.registry.check_health()

    async def chat(self, message: Any) -> ChatResponse:
        """Process a user message and return the final reply.

        Args:
            message: The user's natural language message.

        Returns:
            ChatResponse with the reply and any videos from the search tool.

        Raises:
            EmptyInputError: If the message is missing or blank.
            UpstreamServiceError: If the first model call fails.
        """
        if not isinstance(message, str) or not message.strip():
            raise EmptyInputError("message is required")

        start_time = time.perf_counter()
        session = ChatSession(user_message=message.strip())
        session.turns = [
            ConversationTurn.system(self.system_prompt),
            ConversationTurn.user(session.user_message),
        ]

        # Model call 1: tool decision
        started_at = time.perf_counter()
        first = await self.model.generate(session.turns, tools=self.registry.get_schemas())
        session.model_calls += 1
        logger.info(
            "chat_model_call_complete phase=tool_decision duration_ms=%d tool_calls=%d",
            elapsed_ms(started_at, time.perf_counter()),
            len(first.tool_calls),
        )

        if not first.has_tool_calls:
            session.advance(ChatState.DONE)
            return self._finish(session, first.text or "", [], start_time)

        session.advance(ChatState.TOOLS_REQUESTED)
        session.turns.append(first.as_assistant_turn())

        session.advance(ChatState.DISPATCHING)
        videos: list[VideoSummary] = []
        for call in first.tool_calls:
            result = await self._dispatch(session, call)
            if call.tool_name == SEARCH_TOOL_NAME and result.success:
                videos = list(result.data or [])
            session.turns.append(ConversationTurn.tool_result(call, result.to_string()))

        # Model call 2: final answer, no tools offered
        session.advance(ChatState.AWAITING_FINAL_ANSWER)
        reply = await self._final_answer(session)
        session.advance(ChatState.DONE)
        return self._finish(session, reply, videos, start_time)

    async def _dispatch(self, session: ChatSession, call: ToolCallRequest) -> ToolResult:
        """Run one requested tool, turning any failure into a failed result."""
        started_at = time.perf_counter()
        try:
            result = await self.registry.invoke(call.tool_name, call.raw_arguments)
        except ChatAgentError as e:
            logger.warning(
                "chat_tool_call_failed tool=%s call_id=%s error=%s",
                call.tool_name,
                call.id,
                e,
            )
            result = ToolResult.fail(str(e))

        duration_ms = elapsed_ms(started_at, time.perf_counter())
        session.tool_calls.append(ToolCallRecord(
            call_id=call.id,
            tool_name=call.tool_name,
            success=result.success,
            error=result.error,
            duration_ms=duration_ms,
        ))
        logger.info(
            "chat_tool_execution_complete tool=%s duration_ms=%d success=%s",
            call.tool_name,
            duration_ms,
            result.success,
        )
        return result

    async def _final_answer(self, session: ChatSession) -> str:
        started_at = time.perf_counter()
        try:
            second = await self.model.generate(session.turns, tools=None)
        except Exception:
            logger.exception("chat_final_answer_failed session_id=%s", session.session_id)
            return FALLBACK_REPLY
        finally:
            session.model_calls += 1

        logger.info(
            "chat_model_call_complete phase=final_answer duration_ms=%d",
            elapsed_ms(started_at, time.perf_counter()),
        )
        if second.has_tool_calls:
            # Only one round of tools per message; extra calls are dropped
            logger.warning(
                "chat_second_round_tool_calls_ignored count=%d", len(second.tool_calls)
            )
        return second.text or FALLBACK_REPLY

    def _finish(
        self,
        session: ChatSession,
        reply: str,
        videos: list[VideoSummary],
        start_time: float,
    ) -> ChatResponse:
        execution_time = time.perf_counter() - start_time
        logger.info(
            "chat_complete session_id=%s duration_ms=%d model_calls=%d tool_calls=%d",
            session.session_id,
            int(execution_time * 1000),
            session.model_calls,
            len(session.tool_calls),
        )
        return ChatResponse(
            reply=reply,
            videos=videos,
            session_id=session.session_id,
            tool_calls=session.tool_calls,
            execution_time_seconds=round(execution_time, 2),
        )
