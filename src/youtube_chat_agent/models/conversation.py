"""Conversation and tool-call data models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ToolCallRequest(BaseModel):
    """A tool invocation requested by the model.

    ``raw_arguments`` is untrusted JSON text and is only parsed by the
    tool registry.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: f"call_{uuid4().hex[:24]}")
    tool_name: str
    raw_arguments: str = "{}"


class ConversationTurn(BaseModel):
    """One message in the per-request conversation."""

    role: Literal["system", "user", "assistant", "tool"]
    content: str | None = None
    tool_call_id: str | None = None
    tool_name: str | None = None
    tool_calls: list[ToolCallRequest] = Field(default_factory=list)
    # Opaque provider payload for assistant turns (keeps thought signatures)
    provider_content: Any = Field(default=None, exclude=True, repr=False)

    @classmethod
    def system(cls, content: str) -> "ConversationTurn":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "ConversationTurn":
        return cls(role="user", content=content)

    @classmethod
    def tool_result(
        cls, call: ToolCallRequest, content: str
    ) -> "ConversationTurn":
        """Build the tool turn answering ``call``."""
        return cls(
            role="tool",
            content=content,
            tool_call_id=call.id,
            tool_name=call.tool_name,
        )


class ModelReply(BaseModel):
    """Normalized language model response."""

    text: str | None = None
    tool_calls: list[ToolCallRequest] = Field(default_factory=list)
    provider_content: Any = Field(default=None, exclude=True, repr=False)
    usage: dict[str, int] = Field(default_factory=dict)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def as_assistant_turn(self) -> ConversationTurn:
        """Convert into the assistant turn that precedes tool results."""
        return ConversationTurn(
            role="assistant",
            content=self.text,
            tool_calls=list(self.tool_calls),
            provider_content=self.provider_content,
        )


class ChatState(str, Enum):
    """Orchestrator states for a single chat request."""

    AWAITING_TOOL_DECISION = "awaiting_tool_decision"
    TOOLS_REQUESTED = "tools_requested"
    DISPATCHING = "dispatching"
    AWAITING_FINAL_ANSWER = "awaiting_final_answer"
    DONE = "done"


_ALLOWED_TRANSITIONS: dict[ChatState, set[ChatState]] = {
    ChatState.AWAITING_TOOL_DECISION: {ChatState.TOOLS_REQUESTED, ChatState.DONE},
    ChatState.TOOLS_REQUESTED: {ChatState.DISPATCHING},
    ChatState.DISPATCHING: {ChatState.AWAITING_FINAL_ANSWER},
    ChatState.AWAITING_FINAL_ANSWER: {ChatState.DONE},
    ChatState.DONE: set(),
}


class ToolCallRecord(BaseModel):
    """A dispatched tool call and how it ended."""

    call_id: str
    tool_name: str
    success: bool
    error: str | None = None
    duration_ms: int = 0


class ChatSession(BaseModel):
    """Tracks the state of one chat request."""

    session_id: str = Field(default_factory=lambda: str(uuid4()))
    user_message: str
    state: ChatState = ChatState.AWAITING_TOOL_DECISION
    history: list[ChatState] = Field(
        default_factory=lambda: [ChatState.AWAITING_TOOL_DECISION]
    )
    turns: list[ConversationTurn] = Field(default_factory=list)
    tool_calls: list[ToolCallRecord] = Field(default_factory=list)
    model_calls: int = 0

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    def advance(self, new_state: ChatState) -> None:
        """Move to ``new_state``, rejecting transitions the protocol forbids."""
        if new_state not in _ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal chat state transition: {self.state.value} -> {new_state.value}"
            )
        self.state = new_state
        self.history.append(new_state)
        if new_state is ChatState.DONE:
            self.completed_at = datetime.now(UTC)

    @property
    def used_tools(self) -> bool:
        return ChatState.DISPATCHING in self.history
