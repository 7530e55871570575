"""Result and response data models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from youtube_chat_agent.models.conversation import ToolCallRecord
from youtube_chat_agent.models.video import VideoSummary


class ChatResponse(BaseModel):
    """Final answer for one chat request."""

    reply: str
    videos: list[VideoSummary] = Field(default_factory=list)

    session_id: str | None = None
    tool_calls: list[ToolCallRecord] = Field(default_factory=list)
    execution_time_seconds: float = 0.0

    def to_payload(self) -> dict[str, Any]:
        """The ``{reply, videos}`` shape returned to clients."""
        return {
            "reply": self.reply,
            "videos": [video.to_payload() for video in self.videos],
        }
