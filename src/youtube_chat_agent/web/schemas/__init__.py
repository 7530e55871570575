"""Request and response schemas for the API."""

from youtube_chat_agent.web.schemas.errors import APIError, ErrorCode
from youtube_chat_agent.web.schemas.requests import (
    ChatReply,
    ChatRequest,
    PlaylistAddRequest,
    VideoActionRequest,
)

__all__ = [
    "ChatRequest",
    "ChatReply",
    "VideoActionRequest",
    "PlaylistAddRequest",
    "APIError",
    "ErrorCode",
]
