"""Data models for the chat agent."""

from youtube_chat_agent.models.conversation import (
    ChatSession,
    ChatState,
    ConversationTurn,
    ModelReply,
    ToolCallRecord,
    ToolCallRequest,
)
from youtube_chat_agent.models.result import ChatResponse
from youtube_chat_agent.models.video import PlaylistInsertResult, VideoSummary

__all__ = [
    # Conversation
    "ChatSession",
    "ChatState",
    "ConversationTurn",
    "ModelReply",
    "ToolCallRecord",
    "ToolCallRequest",
    # Results
    "ChatResponse",
    # Video
    "PlaylistInsertResult",
    "VideoSummary",
]
