"""YouTube Chat Agent - Gemini tool calling over the YouTube Data API."""

from typing import Any

__version__ = "0.1.0"

from youtube_chat_agent.agent.core import ChatOrchestrator  # noqa: E402
from youtube_chat_agent.models.result import ChatResponse  # noqa: E402
from youtube_chat_agent.models.video import VideoSummary  # noqa: E402

__all__ = [
    "ChatOrchestrator",
    "ChatResponse",
    "VideoSummary",
]


def create_app() -> Any:
    """Lazy import to avoid circular imports."""
    from youtube_chat_agent.web.app import create_app as _create_app

    return _create_app()
