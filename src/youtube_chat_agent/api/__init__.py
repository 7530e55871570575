"""External API clients."""

from youtube_chat_agent.api.gemini_client import GeminiClient
from youtube_chat_agent.api.youtube_service import YouTubeService

__all__ = [
    "GeminiClient",
    "YouTubeService",
]
