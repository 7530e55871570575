"""API routers."""

from youtube_chat_agent.web.routers.auth import router as auth_router
from youtube_chat_agent.web.routers.chat import router as chat_router
from youtube_chat_agent.web.routers.health import router as health_router
from youtube_chat_agent.web.routers.media import router as media_router

__all__ = ["auth_router", "chat_router", "health_router", "media_router"]
