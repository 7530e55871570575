"""Dependency injection for the API.

Each provider is cached so the whole process shares one credential
manager, one cache and one orchestrator. Tests replace them through
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from youtube_chat_agent.agent.core import ChatOrchestrator
from youtube_chat_agent.api.gemini_client import GeminiClient
from youtube_chat_agent.api.youtube_service import YouTubeService
from youtube_chat_agent.auth.credentials import CredentialManager
from youtube_chat_agent.cache.expiring import ExpiringCache
from youtube_chat_agent.config.settings import get_settings
from youtube_chat_agent.errors import UpstreamAuthError
from youtube_chat_agent.tools.registry import ToolRegistry, create_default_registry


@lru_cache
def get_credential_manager() -> CredentialManager:
    """Get the process-wide credential manager, loading any saved token."""
    return CredentialManager.from_settings(get_settings())


@lru_cache
def get_result_cache() -> ExpiringCache:
    return ExpiringCache()


@lru_cache
def get_youtube_service() -> YouTubeService:
    return YouTubeService(
        credentials=get_credential_manager(),
        cache=get_result_cache(),
    )


@lru_cache
def get_tool_registry() -> ToolRegistry:
    registry = create_default_registry(get_youtube_service())
    registry.log_health_status()
    return registry


@lru_cache
def get_orchestrator() -> ChatOrchestrator:
    """Get the shared chat orchestrator."""
    return ChatOrchestrator(model=GeminiClient(), registry=get_tool_registry())


def require_youtube_account(
    credentials: CredentialManager = Depends(get_credential_manager),
) -> CredentialManager:
    """Reject the request before reading its body when no account is connected."""
    if not credentials.is_authenticated():
        raise UpstreamAuthError(
            "YouTube account not connected. Authorize once via /authorize."
        )
    return credentials
