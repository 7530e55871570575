"""Health check router."""

from typing import Any

from fastapi import APIRouter, Depends

from youtube_chat_agent import __version__
from youtube_chat_agent.auth.credentials import CredentialManager
from youtube_chat_agent.tools.registry import ToolRegistry
from youtube_chat_agent.web.dependencies import get_credential_manager, get_tool_registry

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    registry: ToolRegistry = Depends(get_tool_registry),
    credentials: CredentialManager = Depends(get_credential_manager),
) -> dict[str, Any]:
    """Health check endpoint with tool status.

    Returns:
        Health status including version, account state and tool availability.
    """
    tool_health = registry.check_health()
    healthy_count = sum(1 for t in tool_health.values() if t.get("healthy", False))

    return {
        "status": "ok",
        "service": "youtube-chat-agent",
        "version": __version__,
        "authenticated": credentials.is_authenticated(),
        "tools": {
            "total": len(tool_health),
            "healthy": healthy_count,
            "details": tool_health,
        },
    }
