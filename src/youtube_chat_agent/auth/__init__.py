"""Delegated account authorization."""

from youtube_chat_agent.auth.credentials import (
    YOUTUBE_SCOPES,
    Credential,
    CredentialManager,
    CredentialState,
)

__all__ = ["YOUTUBE_SCOPES", "Credential", "CredentialManager", "CredentialState"]
