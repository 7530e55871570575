"""Shared fixtures."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from google.oauth2.credentials import Credentials

from youtube_chat_agent.auth.credentials import (
    YOUTUBE_SCOPES,
    Credential,
    CredentialManager,
    CredentialState,
)
from youtube_chat_agent.cache.expiring import ExpiringCache
from youtube_chat_agent.config.settings import Settings
from youtube_chat_agent.models.video import VideoSummary


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        GOOGLE_API_KEY="test-google-key",
        YOUTUBE_API_KEY="test-youtube-key",
        GOOGLE_CLIENT_ID="client-id.apps.googleusercontent.com",
        GOOGLE_CLIENT_SECRET="client-secret",
        OAUTH_REDIRECT_URI="http://localhost:8000/authorize/callback",
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def token_path(tmp_path: Path) -> Path:
    return tmp_path / "tokens" / "youtube_token.json"


@pytest.fixture
def credential_manager(token_path: Path) -> CredentialManager:
    return CredentialManager(
        client_id="client-id.apps.googleusercontent.com",
        client_secret="client-secret",
        redirect_uri="http://localhost:8000/authorize/callback",
        token_path=token_path,
    )


@pytest.fixture
def authenticated_manager(credential_manager: CredentialManager) -> CredentialManager:
    credential_manager._store(Credential(
        access_token="access-123",
        refresh_token="refresh-456",
    ))
    credential_manager.state = CredentialState.AUTHENTICATED
    return credential_manager


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ExpiringCache:
    return ExpiringCache(clock=clock)


def make_videos(count: int, prefix: str = "vid") -> list[VideoSummary]:
    return [
        VideoSummary(
            id=f"{prefix}{i}",
            title=f"Kubernetes video {i}",
            description="About Kubernetes",
            thumbnail_url=f"https://i.ytimg.com/vi/{prefix}{i}/hqdefault.jpg",
            channel_name="Cloud Channel",
        )
        for i in range(count)
    ]


def make_google_credentials(token="new-access", refresh_token="new-refresh", expires_in=3600):
    """google-auth credentials as issued by a code exchange (naive UTC expiry)."""
    expiry = datetime.now(UTC).replace(tzinfo=None) + timedelta(seconds=expires_in)
    return Credentials(
        token=token,
        refresh_token=refresh_token,
        expiry=expiry,
        scopes=YOUTUBE_SCOPES,
    )
