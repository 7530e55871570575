"""Delegated YouTube account credential lifecycle.

The manager owns the single access/refresh token pair for the account the
agent acts on behalf of. It loads the persisted record at startup, runs the
OAuth authorization-code handshake, refreshes expired access tokens and
writes every newly issued pair back to disk. Other components only read
snapshots through ``current_credential`` or ask for ready-to-use
``google.oauth2`` credentials through ``authorized_credentials``.

Persistence and the in-memory update are not atomic across crashes: a token
issued upstream but not yet written is lost, and the user re-authorizes.
"""

import logging
import os
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from pydantic import BaseModel, field_validator

from youtube_chat_agent.config.settings import Settings
from youtube_chat_agent.errors import (
    AuthorizationExchangeError,
    UpstreamAuthError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

YOUTUBE_SCOPES = [
    "https://www.googleapis.com/auth/youtube.readonly",
    "https://www.googleapis.com/auth/youtube.force-ssl",
    "https://www.googleapis.com/auth/youtube",
]


class CredentialState(str, Enum):
    """Lifecycle states of the delegated account."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    REFRESHED = "refreshed"


class Credential(BaseModel):
    """Access/refresh token pair for the delegated account."""

    access_token: str
    refresh_token: str | None = None
    expiry: datetime | None = None
    scopes: list[str] | None = None

    @field_validator("expiry")
    @classmethod
    def normalize_expiry(cls, v: datetime | None) -> datetime | None:
        """Store expiry as aware UTC. Naive values are UTC, as google-auth keeps them."""
        if v is None:
            return None
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v.astimezone(UTC)

    @classmethod
    def from_google(cls, credentials: Credentials) -> "Credential":
        """Snapshot a ``google.oauth2`` credentials object."""
        scopes = list(credentials.scopes) if credentials.scopes else None
        return cls(
            access_token=credentials.token,
            refresh_token=credentials.refresh_token,
            expiry=credentials.expiry,
            scopes=scopes,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expiry is None:
            return False
        return (now or datetime.now(UTC)) >= self.expiry


class CredentialManager:
    """Owns the delegated account credential for the whole process."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        token_path: Path,
        scopes: list[str] | None = None,
    ) -> None:
        """Initialize the manager without touching disk.

        Args:
            client_id: OAuth client ID.
            client_secret: OAuth client secret.
            redirect_uri: Callback URL registered with the OAuth client.
            token_path: File holding the persisted credential.
            scopes: Capability scopes requested during authorization.
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.token_path = token_path
        self.scopes = list(scopes or YOUTUBE_SCOPES)
        self._credential: Credential | None = None
        self.state = CredentialState.UNAUTHENTICATED

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialManager":
        """Build a manager from settings and load any persisted credential."""
        manager = cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.oauth_redirect_uri,
            token_path=Path(settings.oauth_token_path).expanduser(),
        )
        manager.load()
        return manager

    @property
    def client_config(self) -> dict[str, Any]:
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": GOOGLE_AUTH_URI,
                "token_uri": GOOGLE_TOKEN_URI,
                "redirect_uris": [self.redirect_uri],
            }
        }

    def load(self) -> Credential | None:
        """Load the persisted credential.

        A missing or unreadable file leaves the manager unauthenticated.

        Returns:
            The loaded credential, or None.
        """
        if not self.token_path.exists():
            logger.info("No saved YouTube credential at %s", self.token_path)
            return None

        try:
            credential = Credential.model_validate_json(
                self.token_path.read_text(encoding="utf-8")
            )
        except (OSError, ValueError):
            logger.warning(
                "youtube_credential_load_failed path=%s", self.token_path, exc_info=True
            )
            return None

        self._credential = credential
        self.state = CredentialState.AUTHENTICATED
        logger.info("Loaded saved YouTube credential from %s", self.token_path)
        return credential

    def is_authenticated(self) -> bool:
        return self._credential is not None

    def current_credential(self) -> Credential | None:
        """Read-only snapshot of the current credential."""
        if self._credential is None:
            return None
        return self._credential.model_copy(deep=True)

    def begin_authorization(self) -> str:
        """Build the consent URL the user is redirected to.

        ``prompt=consent`` forces re-consent so Google always issues a
        refresh token, even for accounts that authorized before.

        Returns:
            Authorization URL.

        Raises:
            AuthorizationExchangeError: If the OAuth client is not configured.
        """
        if not (self.client_id and self.client_secret):
            raise AuthorizationExchangeError(
                "OAuth client is not configured (GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET)"
            )
        flow = self._build_flow()
        url, _state = flow.authorization_url(
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )
        return str(url)

    def complete_authorization(self, authorization_code: str) -> Credential:
        """Exchange an authorization code and persist the issued tokens.

        Args:
            authorization_code: ``code`` query parameter from the callback.

        Returns:
            The new credential.

        Raises:
            ValidationError: If the code is blank.
            AuthorizationExchangeError: If Google rejects the exchange.
        """
        code = (authorization_code or "").strip()
        if not code:
            raise ValidationError("Missing authorization code")

        try:
            issued = self._exchange_code(code)
        except AuthorizationExchangeError:
            raise
        except Exception as e:
            logger.warning("youtube_oauth_exchange_failed error=%s", e)
            raise AuthorizationExchangeError(
                "Authorization code exchange failed. Restart the authorization flow.",
                details=str(e),
            ) from e

        credential = Credential.from_google(issued)
        if credential.refresh_token is None and self._credential is not None:
            credential.refresh_token = self._credential.refresh_token

        self._store(credential)
        self.state = CredentialState.AUTHENTICATED
        return credential

    def authorized_credentials(self) -> Credentials:
        """Return google-auth credentials ready for an API call.

        Refreshes and persists the token pair when the access token expired.

        Raises:
            UpstreamAuthError: If no credential is loaded or refresh fails.
        """
        if self._credential is None:
            raise UpstreamAuthError(
                "YouTube account not connected. Authorize once via /authorize."
            )

        credentials = self._to_google(self._credential)
        if not self._credential.is_expired():
            return credentials

        if not credentials.refresh_token:
            raise UpstreamAuthError(
                "YouTube access token expired and no refresh token is stored. "
                "Authorize again via /authorize."
            )

        try:
            credentials.refresh(Request())
        except (RefreshError, TransportError) as e:
            logger.warning("youtube_token_refresh_failed error=%s", e)
            raise UpstreamAuthError(f"Failed to refresh YouTube access token: {e}") from e

        refreshed = Credential.from_google(credentials)
        if refreshed.refresh_token is None:
            refreshed.refresh_token = self._credential.refresh_token
        self._store(refreshed)
        self.state = CredentialState.REFRESHED
        logger.info("Refreshed YouTube access token")
        return credentials

    def _build_flow(self) -> Flow:
        return Flow.from_client_config(
            self.client_config,
            scopes=self.scopes,
            redirect_uri=self.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def _exchange_code(self, code: str) -> Credentials:
        flow = self._build_flow()
        flow.fetch_token(code=code)
        return flow.credentials

    def _to_google(self, credential: Credential) -> Credentials:
        expiry = credential.expiry
        if expiry is not None:
            expiry = expiry.astimezone(UTC).replace(tzinfo=None)
        return Credentials(
            token=credential.access_token,
            refresh_token=credential.refresh_token,
            token_uri=GOOGLE_TOKEN_URI,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=credential.scopes or self.scopes,
            expiry=expiry,
        )

    def _store(self, credential: Credential) -> None:
        """Persist ``credential`` and make it current."""
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.token_path.with_suffix(self.token_path.suffix + ".tmp")
        tmp_path.write_text(credential.model_dump_json(), encoding="utf-8")
        os.replace(tmp_path, self.token_path)
        self._credential = credential
        logger.info("Saved YouTube credential to %s", self.token_path)
