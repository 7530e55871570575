"""Tests for the delegated account credential lifecycle."""

import json
from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import patch
from urllib.parse import parse_qs, urlparse

import pytest
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials

from conftest import make_google_credentials as issued
from youtube_chat_agent.auth.credentials import (
    YOUTUBE_SCOPES,
    Credential,
    CredentialManager,
    CredentialState,
)
from youtube_chat_agent.errors import (
    AuthorizationExchangeError,
    UpstreamAuthError,
    ValidationError,
)


class TestLoad:
    def test_missing_file(self, credential_manager):
        assert credential_manager.load() is None
        assert credential_manager.is_authenticated() is False
        assert credential_manager.state == CredentialState.UNAUTHENTICATED

    def test_corrupt_file(self, credential_manager, token_path):
        token_path.parent.mkdir(parents=True)
        token_path.write_text("{not json")

        assert credential_manager.load() is None
        assert credential_manager.is_authenticated() is False

    def test_valid_file(self, credential_manager, token_path):
        token_path.parent.mkdir(parents=True)
        token_path.write_text(json.dumps({
            "access_token": "a",
            "refresh_token": "r",
            "expiry": "2030-01-01T00:00:00Z",
        }))

        credential = credential_manager.load()

        assert credential.access_token == "a"
        assert credential_manager.is_authenticated() is True
        assert credential_manager.state == CredentialState.AUTHENTICATED

    def test_naive_expiry_read_as_utc(self, credential_manager, token_path):
        token_path.parent.mkdir(parents=True)
        token_path.write_text(json.dumps({
            "access_token": "a",
            "refresh_token": "r",
            "expiry": "2020-01-01T00:00:00",
        }))

        credential = credential_manager.load()

        assert credential.expiry == datetime(2020, 1, 1, tzinfo=UTC)
        assert credential.is_expired() is True

        def fake_refresh(self, request):
            self.token = "fresh-access"
            self.expiry = datetime.now(UTC).replace(tzinfo=None) + timedelta(hours=1)

        with patch.object(
            Credentials, "refresh", autospec=True, side_effect=fake_refresh
        ) as refresh:
            credentials = credential_manager.authorized_credentials()

        refresh.assert_called_once()
        assert credentials.token == "fresh-access"
        assert credential_manager.state == CredentialState.REFRESHED

    def test_from_settings_loads_persisted_credential(self, settings, tmp_path):
        token_path = tmp_path / "token.json"
        token_path.write_text(json.dumps({"access_token": "a", "refresh_token": "r"}))
        settings.oauth_token_path = str(token_path)

        manager = CredentialManager.from_settings(settings)

        assert manager.is_authenticated() is True
        assert manager.client_id == settings.google_client_id

    def test_current_credential_is_a_copy(self, authenticated_manager):
        snapshot = authenticated_manager.current_credential()
        snapshot.access_token = "tampered"

        assert authenticated_manager.current_credential().access_token == "access-123"


class TestBeginAuthorization:
    def test_consent_url(self, credential_manager):
        url = credential_manager.begin_authorization()

        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        assert parsed.netloc == "accounts.google.com"
        assert params["access_type"] == ["offline"]
        assert params["prompt"] == ["consent"]
        assert params["client_id"] == ["client-id.apps.googleusercontent.com"]
        assert params["redirect_uri"] == ["http://localhost:8000/authorize/callback"]
        assert set(params["scope"][0].split()) == set(YOUTUBE_SCOPES)

    def test_unconfigured_client(self, token_path):
        manager = CredentialManager(
            client_id="",
            client_secret="",
            redirect_uri="http://localhost:8000/authorize/callback",
            token_path=token_path,
        )

        with pytest.raises(AuthorizationExchangeError, match="not configured"):
            manager.begin_authorization()


class TestCompleteAuthorization:
    def test_persists_issued_tokens(self, credential_manager, token_path):
        with patch.object(credential_manager, "_exchange_code", return_value=issued()) as exchange:
            credential = credential_manager.complete_authorization("  auth-code  ")

        exchange.assert_called_once_with("auth-code")
        assert credential.access_token == "new-access"
        assert credential.refresh_token == "new-refresh"
        assert credential.expiry.tzinfo is not None
        assert credential_manager.state == CredentialState.AUTHENTICATED

        saved = json.loads(token_path.read_text())
        assert saved["access_token"] == "new-access"
        assert saved["refresh_token"] == "new-refresh"

    def test_reloads_after_restart(self, credential_manager, token_path):
        with patch.object(credential_manager, "_exchange_code", return_value=issued()):
            credential_manager.complete_authorization("auth-code")

        restarted = CredentialManager(
            client_id="id",
            client_secret="secret",
            redirect_uri="http://localhost/cb",
            token_path=token_path,
        )
        restarted.load()

        assert restarted.current_credential().access_token == "new-access"

    def test_keeps_previous_refresh_token(self, authenticated_manager):
        with patch.object(
            authenticated_manager, "_exchange_code", return_value=issued(refresh_token=None)
        ):
            credential = authenticated_manager.complete_authorization("auth-code")

        assert credential.refresh_token == "refresh-456"

    @pytest.mark.parametrize("code", ["", "   ", None])
    def test_blank_code(self, credential_manager, code):
        with patch.object(credential_manager, "_exchange_code") as exchange:
            with pytest.raises(ValidationError):
                credential_manager.complete_authorization(code)

        exchange.assert_not_called()

    def test_exchange_failure(self, credential_manager, token_path):
        with patch.object(
            credential_manager, "_exchange_code", side_effect=ValueError("invalid_grant")
        ):
            with pytest.raises(AuthorizationExchangeError) as exc_info:
                credential_manager.complete_authorization("stale-code")

        assert exc_info.value.details == "invalid_grant"
        assert credential_manager.is_authenticated() is False
        assert not token_path.exists()


class TestAuthorizedCredentials:
    def test_without_credential(self, credential_manager):
        with pytest.raises(UpstreamAuthError, match="/authorize"):
            credential_manager.authorized_credentials()

    def test_valid_token_not_refreshed(self, authenticated_manager):
        with patch.object(Credentials, "refresh") as refresh:
            credentials = authenticated_manager.authorized_credentials()

        refresh.assert_not_called()
        assert credentials.token == "access-123"
        assert credentials.refresh_token == "refresh-456"

    def test_expired_token_refreshed_and_persisted(self, credential_manager, token_path):
        credential_manager._store(Credential(
            access_token="old-access",
            refresh_token="refresh-456",
            expiry=datetime.now(UTC) - timedelta(minutes=5),
        ))

        def fake_refresh(self, request):
            self.token = "fresh-access"
            self.expiry = datetime.now(UTC).replace(tzinfo=None) + timedelta(hours=1)

        with patch.object(Credentials, "refresh", autospec=True, side_effect=fake_refresh):
            credentials = credential_manager.authorized_credentials()

        assert credentials.token == "fresh-access"
        assert credential_manager.state == CredentialState.REFRESHED
        current = credential_manager.current_credential()
        assert current.access_token == "fresh-access"
        assert current.refresh_token == "refresh-456"
        assert current.is_expired() is False
        assert json.loads(token_path.read_text())["access_token"] == "fresh-access"

    def test_refresh_failure(self, credential_manager):
        credential_manager._store(Credential(
            access_token="old-access",
            refresh_token="revoked",
            expiry=datetime.now(UTC) - timedelta(minutes=5),
        ))

        with patch.object(Credentials, "refresh", side_effect=RefreshError("invalid_grant")):
            with pytest.raises(UpstreamAuthError, match="refresh"):
                credential_manager.authorized_credentials()

    def test_expired_without_refresh_token(self, credential_manager):
        credential_manager._store(Credential(
            access_token="old-access",
            expiry=datetime.now(UTC) - timedelta(minutes=5),
        ))

        with pytest.raises(UpstreamAuthError, match="no refresh token"):
            credential_manager.authorized_credentials()


class TestCredential:
    def test_is_expired(self):
        now = datetime(2026, 1, 1, tzinfo=UTC)

        assert Credential(access_token="a").is_expired(now) is False
        assert Credential(access_token="a", expiry=now).is_expired(now) is True
        assert Credential(
            access_token="a", expiry=now + timedelta(seconds=1)
        ).is_expired(now) is False

    def test_from_google_marks_expiry_utc(self):
        credential = Credential.from_google(issued())

        assert credential.expiry.tzinfo is UTC
        assert credential.scopes == YOUTUBE_SCOPES

    def test_offset_expiry_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        credential = Credential(
            access_token="a", expiry=datetime(2026, 1, 1, 12, 0, tzinfo=plus_two)
        )

        assert credential.expiry == datetime(2026, 1, 1, 10, 0, tzinfo=UTC)
        assert credential.expiry.tzinfo is UTC

    def test_to_google_keeps_naive_utc_expiry(self, credential_manager):
        credential = Credential(access_token="a", expiry=datetime(2026, 1, 1, 12, 0))

        credentials = credential_manager._to_google(credential)

        assert credentials.expiry == datetime(2026, 1, 1, 12, 0)
