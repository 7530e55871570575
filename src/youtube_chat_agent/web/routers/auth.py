"""OAuth authorization router for the delegated YouTube account."""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from youtube_chat_agent.auth.credentials import CredentialManager
from youtube_chat_agent.errors import AuthorizationExchangeError
from youtube_chat_agent.web.dependencies import get_credential_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

SUCCESS_PAGE = """<!doctype html>
<html>
  <head><title>YouTube connected</title></head>
  <body>
    <h2>YouTube Authentication Successful</h2>
    <p>You may now close this window.</p>
  </body>
</html>
"""


@router.get("/authorize")
async def authorize(
    credentials: CredentialManager = Depends(get_credential_manager),
) -> Response:
    """Redirect the user to Google's consent screen."""
    try:
        url = credentials.begin_authorization()
    except AuthorizationExchangeError as e:
        logger.error(f"OAuth URL generation error: {e}")
        return PlainTextResponse("OAuth initialization failed.", status_code=500)
    return RedirectResponse(url, status_code=302)


@router.get("/authorize/callback")
async def authorize_callback(
    code: str | None = None,
    credentials: CredentialManager = Depends(get_credential_manager),
) -> Response:
    """Exchange the authorization code and persist the issued tokens."""
    if not code or not code.strip():
        return PlainTextResponse("Missing authorization code.", status_code=400)

    try:
        credentials.complete_authorization(code)
    except AuthorizationExchangeError as e:
        logger.error(f"OAuth callback error: {e} details={e.details}")
        return PlainTextResponse(
            "Authentication failed. Start again from /authorize.", status_code=500
        )
    return HTMLResponse(SUCCESS_PAGE)


@router.get("/auth/status")
async def auth_status(
    credentials: CredentialManager = Depends(get_credential_manager),
) -> dict[str, Any]:
    """Whether a delegated account credential is loaded."""
    return {
        "authenticated": credentials.is_authenticated(),
        "state": credentials.state.value,
    }
