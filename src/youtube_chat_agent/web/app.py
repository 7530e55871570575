"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from youtube_chat_agent import __version__
from youtube_chat_agent.config.settings import get_settings
from youtube_chat_agent.errors import (
    AuthorizationExchangeError,
    UpstreamAuthError,
    UpstreamServiceError,
    ValidationError,
)
from youtube_chat_agent.web.middleware.rate_limit import RateLimitMiddleware
from youtube_chat_agent.web.routers import auth_router, chat_router, health_router, media_router
from youtube_chat_agent.web.schemas.errors import APIError, ErrorCode

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    settings = get_settings()
    logger.info(f"YouTube Chat Agent API v{__version__} starting up")
    logger.info(f"Debug mode: {settings.api_debug}")
    if not settings.google_api_key:
        logger.warning("GOOGLE_API_KEY is not configured - /chat will fail")
    if not settings.oauth_configured:
        logger.warning("OAuth client not configured - /authorize is unavailable")
    yield


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Reject malformed input with 400 before any upstream call."""
    if isinstance(exc, RequestValidationError):
        fields = [str(err["loc"][-1]) for err in exc.errors() if err.get("loc")]
        message = f"Invalid or missing field: {', '.join(fields)}" if fields else "Invalid request"
    else:
        message = str(exc)
    error = APIError(code=ErrorCode.INVALID_REQUEST, message=message)
    return JSONResponse(status_code=400, content=error.to_dict())


async def upstream_auth_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = APIError(code=ErrorCode.AUTHENTICATION_REQUIRED, message=str(exc))
    return JSONResponse(status_code=401, content=error.to_dict())


async def upstream_service_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report upstream failures with enough detail for operators."""
    assert isinstance(exc, UpstreamServiceError)
    logger.error(
        "upstream_error path=%s status=%s error=%s",
        request.url.path,
        exc.status_code,
        exc,
    )
    error = APIError(
        code=ErrorCode.UPSTREAM_ERROR,
        message=str(exc),
        details={"status_code": exc.status_code, "body": exc.details},
    )
    return JSONResponse(status_code=500, content=error.to_dict())


async def authorization_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, AuthorizationExchangeError)
    error = APIError(
        code=ErrorCode.AUTHORIZATION_FAILED,
        message=str(exc),
        details=exc.details,
    )
    return JSONResponse(status_code=500, content=error.to_dict())


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title="YouTube Chat Agent API",
        description="Chat with a Gemini agent that searches and manages YouTube videos",
        version=__version__,
        docs_url="/docs" if settings.api_debug else None,
        redoc_url="/redoc" if settings.api_debug else None,
        lifespan=lifespan,
    )

    # Configure CORS
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RateLimitMiddleware)

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(UpstreamAuthError, upstream_auth_error_handler)
    app.add_exception_handler(UpstreamServiceError, upstream_service_error_handler)
    app.add_exception_handler(AuthorizationExchangeError, authorization_error_handler)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(chat_router)
    app.include_router(media_router)

    return app
