"""Rate limiting middleware using token bucket algorithm."""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from youtube_chat_agent.config.settings import get_settings
from youtube_chat_agent.web.schemas.errors import APIError, ErrorCode

logger = logging.getLogger(__name__)


@dataclass
class TokenBucket:
    """Token bucket for rate limiting."""

    capacity: float
    tokens: float = field(init=False)
    refill_rate: float  # tokens per second
    last_refill: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        self.tokens = self.capacity

    def consume(self, tokens: float = 1) -> bool:
        """Try to consume tokens. Returns True if successful."""
        now = time.time()
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def time_until_available(self, tokens: float = 1) -> float:
        """Calculate seconds until tokens will be available."""
        if self.tokens >= tokens:
            return 0
        needed = tokens - self.tokens
        return needed / self.refill_rate


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client token bucket limiting for the chat and media endpoints.

    Runs before routing, so a throttled client gets 429 on /media/* even
    when no account is connected. Buckets idle for a full refill window are
    dropped; a fresh bucket is indistinguishable from a refilled one.
    """

    # Only these prefixes call paid or quota-limited upstreams
    LIMITED_PREFIXES = ("/chat", "/media")

    def __init__(self, app: Any, rpm: int | None = None) -> None:
        super().__init__(app)
        settings = get_settings()
        self.rpm = rpm or settings.rate_limit_rpm
        self.enabled = settings.rate_limit_enabled
        # bucket per client address
        self._buckets: dict[str, TokenBucket] = {}
        self._last_prune = time.time()

    def _bucket_for(self, client_key: str) -> TokenBucket:
        bucket = self._buckets.get(client_key)
        if bucket is None:
            bucket = TokenBucket(
                capacity=float(self.rpm),
                refill_rate=self.rpm / 60.0,  # refill over a minute
            )
            self._buckets[client_key] = bucket
        return bucket

    def _prune_idle(self, now: float) -> None:
        """Drop buckets untouched for at least a minute."""
        if now - self._last_prune < 60:
            return
        self._last_prune = now
        idle = [key for key, b in self._buckets.items() if now - b.last_refill >= 60]
        for key in idle:
            del self._buckets[key]

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Apply rate limiting."""
        if not self.enabled or not request.url.path.startswith(self.LIMITED_PREFIXES):
            return await call_next(request)

        client_key = request.client.host if request.client else "anonymous"
        self._prune_idle(time.time())
        bucket = self._bucket_for(client_key)

        if not bucket.consume(1):
            retry_after = bucket.time_until_available(1)
            logger.warning("rate_limited client=%s path=%s", client_key, request.url.path)
            error = APIError(
                code=ErrorCode.RATE_LIMITED,
                message=f"Rate limit exceeded. Try again in {retry_after:.1f}s",
                details={"retry_after_seconds": round(retry_after, 1)},
            )
            response = JSONResponse(status_code=429, content=error.to_dict())
            response.headers["Retry-After"] = str(int(retry_after) + 1)
            return response

        return await call_next(request)
