"""Middleware for the API."""

from youtube_chat_agent.web.middleware.rate_limit import RateLimitMiddleware

__all__ = ["RateLimitMiddleware"]
