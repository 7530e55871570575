"""Ephemeral result caching."""

from youtube_chat_agent.cache.expiring import CacheEntry, ExpiringCache

__all__ = ["CacheEntry", "ExpiringCache"]
