"""Configuration module."""

from youtube_chat_agent.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
