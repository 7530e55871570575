"""Tools for Gemini function calling."""

from youtube_chat_agent.tools.base import BaseTool, FunctionTool, ToolDefinition, ToolResult
from youtube_chat_agent.tools.registry import ToolRegistry

__all__ = ["BaseTool", "FunctionTool", "ToolDefinition", "ToolResult", "ToolRegistry"]
