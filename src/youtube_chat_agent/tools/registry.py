"""Tool registry for managing and executing tools."""

import json
import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from youtube_chat_agent.errors import (
    DuplicateToolError,
    InvalidArgumentsError,
    ToolExecutionError,
    UnknownToolError,
)
from youtube_chat_agent.tools.base import (
    BaseTool,
    FunctionTool,
    ToolDefinition,
    ToolHandler,
    ToolResult,
)

if TYPE_CHECKING:
    from youtube_chat_agent.api.youtube_service import YouTubeService
    from youtube_chat_agent.config.settings import Settings

logger = logging.getLogger(__name__)


def parse_arguments(arguments_json: str | None) -> dict[str, Any]:
    """Decode model-supplied tool arguments.

    Args:
        arguments_json: JSON object text. Empty text means no arguments.

    Returns:
        Decoded arguments.

    Raises:
        InvalidArgumentsError: If the text is not a JSON object.
    """
    if arguments_json is None or not arguments_json.strip():
        return {}
    try:
        decoded = json.loads(arguments_json)
    except json.JSONDecodeError as e:
        raise InvalidArgumentsError(f"Tool arguments are not valid JSON: {e.msg}") from e
    if not isinstance(decoded, dict):
        raise InvalidArgumentsError("Tool arguments must be a JSON object")
    return decoded


class ToolRegistry:
    """Registry for managing all available tools."""

    def __init__(self) -> None:
        """Initialize empty tool registry."""
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool.

        Args:
            tool: Tool instance to register.

        Raises:
            DuplicateToolError: If a tool with the same name is registered.
        """
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        self._tools[tool.name] = tool

    def register_handler(self, definition: ToolDefinition, handler: ToolHandler) -> None:
        """Register a plain async handler under ``definition``."""
        self.register(FunctionTool(definition, handler))

    def register_all(self, tools: list[BaseTool]) -> None:
        """Register multiple tools.

        Args:
            tools: List of tool instances to register.
        """
        for tool in tools:
            self.register(tool)

    def get(self, tool_name: str) -> BaseTool | None:
        """Get a tool by name.

        Args:
            tool_name: Name of tool to retrieve.

        Returns:
            Tool instance or None if not found.
        """
        return self._tools.get(tool_name)

    def has(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def list_tools(self) -> list[str]:
        """Get registered tool names in registration order."""
        return list(self._tools.keys())

    def get_schemas(self) -> list[ToolDefinition]:
        """Get all tool definitions in registration order."""
        return [tool.to_tool_definition() for tool in self._tools.values()]

    def check_health(self) -> dict[str, dict[str, Any]]:
        """Check health of all registered tools.

        Returns:
            Dict mapping tool name to ``{"healthy": bool, "error": str | None}``.
        """
        results: dict[str, dict[str, Any]] = {}
        for name, tool in self._tools.items():
            is_healthy, error = tool.health_check()
            results[name] = {
                "healthy": is_healthy,
                "error": error,
            }
        return results

    def log_health_status(self) -> None:
        """Log a warning for every misconfigured tool."""
        for name, status in self.check_health().items():
            if not status["healthy"]:
                logger.warning(f"Tool health check failed: {status['error']} (affects: {name})")

    async def invoke(self, tool_name: str, arguments_json: str | None) -> ToolResult:
        """Execute a tool by name with model-supplied JSON arguments.

        Args:
            tool_name: Name of tool to execute.
            arguments_json: Raw JSON argument text from the model.

        Returns:
            ToolResult from execution.

        Raises:
            UnknownToolError: If ``tool_name`` is not registered.
            InvalidArgumentsError: If the arguments are malformed or invalid.
            ToolExecutionError: If the tool handler raises.
        """
        tool = self._tools.get(tool_name)
        if tool is None:
            raise UnknownToolError(tool_name)

        arguments = tool.prepare_arguments(parse_arguments(arguments_json))

        try:
            return await tool.execute(**arguments)
        except Exception as e:
            logger.warning("tool_execution_failed tool=%s error=%s", tool_name, e)
            raise ToolExecutionError(tool_name, str(e)) from e

    def __len__(self) -> int:
        """Get number of registered tools."""
        return len(self._tools)

    def __contains__(self, tool_name: str) -> bool:
        """Check if tool is registered."""
        return tool_name in self._tools

    def __iter__(self) -> Iterator[BaseTool]:
        """Iterate over tools."""
        return iter(self._tools.values())


def create_default_registry(
    service: "YouTubeService",
    settings: "Settings | None" = None,
) -> ToolRegistry:
    """Create a registry with all default tools.

    Args:
        service: YouTube API facade shared by the tools.
        settings: Settings instance. Defaults to the cached settings.

    Returns:
        ToolRegistry with standard tools registered.
    """
    from youtube_chat_agent.config.settings import get_settings
    from youtube_chat_agent.tools.youtube import YouTubeSearchTool, YouTubeWatchHistoryTool

    settings = settings or get_settings()
    registry = ToolRegistry()
    registry.register_all([
        YouTubeSearchTool(
            service,
            default_max_results=settings.search_default_max_results,
            max_results_limit=settings.search_max_results_limit,
        ),
        YouTubeWatchHistoryTool(service),
    ])
    return registry
