"""YouTube tools exposed to the model."""

import math
from typing import Any

from youtube_chat_agent.api.youtube_service import YouTubeService
from youtube_chat_agent.errors import InvalidArgumentsError
from youtube_chat_agent.tools.base import BaseTool, ToolResult

SEARCH_TOOL_NAME = "youtube_search"
WATCH_HISTORY_TOOL_NAME = "youtube_watch_history"


def _coerce_int(value: Any, field: str) -> int:
    """Accept integers, integral floats and numeric strings.

    Gemini delivers every JSON number as a float, so ``5.0`` is valid.
    """
    if isinstance(value, bool):
        raise InvalidArgumentsError(f"Invalid type for {field}: expected integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise InvalidArgumentsError(f"Invalid type for {field}: expected integer")


class YouTubeSearchTool(BaseTool):
    """Keyword search over public YouTube videos."""

    def __init__(
        self,
        service: YouTubeService,
        default_max_results: int = 6,
        max_results_limit: int = 10,
    ) -> None:
        """Initialize the search tool.

        Args:
            service: YouTube API facade.
            default_max_results: Result count when the model omits maxResults.
            max_results_limit: Upper clamp for maxResults.
        """
        self.service = service
        self.max_results_limit = max(1, max_results_limit)
        self.default_max_results = min(max(1, default_max_results), self.max_results_limit)

    def health_check(self) -> tuple[bool, str | None]:
        """Check if YouTube API key is configured."""
        if not self.service.api_key:
            return False, "YOUTUBE_API_KEY is not configured"
        return True, None

    @property
    def name(self) -> str:
        return SEARCH_TOOL_NAME

    @property
    def description(self) -> str:
        return (
            "Search YouTube videos by keyword and return a list of relevant videos "
            "including id, title, description, thumbnail and channel."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": (
                        'Search query or topic, e.g. "Kubernetes basics" or "DevOps tutorials".'
                    ),
                },
                "maxResults": {
                    "type": "integer",
                    "description": (
                        f"Maximum number of videos to return (default "
                        f"{self.default_max_results}, max {self.max_results_limit})."
                    ),
                    "minimum": 1,
                    "maximum": self.max_results_limit,
                },
            },
            "required": ["query"],
        }

    def prepare_arguments(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Require a non-empty query and clamp maxResults into range."""
        query = arguments.get("query")
        if not isinstance(query, str) or not query.strip():
            raise InvalidArgumentsError("Missing required field: query")

        raw_max = arguments.get("maxResults", arguments.get("max_results"))
        if raw_max is None:
            max_results = self.default_max_results
        else:
            max_results = min(max(_coerce_int(raw_max, "maxResults"), 1), self.max_results_limit)

        return {"query": query.strip(), "max_results": max_results}

    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute YouTube search.

        Args:
            query: Search query.
            max_results: Number of videos to return.

        Returns:
            ToolResult whose data is a list of VideoSummary.
        """
        videos = await self.service.search_videos(kwargs["query"], kwargs["max_results"])
        return ToolResult.ok(videos[: kwargs["max_results"]])


class YouTubeWatchHistoryTool(BaseTool):
    """Recently watched videos on the connected account."""

    MAX_LIMIT = 25

    def __init__(self, service: YouTubeService) -> None:
        self.service = service

    def health_check(self) -> tuple[bool, str | None]:
        if not self.service.credentials.is_authenticated():
            return False, "YouTube account not connected (visit /authorize)"
        return True, None

    @property
    def name(self) -> str:
        return WATCH_HISTORY_TOOL_NAME

    @property
    def description(self) -> str:
        return (
            "List videos the user recently watched on their connected YouTube account. "
            "Use when the user asks about their own history or wants suggestions based on it. "
            "Requires the user to have connected their account."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": f"How many recent videos to list (1-{self.MAX_LIMIT}).",
                    "minimum": 1,
                    "maximum": self.MAX_LIMIT,
                },
            },
        }

    def prepare_arguments(self, arguments: dict[str, Any]) -> dict[str, Any]:
        raw_limit = arguments.get("limit")
        if raw_limit is None:
            return {"limit": 10}
        return {"limit": min(max(_coerce_int(raw_limit, "limit"), 1), self.MAX_LIMIT)}

    async def execute(self, **kwargs: Any) -> ToolResult:
        videos = await self.service.watch_history()
        return ToolResult.ok(videos[: kwargs["limit"]])
