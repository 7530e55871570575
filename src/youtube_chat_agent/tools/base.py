"""Base tool interface for Gemini function calling."""

import json
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from youtube_chat_agent.errors import InvalidArgumentsError


class ToolDefinition(BaseModel):
    """Machine-readable description of a tool offered to the model."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameter_schema: dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Result from tool execution."""

    success: bool = True
    data: Any = None
    error: str | None = None
    result_type: Literal["success", "no_results", "error"] = "success"

    @classmethod
    def ok(cls, data: Any) -> "ToolResult":
        """Create a successful result.

        Empty lists are reported as ``no_results`` so the model can say
        nothing matched instead of inventing videos.
        """
        if isinstance(data, list) and not data:
            return cls(success=True, data=data, result_type="no_results")
        return cls(success=True, data=data, result_type="success")

    @classmethod
    def fail(cls, error: str) -> "ToolResult":
        """Create a failed result."""
        return cls(success=False, error=error, result_type="error")

    def to_string(self) -> str:
        """Convert result to string for the model."""
        if not self.success:
            return f"Error: {self.error}"
        if isinstance(self.data, str):
            return self.data
        return json.dumps(_jsonable(self.data), indent=2, default=str)


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list | tuple):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    return value


class BaseTool(ABC):
    """Base class for all tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name for function calling."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description explaining when and how to use it."""
        pass

    @property
    @abstractmethod
    def input_schema(self) -> dict[str, Any]:
        """JSON schema for tool input parameters."""
        pass

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute the tool with given parameters.

        Args:
            **kwargs: Tool input parameters, already validated.

        Returns:
            ToolResult with success status and data/error.
        """
        pass

    def to_tool_definition(self) -> ToolDefinition:
        """Describe this tool for function calling."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameter_schema=self.input_schema,
        )

    def health_check(self) -> tuple[bool, str | None]:
        """Check if the tool is properly configured and ready to use.

        Override this method in tools that require API keys or other configuration.

        Returns:
            Tuple of (is_healthy, error_message).
        """
        return True, None

    def prepare_arguments(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Validate and normalize decoded arguments before execution.

        Args:
            arguments: Arguments decoded from the model's JSON.

        Returns:
            Keyword arguments for ``execute``.

        Raises:
            InvalidArgumentsError: If the arguments do not match the schema.
        """
        is_valid, error = self.validate_input(**arguments)
        if not is_valid:
            raise InvalidArgumentsError(error or "Invalid input")
        return arguments

    def validate_input(self, **kwargs: Any) -> tuple[bool, str | None]:
        """Validate input parameters against schema.

        Args:
            **kwargs: Input parameters to validate.

        Returns:
            Tuple of (is_valid, error_message).
        """
        schema = self.input_schema
        required = schema.get("required", [])

        for field in required:
            if field not in kwargs or kwargs[field] is None:
                return False, f"Missing required field: {field}"

        properties = schema.get("properties", {})
        for key, value in kwargs.items():
            if key in properties:
                prop_schema = properties[key]

                expected_type = prop_schema.get("type")
                if expected_type and not self._check_type(value, expected_type):
                    return False, f"Invalid type for {key}: expected {expected_type}"

                allowed_values = prop_schema.get("enum")
                if allowed_values is not None and value not in allowed_values:
                    return False, (
                        f"Invalid value for {key}: '{value}'. "
                        f"Allowed values: {allowed_values}"
                    )

        return True, None

    def _check_type(self, value: Any, expected_type: str) -> bool:
        """Check if value matches expected JSON schema type."""
        if expected_type in ("integer", "number") and isinstance(value, bool):
            return False
        type_map = {
            "string": str,
            "integer": int,
            "number": (int, float),
            "boolean": bool,
            "array": list,
            "object": dict,
        }
        expected = type_map.get(expected_type)
        if expected is None:
            return True  # Unknown type, allow
        return isinstance(value, expected)  # type: ignore[arg-type]


ToolHandler = Callable[..., Awaitable[Any]]


class FunctionTool(BaseTool):
    """Adapts a plain async handler and a definition to the tool interface."""

    def __init__(self, definition: ToolDefinition, handler: ToolHandler) -> None:
        self._definition = definition
        self._handler = handler

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def description(self) -> str:
        return self._definition.description

    @property
    def input_schema(self) -> dict[str, Any]:
        return self._definition.parameter_schema

    def to_tool_definition(self) -> ToolDefinition:
        return self._definition

    async def execute(self, **kwargs: Any) -> ToolResult:
        result = await self._handler(**kwargs)
        if isinstance(result, ToolResult):
            return result
        return ToolResult.ok(result)
