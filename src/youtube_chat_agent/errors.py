"""Exception types raised across the chat agent."""

from typing import Any


class ChatAgentError(Exception):
    """Base class for all agent errors."""


class ValidationError(ChatAgentError):
    """A request or tool input failed validation before any network call."""


class EmptyInputError(ValidationError):
    """The user message was missing or blank after trimming."""


class InvalidArgumentsError(ValidationError):
    """Tool arguments supplied by the model were malformed or incomplete."""


class DuplicateToolError(ChatAgentError):
    """A tool with the same name is already registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Tool already registered: {tool_name}")
        self.tool_name = tool_name


class UnknownToolError(ChatAgentError):
    """The model requested a tool that is not registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class ToolExecutionError(ChatAgentError):
    """A tool handler raised while executing."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(f"{tool_name} failed: {message}")
        self.tool_name = tool_name


class UpstreamAuthError(ChatAgentError):
    """No usable credential for the delegated YouTube account."""


class UpstreamServiceError(ChatAgentError):
    """The language model or YouTube API rejected a request."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthorizationExchangeError(ChatAgentError):
    """The OAuth authorization code could not be exchanged for tokens."""

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.details = details
