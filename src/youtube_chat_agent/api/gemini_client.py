"""Google Gemini API client with tool use support."""

import json
import logging
from typing import Any
from uuid import uuid4

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from youtube_chat_agent.config.settings import get_settings
from youtube_chat_agent.errors import UpstreamServiceError
from youtube_chat_agent.models.conversation import (
    ConversationTurn,
    ModelReply,
    ToolCallRequest,
)
from youtube_chat_agent.tools.base import ToolDefinition

logger = logging.getLogger(__name__)


class GeminiClient:
    """Client for interacting with Gemini API with tool use."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        timeout_seconds: int | None = None,
    ):
        """Initialize the Gemini client.

        Args:
            api_key: Google API key. Defaults to settings.
            model: Model to use. Defaults to settings.
            max_tokens: Maximum output tokens per response. Defaults to settings.
            timeout_seconds: Per-request timeout. Defaults to settings.
        """
        settings = get_settings()
        self.api_key = api_key or settings.google_api_key
        self.model = model or settings.gemini_model
        self.max_tokens = max_tokens or settings.model_max_output_tokens
        self.timeout_seconds = timeout_seconds or settings.api_timeout_seconds
        self._client: genai.Client | None = None  # Lazy-loaded

    @property
    def client(self) -> genai.Client:
        """Lazy-load the Gemini client."""
        if self._client is None:
            self._client = genai.Client(
                api_key=self.api_key,
                # HttpOptions.timeout is in milliseconds
                http_options=types.HttpOptions(timeout=self.timeout_seconds * 1000),
            )
        return self._client

    async def generate(
        self,
        turns: list[ConversationTurn],
        tools: list[ToolDefinition] | None = None,
    ) -> ModelReply:
        """Send the conversation to Gemini and normalize the reply.

        Args:
            turns: Conversation so far. System turns become the system instruction.
            tools: Tool schemas the model may call. None offers no tools.

        Returns:
            ModelReply with text and any requested tool calls.

        Raises:
            UpstreamServiceError: If the Gemini request fails.
        """
        system = "\n\n".join(
            turn.content for turn in turns if turn.role == "system" and turn.content
        )
        config = types.GenerateContentConfig(
            max_output_tokens=self.max_tokens,
            system_instruction=system or None,
        )
        if tools:
            config.tools = self.convert_tool_definitions(tools)  # type: ignore[assignment]
            # We dispatch function calls ourselves
            config.automatic_function_calling = types.AutomaticFunctionCallingConfig(
                disable=True
            )
            config.tool_config = types.ToolConfig(
                function_calling_config=types.FunctionCallingConfig(
                    mode=types.FunctionCallingConfigMode.AUTO
                )
            )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=self.convert_turns(turns),  # type: ignore[arg-type]
                config=config,
            )
        except genai_errors.APIError as e:
            raise UpstreamServiceError(
                f"Gemini API error: {e.message or e}",
                status_code=getattr(e, "code", None),
                details=getattr(e, "details", None) or str(e),
            ) from e

        return ModelReply(
            text=self.get_text_response(response),
            tool_calls=self.get_tool_calls(response),
            provider_content=self.get_response_content(response),
            usage=self.get_usage_metadata(response),
        )

    def convert_turns(self, turns: list[ConversationTurn]) -> list[types.Content]:
        """Convert conversation turns to Gemini Content objects.

        Consecutive tool turns are merged into one user Content, the way
        Gemini expects function responses for a single model turn.

        Args:
            turns: Conversation turns.

        Returns:
            List of Gemini Content objects.
        """
        contents: list[types.Content] = []
        pending_responses: list[types.Part] = []

        def flush_responses() -> None:
            if pending_responses:
                contents.append(types.Content(role="user", parts=list(pending_responses)))
                pending_responses.clear()

        for turn in turns:
            if turn.role == "system":
                continue

            if turn.role == "tool":
                pending_responses.append(types.Part(
                    function_response=types.FunctionResponse(
                        id=turn.tool_call_id,
                        name=turn.tool_name or "",
                        response={"result": turn.content or ""},
                    )
                ))
                continue

            flush_responses()

            if turn.role == "assistant":
                if isinstance(turn.provider_content, types.Content):
                    # Preserves thought signatures on function call parts
                    contents.append(turn.provider_content)
                    continue
                parts: list[types.Part] = []
                if turn.content:
                    parts.append(types.Part(text=turn.content))
                for call in turn.tool_calls:
                    parts.append(types.Part(
                        function_call=types.FunctionCall(
                            id=call.id,
                            name=call.tool_name,
                            args=_decode_args(call.raw_arguments),
                        )
                    ))
                contents.append(types.Content(role="model", parts=parts))
            else:
                contents.append(
                    types.Content(role="user", parts=[types.Part(text=turn.content or "")])
                )

        flush_responses()
        return contents

    def convert_tool_definitions(
        self,
        tools: list[ToolDefinition],
    ) -> list[types.Tool]:
        """Convert tool definitions to Gemini format.

        Args:
            tools: Registered tool definitions.

        Returns:
            List of Gemini Tool objects.
        """
        declarations = [
            types.FunctionDeclaration(
                name=tool.name,
                description=tool.description,
                parameters_json_schema=tool.parameter_schema,
            )
            for tool in tools
        ]
        return [types.Tool(function_declarations=declarations)]

    def get_text_response(self, response: types.GenerateContentResponse) -> str | None:
        """Extract text from Gemini's response.

        Args:
            response: Gemini's response.

        Returns:
            Text content or None if no text.
        """
        if not response.candidates or not response.candidates[0].content:
            return None

        text_parts = []
        parts = response.candidates[0].content.parts
        if parts:
            for part in parts:
                if part.text and not part.thought:
                    text_parts.append(part.text)

        return "\n".join(text_parts) if text_parts else None

    def get_tool_calls(self, response: types.GenerateContentResponse) -> list[ToolCallRequest]:
        """Extract function calls from Gemini's response.

        Gemini does not always assign call ids; missing ids are generated so
        every tool turn can reference the call it answers.

        Args:
            response: Gemini's response.

        Returns:
            Tool call requests in the order the model listed them.
        """
        tool_calls: list[ToolCallRequest] = []

        if not response.candidates or not response.candidates[0].content:
            return tool_calls

        parts = response.candidates[0].content.parts
        if parts:
            for part in parts:
                call = part.function_call
                if call and call.name:
                    tool_calls.append(ToolCallRequest(
                        id=call.id or f"call_{uuid4().hex[:24]}",
                        tool_name=call.name,
                        raw_arguments=json.dumps(dict(call.args) if call.args else {}),
                    ))

        return tool_calls

    def get_response_content(self, response: types.GenerateContentResponse) -> types.Content | None:
        """Get the full content from response (preserves thought signatures).

        Args:
            response: Gemini's response.

        Returns:
            The Content object from the response, or None.
        """
        if not response.candidates or not response.candidates[0].content:
            return None
        return response.candidates[0].content

    def get_usage_metadata(self, response: types.GenerateContentResponse) -> dict[str, int]:
        """Extract token usage from Gemini response.

        Args:
            response: Gemini's response.

        Returns:
            Dict with input_tokens, output_tokens, and total_tokens.
        """
        usage = {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}
        if hasattr(response, "usage_metadata") and response.usage_metadata:
            metadata = response.usage_metadata
            usage["input_tokens"] = getattr(metadata, "prompt_token_count", 0) or 0
            usage["output_tokens"] = getattr(metadata, "candidates_token_count", 0) or 0
            usage["total_tokens"] = getattr(metadata, "total_token_count", 0) or 0
        return usage


def _decode_args(raw_arguments: str) -> dict[str, Any]:
    try:
        value = json.loads(raw_arguments or "{}")
    except json.JSONDecodeError:
        return {"raw_arguments": raw_arguments}
    return value if isinstance(value, dict) else {"value": value}
