"""Request handling shared by the HTTP API, the CLI and the MCP server.

A request either yields a fully parsed reply or raises ``ApiError``; nothing
here touches the store.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from lifesim.assistant.llm import CompletionClient, OpenAICompletionClient, UpstreamError
from lifesim.assistant.prompts import build_chat_messages, build_import_messages
from lifesim.assistant.validator import (
    AssistantReply,
    ImportReply,
    ValidationContext,
    parse_assistant_response,
    parse_import_response,
)
from lifesim.utils.config import get_api_key, get_base_url, get_model

logger = logging.getLogger(__name__)

CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 1500
IMPORT_TEMPERATURE = 0.5
IMPORT_MAX_TOKENS = 3000


class ApiError(Exception):
    """A request failure with the HTTP status and JSON body to report."""

    def __init__(self, status_code: int, error: str, details: Any = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


def _default_client(api_key: str) -> CompletionClient:
    return OpenAICompletionClient(api_key=api_key, model=get_model(), base_url=get_base_url())


class AssistantService:
    def __init__(self, client_factory: Callable[[str], CompletionClient] = _default_client) -> None:
        self.client_factory = client_factory

    def _client(self) -> CompletionClient:
        api_key = get_api_key()
        if not api_key:
            raise ApiError(500, "OpenAI API key not configured")
        return self.client_factory(api_key)

    async def _complete(
        self,
        client: CompletionClient,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        failure: str,
    ) -> str:
        try:
            content = await client.complete(
                messages, temperature=temperature, max_tokens=max_tokens
            )
        except UpstreamError as e:
            raise ApiError(e.status_code, failure, e.details) from e
        if not content:
            raise ApiError(500, "No response from AI")
        return content

    async def chat(self, body: Any) -> AssistantReply:
        """Handle ``{message, conversationHistory, context}``."""
        client = self._client()
        if not isinstance(body, dict):
            raise ApiError(400, "Message is required")
        message = body.get("message")
        if not message or not isinstance(message, str):
            raise ApiError(400, "Message is required")
        history = body.get("conversationHistory")
        context = body.get("context") if isinstance(body.get("context"), dict) else {}

        messages = build_chat_messages(
            message, history if isinstance(history, list) else [], context
        )
        content = await self._complete(
            client, messages, CHAT_TEMPERATURE, CHAT_MAX_TOKENS, "Failed to get AI response"
        )
        return parse_assistant_response(content, ValidationContext.from_request(context))

    async def import_data(self, body: Any) -> ImportReply:
        """Handle ``{rawData}``."""
        client = self._client()
        raw_data = body.get("rawData") if isinstance(body, dict) else None
        if not isinstance(raw_data, str) or not raw_data.strip():
            raise ApiError(400, "Raw data is required")

        content = await self._complete(
            client,
            build_import_messages(raw_data),
            IMPORT_TEMPERATURE,
            IMPORT_MAX_TOKENS,
            "Failed to parse data",
        )
        return parse_import_response(content)
