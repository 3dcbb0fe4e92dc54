"""Chat-completion clients. Only the OpenAI one talks to the network."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import openai

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """The completion API answered with a non-2xx status or could not be reached."""

    def __init__(self, status_code: int, details: Any = None) -> None:
        super().__init__(f"Completion API error {status_code}")
        self.status_code = status_code
        self.details = details if details is not None else {}


class CompletionClient(ABC):
    @abstractmethod
    async def complete(
        self, messages: list[dict[str, str]], *, temperature: float, max_tokens: int
    ) -> str | None:
        """Return the content of the first choice (None if the model sent nothing)."""


class OpenAICompletionClient(CompletionClient):
    """JSON-mode chat completions through ``openai.AsyncOpenAI``, no retries."""

    def __init__(
        self, api_key: str, model: str, base_url: str | None = None, http_client: Any = None
    ) -> None:
        self.model = model
        self._client = openai.AsyncOpenAI(
            api_key=api_key, base_url=base_url, max_retries=0, http_client=http_client
        )

    async def complete(
        self, messages: list[dict[str, str]], *, temperature: float, max_tokens: int
    ) -> str | None:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.APIStatusError as e:
            logger.error("Completion API returned %s: %s", e.status_code, e.body)
            raise UpstreamError(e.status_code, e.body) from e
        except openai.APIConnectionError as e:
            logger.error("Completion API unreachable: %s", e)
            raise UpstreamError(502, {"message": str(e)}) from e
        if not response.choices:
            return None
        return response.choices[0].message.content
