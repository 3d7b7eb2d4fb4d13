"""OpenRouter chat completions provider."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
from loguru import logger

from ..config import DEFAULT_BASE_URL, DEFAULT_MODEL
from ..prompts import PromptMessage
from .base import CompletionService, ProviderError


class OpenRouterProvider(CompletionService):
    """OpenAI-compatible chat completions API, OpenRouter by default."""

    PROVIDER_NAME = "OpenRouter"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            api_key: Bearer token sent with every request
            model: Model identifier, passed through as-is
            base_url: API base URL
            client: HTTP client to use (one is created when omitted)

        Raises:
            ValueError: If no API key is provided
        """
        if not api_key:
            raise ValueError(f"{self.PROVIDER_NAME} API key is required.")
        self.model = model
        self.base_url = base_url.rstrip("/") + "/"
        self._client = client or httpx.Client()
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def complete(self, messages: Sequence[PromptMessage], max_tokens: int) -> str:
        logger.debug(
            f"{self.PROVIDER_NAME} request: model={self.model}, "
            f"messages={len(messages)}, max_tokens={max_tokens}"
        )
        try:
            response = self._client.post(
                self.base_url + "chat/completions",
                headers=self._headers,
                json={
                    "model": self.model,
                    "messages": [m.to_dict() for m in messages],
                    "max_tokens": max_tokens,
                },
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"{self.PROVIDER_NAME} request failed: {e}") from e

        logger.debug(f"{self.PROVIDER_NAME} responded with {response.status_code}")
        if not response.is_success:
            raise ProviderError(
                f"{self.PROVIDER_NAME} API error ({response.status_code}): {response.text}"
            )

        content = self._extract_content(response)
        logger.debug(f"Completion is {len(content)} characters")
        return content.strip()

    def _extract_content(self, response: httpx.Response) -> str:
        """Pull the first choice's message content out of a response."""
        try:
            data: Any = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                f"Malformed {self.PROVIDER_NAME} response: {response.text[:200]}"
            ) from e

        if not isinstance(content, str):
            raise ProviderError(f"Malformed {self.PROVIDER_NAME} response: content is not text")
        return content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> OpenRouterProvider:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
