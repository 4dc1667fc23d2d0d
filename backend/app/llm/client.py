"""OpenAI-compatible chat-completion client over httpx."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from app.config import CompletionSettings, settings
from app.engine.errors import RequestFailed
from app.llm.prompts import build_completion_body
from app.models.responses import ModelInfo

logger = logging.getLogger(__name__)


class CompletionClient:
    """Talks to `{api_base_url}/chat/completions` and `{api_base_url}/models`.

    Every failure (transport error, non-2xx, unexpected body) is raised as
    RequestFailed. No retries.
    """

    def __init__(
        self,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = httpx.Timeout(timeout_s if timeout_s is not None else settings.request_timeout_s)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    @staticmethod
    def _url(config: CompletionSettings, path: str) -> str:
        return f"{config.api_base_url.rstrip('/')}/{path}"

    @staticmethod
    def _headers(config: CompletionSettings) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        }

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RequestFailed(f"{method} {url} failed: {e}") from e

        if not response.is_success:
            raise RequestFailed(
                f"API responded with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise RequestFailed(f"Malformed JSON from {url}") from e

    async def complete(
        self,
        text: str,
        parameters: Mapping[str, float | None],
        config: CompletionSettings,
    ) -> str:
        """Rewrite `text` with the given sampling parameters. Returns the trimmed content."""
        body = build_completion_body(text, parameters, config)
        data = await self._send(
            "POST",
            self._url(config, "chat/completions"),
            json=body,
            headers=self._headers(config),
        )
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise RequestFailed("Completion response has no choices[0].message.content") from e
        if not isinstance(content, str):
            raise RequestFailed("Completion content is not a string")
        logger.info("Completion ok (%d chars)", len(content))
        return content.strip()

    async def list_models(self, config: CompletionSettings) -> list[ModelInfo]:
        data = await self._send("GET", self._url(config, "models"), headers=self._headers(config))
        try:
            return [ModelInfo.model_validate(item) for item in data["data"]]
        except (KeyError, TypeError, ValidationError) as e:
            raise RequestFailed("Model list response has no valid `data` array") from e
