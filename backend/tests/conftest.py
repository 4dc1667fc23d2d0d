"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping

import httpx
import pytest

from app.config import CompletionSettings
from app.engine.errors import RequestFailed

SAMPLE_TEXT = "The meeting has been moved to Thursday afternoon."

COMPLETION_SETTINGS = CompletionSettings(
    api_key="sk-test",
    api_base_url="http://llm.test/v1",
    model_name="llama3",
    max_tokens=100,
)


def completion_body(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeCompleter:
    """Records every call; optionally holds calls open until `release` is set."""

    def __init__(self, reply: str = "Rewritten.", hold: bool = False, fail: bool = False) -> None:
        self.reply = reply
        self.fail = fail
        self.calls: list[tuple[str, dict[str, float]]] = []
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.active = 0
        self.max_active = 0
        if not hold:
            self.release.set()

    async def complete(
        self,
        text: str,
        parameters: Mapping[str, float | None],
        config: CompletionSettings,
    ) -> str:
        self.calls.append((text, dict(parameters)))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.started.set()
        try:
            await self.release.wait()
        finally:
            self.active -= 1
        if self.fail:
            raise RequestFailed("API responded with status 500", status_code=500)
        return f"{self.reply} #{len(self.calls)}"


class RecordingTransport:
    """httpx.MockTransport wrapper that remembers the requests it served."""

    def __init__(self, status_code: int = 200, payload: object | None = None, raise_error: bool = False) -> None:
        self.status_code = status_code
        self.payload = payload if payload is not None else completion_body("  Rewritten text.  ")
        self.raise_error = raise_error
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(self.status_code, json=self.payload)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def completion_settings() -> CompletionSettings:
    return COMPLETION_SETTINGS
