"""Tests for the completion client against a mocked HTTP transport."""

from __future__ import annotations

import asyncio

import pytest

from app.engine.errors import RequestFailed
from app.llm.client import CompletionClient
from app.llm.prompts import REWRITE_SYSTEM_PROMPT, build_completion_body
from app.models.responses import ModelInfo
from tests.conftest import COMPLETION_SETTINGS, SAMPLE_TEXT, RecordingTransport


def _complete(transport: RecordingTransport, parameters=None, config=COMPLETION_SETTINGS) -> str:
    client = CompletionClient(timeout_s=5, transport=transport.transport)
    return asyncio.run(client.complete(SAMPLE_TEXT, parameters or {}, config))


class TestComplete:
    def test_posts_to_chat_completions_with_bearer(self):
        transport = RecordingTransport()
        _complete(transport)
        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "http://llm.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["Content-Type"] == "application/json"

    def test_trailing_slash_in_base_url(self):
        transport = RecordingTransport()
        config = COMPLETION_SETTINGS.model_copy(update={"api_base_url": "http://llm.test/v1/"})
        _complete(transport, config=config)
        assert str(transport.requests[0].url) == "http://llm.test/v1/chat/completions"

    def test_body_shape(self):
        transport = RecordingTransport()
        _complete(transport, {"temperature": 1.25, "top_k": 40.0})
        body = transport.last_json()
        assert body["model"] == "llama3"
        assert body["max_tokens"] == 100
        assert body["temperature"] == 1.25
        assert body["top_k"] == 40.0
        assert body["messages"][0] == {"role": "system", "content": REWRITE_SYSTEM_PROMPT}
        assert body["messages"][1] == {
            "role": "user",
            "content": f'Rewrite the following text: "{SAMPLE_TEXT}"',
        }

    def test_content_is_trimmed(self):
        assert _complete(RecordingTransport()) == "Rewritten text."

    def test_non_2xx_fails(self):
        with pytest.raises(RequestFailed) as exc:
            _complete(RecordingTransport(status_code=503, payload={"error": "overloaded"}))
        assert exc.value.status_code == 503

    def test_transport_error_fails(self):
        with pytest.raises(RequestFailed):
            _complete(RecordingTransport(raise_error=True))

    @pytest.mark.parametrize(
        "payload",
        [{"choices": []}, {"nothing": True}, {"choices": [{"message": {"content": None}}]}],
    )
    def test_malformed_body_fails(self, payload):
        with pytest.raises(RequestFailed):
            _complete(RecordingTransport(payload=payload))


class TestListModels:
    def test_parses_models(self):
        transport = RecordingTransport(
            payload={
                "object": "list",
                "data": [
                    {"id": "llama3", "object": "model", "created": 1700000000, "owned_by": "library"},
                    {"id": "mistral", "object": "model", "created": 1700000001, "owned_by": "library"},
                ],
            }
        )
        client = CompletionClient(transport=transport.transport)
        models = asyncio.run(client.list_models(COMPLETION_SETTINGS))
        assert [m.id for m in models] == ["llama3", "mistral"]
        assert isinstance(models[0], ModelInfo)
        assert transport.requests[0].method == "GET"
        assert str(transport.requests[0].url) == "http://llm.test/v1/models"

    def test_http_error(self):
        client = CompletionClient(transport=RecordingTransport(status_code=401).transport)
        with pytest.raises(RequestFailed):
            asyncio.run(client.list_models(COMPLETION_SETTINGS))

    def test_missing_data(self):
        client = CompletionClient(transport=RecordingTransport(payload={"models": []}).transport)
        with pytest.raises(RequestFailed):
            asyncio.run(client.list_models(COMPLETION_SETTINGS))


class TestBuildBody:
    def test_unset_parameters_omitted(self):
        body = build_completion_body("text", {"temperature": 0.5, "top_p": None}, COMPLETION_SETTINGS)
        assert "top_p" not in body
        assert body["temperature"] == 0.5

    def test_seed_only_when_configured(self):
        assert "seed" not in build_completion_body("text", {}, COMPLETION_SETTINGS)
        seeded = COMPLETION_SETTINGS.model_copy(update={"seed": 1337})
        assert build_completion_body("text", {}, seeded)["seed"] == 1337

    def test_parameters_cannot_override_fixed_fields(self):
        body = build_completion_body("text", {"max_tokens": 5.0, "model": 1.0}, COMPLETION_SETTINGS)
        assert body["max_tokens"] == 100
        assert body["model"] == "llama3"
