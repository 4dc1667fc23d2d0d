"""Tests for API endpoints (completion endpoint faked — no network)."""

from __future__ import annotations

import time

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.llm.client import CompletionClient
from app.main import create_app
from tests.conftest import SAMPLE_TEXT, FakeCompleter, RecordingTransport


def _config(**overrides) -> Settings:
    return Settings(_env_file=None, debounce_ms=20, **overrides)


@pytest.fixture
def fake_completer() -> FakeCompleter:
    return FakeCompleter(reply="Polished")


@pytest.fixture
def client(fake_completer):
    app = create_app(config=_config(), completion_client=fake_completer)
    with TestClient(app) as c:
        yield c


def _wait_for_idle(client: TestClient, timeout: float = 2.0) -> dict:
    deadline = time.monotonic() + timeout
    while True:
        data = client.get("/api/session").json()
        if data["generation"]["state"] == "idle" or time.monotonic() > deadline:
            return data
        time.sleep(0.02)


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["parameters_registered"] == 14


def test_prompts(client):
    data = client.get("/api/prompts").json()
    assert "DO NOT mention" in data["rewrite_system"]


def test_parameter_catalog(client):
    data = client.get("/api/parameters").json()
    assert [p["key"] for p in data][:2] == ["temperature", "top_p"]
    temp = data[0]
    assert temp["name"] == "Temperature"
    assert (temp["min"], temp["max"], temp["default"]) == (0, 2, 0.7)
    defaults = client.get("/api/parameters/defaults").json()
    assert defaults["grid"] == ["temperature", "top_p"]
    assert len(defaults["polygon"]) == 5


def test_initial_session(client):
    data = client.get("/api/session").json()
    assert data["surface"] == "rectangle"
    assert data["axes"] == ["temperature", "top_p"]
    assert data["parameters"]["temperature"] == 0.7
    assert data["generation"]["state"] == "idle"
    assert data["generation"]["current"] is None


class TestSliders:
    def test_accepts_in_range(self, client):
        response = client.put("/api/session/parameters/top_p", json={"value": 0.456})
        assert response.status_code == 200
        assert response.json()["parameters"]["top_p"] == 0.46

    def test_rejects_out_of_range(self, client):
        response = client.put("/api/session/parameters/temperature", json={"value": 5.0})
        assert response.status_code == 422
        assert client.get("/api/session").json()["parameters"]["temperature"] == 0.7

    def test_unknown_key_is_404(self, client):
        response = client.put("/api/session/parameters/beam_width", json={"value": 1})
        assert response.status_code == 404

    def test_clamp_policy(self, fake_completer):
        app = create_app(config=_config(slider_out_of_range="clamp"), completion_client=fake_completer)
        with TestClient(app) as c:
            response = c.put("/api/session/parameters/temperature", json={"value": 5.0})
        assert response.status_code == 200
        assert response.json()["parameters"]["temperature"] == 2.0

    def test_reset_and_unset(self, client):
        client.put("/api/session/parameters/temperature", json={"value": 1.5})
        data = client.delete("/api/session/parameters/top_k").json()
        assert "top_k" not in data["parameters"]
        data = client.delete("/api/session/parameters").json()
        assert data["parameters"]["temperature"] == 0.7
        assert data["parameters"]["top_k"] == 50


class TestPointer:
    def test_normalized_centre(self, client):
        response = client.post("/api/session/pointer", json={"x": 0.5, "y": 0.5, "normalized": True})
        assert response.status_code == 200
        data = response.json()
        assert data["updated"] == {"temperature": 1.0, "top_p": 0.5}
        assert data["parameters"]["temperature"] == 1.0

    def test_polygon_centre(self, client):
        client.put("/api/session/surface", json={"kind": "polygon", "slot_count": 2})
        data = client.post("/api/session/pointer", json={"x": 300, "y": 300}).json()
        assert data["updated"] == {"temperature": 1.0, "top_p": 0.5}
        assert data["marker"] == [300.0, 300.0]

    def test_normalized_on_polygon_is_422(self, client):
        client.put("/api/session/surface", json={"kind": "polygon", "slot_count": 5})
        response = client.post("/api/session/pointer", json={"x": 0.5, "y": 0.5, "normalized": True})
        assert response.status_code == 422


class TestSurface:
    def test_five_slot_polygon(self, client):
        data = client.put("/api/session/surface", json={"kind": "polygon", "slot_count": 5}).json()
        assert data["slot_count"] == 5
        assert data["axes"] == ["temperature", "top_p", "top_k", "frequency_penalty", "presence_penalty"]

    def test_slot_count_validated(self, client):
        response = client.put("/api/session/surface", json={"kind": "polygon", "slot_count": 7})
        assert response.status_code == 422

    def test_assign_axis(self, client):
        data = client.put("/api/session/axes/1", json={"key": "mirostat_tau"}).json()
        assert data["axes"] == ["temperature", "mirostat_tau"]

    def test_assign_axis_unknown_key(self, client):
        assert client.put("/api/session/axes/0", json={"key": "nope"}).status_code == 404

    def test_assign_axis_bad_slot(self, client):
        assert client.put("/api/session/axes/4", json={"key": "top_k"}).status_code == 422

    def test_geometry(self, client):
        client.put("/api/session/surface", json={"kind": "polygon", "slot_count": 5})
        data = client.get("/api/session/surface/geometry").json()
        assert len(data["outline"]) == 10
        assert len(data["anchors"]) == 5
        assert data["outline_path"].endswith("Z")


class TestGeneration:
    def test_short_text_stays_idle(self, client, fake_completer):
        data = client.put("/api/session/text", json={"text": "abc"}).json()
        assert data["generation"]["state"] == "idle"
        time.sleep(0.1)
        assert fake_completer.calls == []

    def test_text_triggers_rewrite(self, client, fake_completer):
        data = client.put("/api/session/text", json={"text": SAMPLE_TEXT}).json()
        assert data["generation"]["state"] == "debouncing"
        data = _wait_for_idle(client)
        assert data["generation"]["current_output"] == "Polished #1"
        assert data["generation"]["current"]["source_text"] == SAMPLE_TEXT
        assert len(fake_completer.calls) == 1

    def test_previous_output_after_second_rewrite(self, client):
        client.put("/api/session/text", json={"text": SAMPLE_TEXT})
        _wait_for_idle(client)
        client.put("/api/session/parameters/temperature", json={"value": 1.9})
        data = _wait_for_idle(client)
        assert data["generation"]["current_output"] == "Polished #2"
        assert data["generation"]["previous_output"] == "Polished #1"
        assert data["generation"]["current"]["parameters"]["temperature"] == 1.9

    def test_failure_placeholder(self):
        failing = FakeCompleter(fail=True)
        app = create_app(config=_config(), completion_client=failing)
        with TestClient(app) as c:
            c.put("/api/session/text", json={"text": SAMPLE_TEXT})
            data = _wait_for_idle(c)
        assert data["generation"]["current_output"] == "Error adjusting text"
        assert data["generation"]["last_error"]


class TestSettings:
    def test_get_hides_key(self, client):
        data = client.get("/api/settings").json()
        assert data["api_key_set"] is False
        assert "api_key" not in data

    def test_save_and_clear(self, client):
        data = client.put("/api/settings", json={"api_key": "sk-1", "model_name": "llama3"}).json()
        assert data["api_key_set"] is True
        assert data["model_name"] == "llama3"
        data = client.delete("/api/settings").json()
        assert data["api_key_set"] is False
        assert data["model_name"] == ""

    def test_invalid_max_tokens(self, client):
        assert client.put("/api/settings", json={"max_tokens": 0}).status_code == 422


class TestModels:
    def _app(self, transport: RecordingTransport):
        return create_app(
            config=_config(openai_api_base="http://llm.test/v1"),
            completion_client=CompletionClient(transport=transport.transport),
        )

    def test_lists_models(self):
        transport = RecordingTransport(
            payload={"data": [{"id": "llama3", "object": "model", "created": 1, "owned_by": "me"}]}
        )
        with TestClient(self._app(transport)) as c:
            response = c.get("/api/models")
        assert response.status_code == 200
        assert response.json()["data"] == [{"id": "llama3", "object": "model", "created": 1, "owned_by": "me"}]

    def test_failure_is_502(self):
        with TestClient(self._app(RecordingTransport(status_code=500))) as c:
            response = c.get("/api/models")
        assert response.status_code == 502
