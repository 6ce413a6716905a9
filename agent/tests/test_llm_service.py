import pytest

pytest.importorskip("httpx")
from fastapi.testclient import TestClient  # noqa: E402

from agent import llm_service  # noqa: E402


@pytest.fixture
def client(monkeypatch):
    calls = []

    def fake_generate(system, user):
        calls.append((system, user))
        return '{"forecast": "f", "modelExplanation": "e"}'

    monkeypatch.setattr(llm_service, "_generate_text", fake_generate)
    c = TestClient(llm_service.app)  # no context manager: lifespan (weight preload) is skipped
    c.calls = calls
    return c


def test_health(client):
    body = client.get("/health").json()
    assert body["ok"] is True
    assert body["loaded"] is False


def test_generate_with_schema_asks_for_json(client):
    schema = {"type": "object", "required": ["forecast"]}
    r = client.post("/generate", json={"prompt": "Forecast please", "schema": schema})
    assert r.status_code == 200
    assert r.json() == {"text": '{"forecast": "f", "modelExplanation": "e"}'}

    system, user = client.calls[0]
    assert system == llm_service.JSON_SYSTEM
    assert user.startswith("Forecast please")
    assert '"required": ["forecast"]' in user


def test_generate_without_schema_passes_prompt_through(client):
    client.post("/generate", json={"prompt": "hello"})
    assert client.calls == [(llm_service.SYSTEM, "hello")]


def test_blank_prompt_returns_empty_text(client):
    assert client.post("/generate", json={"prompt": "   "}).json() == {"text": ""}
    assert client.calls == []


def test_non_object_body_is_rejected(client):
    r = client.post("/generate", json=["prompt"])
    assert r.status_code == 400


def test_generation_error_is_500(monkeypatch, client):
    def boom(system, user):
        raise RuntimeError("CUDA out of memory")

    monkeypatch.setattr(llm_service, "_generate_text", boom)
    r = client.post("/generate", json={"prompt": "x"})
    assert r.status_code == 500
    assert "CUDA out of memory" in r.json()["error"]
