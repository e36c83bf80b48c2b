"""API tests for the panel session endpoints."""
from __future__ import annotations

import asyncio
from typing import List

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.providers import get_search_client, get_session_registry
from app.infra.search_client import SearchClient
from app.main import app
from app.session.models import ResultPassage
from app.session.registry import SessionRegistry


class StubSearchBackend:
    def __init__(self, result: List[ResultPassage]) -> None:
        self.result = result
        self.calls: List[str] = []
        self.gate: asyncio.Event | None = None

    async def search(self, query: str) -> List[ResultPassage]:
        self.calls.append(query)
        if self.gate is not None:
            await self.gate.wait()
        return list(self.result)


@pytest.fixture
def backend() -> StubSearchBackend:
    return StubSearchBackend(
        [
            ResultPassage(source="HACCP 고시 제5조", text="중요관리점 결정 원칙"),
            ResultPassage(source="HACCP 가이드", text="CCP 설정 절차"),
        ]
    )


@pytest.fixture
def registry(backend):
    registry = SessionRegistry(lambda: backend)
    app.dependency_overrides[get_session_registry] = lambda: registry
    yield registry
    app.dependency_overrides.pop(get_session_registry, None)


@pytest.fixture
def client(registry):
    return TestClient(app)


def _create(client: TestClient) -> str:
    resp = client.post("/api/v1/panel/sessions")
    assert resp.status_code == 201
    return resp.json()["session_id"]


def test_create_and_get_session(client):
    session_id = _create(client)
    resp = client.get(f"/api/v1/panel/sessions/{session_id}")
    assert resp.status_code == 200
    view = resp.json()["view"]
    assert view["status"] == "idle"
    assert view["tab"] == "qa"
    assert view["rating"]["value"] == 4.5


def test_unknown_session_is_404(client):
    assert client.get("/api/v1/panel/sessions/missing").status_code == 404
    assert client.post("/api/v1/panel/sessions/missing/feedback", json={"kind": "helpful"}).status_code == 404
    assert client.delete("/api/v1/panel/sessions/missing").status_code == 404


def test_delete_session(client, registry):
    session_id = _create(client)
    assert client.delete(f"/api/v1/panel/sessions/{session_id}").status_code == 204
    assert len(registry) == 0
    assert client.get(f"/api/v1/panel/sessions/{session_id}").status_code == 404


def test_blank_query_rejected(client, backend):
    session_id = _create(client)
    resp = client.post(f"/api/v1/panel/sessions/{session_id}/query", json={"text": "   "})
    assert resp.status_code == 400
    assert "query is required" in resp.json()["detail"]
    assert backend.calls == []


def test_rating_feedback_and_tab(client):
    session_id = _create(client)
    base = f"/api/v1/panel/sessions/{session_id}"

    resp = client.post(f"{base}/rating", json={"stars": 3})
    assert resp.status_code == 200
    assert resp.json()["view"]["rating"]["label"] == "3.0"

    client.post(f"{base}/feedback", json={"kind": "helpful"})
    client.post(f"{base}/feedback", json={"kind": "helpful"})
    resp = client.post(f"{base}/feedback", json={"kind": "needs_work"})
    assert resp.json()["view"]["feedback"] == {"helpful": 2, "needs_work": 1}

    resp = client.put(f"{base}/tab", json={"tab": "history"})
    assert resp.json()["view"]["tab"] == "history"
    assert resp.json()["view"]["history_placeholder"]


@pytest.mark.parametrize("stars", [0, 6])
def test_rating_out_of_range_is_422(client, stars):
    session_id = _create(client)
    resp = client.post(f"/api/v1/panel/sessions/{session_id}/rating", json={"stars": stars})
    assert resp.status_code == 422


def test_invalid_feedback_kind_is_422(client):
    session_id = _create(client)
    resp = client.post(f"/api/v1/panel/sessions/{session_id}/feedback", json={"kind": "love"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_query_flow(registry, backend):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://panel.test") as client:
        resp = await client.post("/api/v1/panel/sessions")
        session_id = resp.json()["session_id"]
        base = f"/api/v1/panel/sessions/{session_id}"

        resp = await client.post(f"{base}/query", json={"text": "중요관리점 설정 방법"})
        assert resp.status_code == 202
        assert resp.json()["view"]["status"] == "pending"
        assert resp.json()["view"]["references"] == []

        await registry.get(session_id).wait_idle()

        resp = await client.get(base)
        view = resp.json()["view"]
        assert view["status"] == "success"
        assert view["answer"].startswith("2 results found.")
        assert [card["label"] for card in view["references"]] == ["HACCP 고시 제5조", "HACCP 가이드"]
        assert backend.calls == ["중요관리점 설정 방법"]


@pytest.mark.asyncio
async def test_query_while_pending_is_409(registry, backend):
    backend.gate = asyncio.Event()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://panel.test") as client:
        resp = await client.post("/api/v1/panel/sessions")
        session_id = resp.json()["session_id"]
        base = f"/api/v1/panel/sessions/{session_id}"

        assert (await client.post(f"{base}/query", json={"text": "first"})).status_code == 202
        resp = await client.post(f"{base}/query", json={"text": "second"})
        assert resp.status_code == 409

        backend.gate.set()
        await registry.get(session_id).wait_idle()

        resp = await client.get(base)
        assert resp.json()["view"]["question"] == "first"
        assert backend.calls == ["first"]


def test_index_descriptor(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["service"] == "querypanel-api"


def _override_search_client(handler) -> None:
    app.dependency_overrides[get_search_client] = lambda: SearchClient(
        "http://backend.test", transport=httpx.MockTransport(handler)
    )


@pytest.fixture
def health_client():
    yield TestClient(app)
    app.dependency_overrides.pop(get_search_client, None)


@pytest.mark.parametrize("status_code", [200, 404, 405])
def test_healthz_reports_backend_reachable(health_client, status_code):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.host))
        return httpx.Response(status_code, json={"detail": "Not Found"})

    _override_search_client(handler)
    resp = health_client.get("/healthz")

    assert resp.status_code == 200
    backend = resp.json()["dependencies"]["search_backend"]
    assert backend["status"] == "reachable"
    assert backend["http_status"] == status_code
    assert seen == [("GET", "backend.test")]


def test_healthz_reports_backend_unreachable(health_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _override_search_client(handler)
    resp = health_client.get("/healthz")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["dependencies"]["search_backend"] == {
        "status": "unreachable",
        "endpoint": "http://backend.test",
        "error": "connection refused",
    }


def test_logging_is_configured_at_startup_not_import(monkeypatch):
    from app import main as main_module

    levels = []
    monkeypatch.setattr(main_module, "configure_logging", levels.append)

    assert levels == []
    with TestClient(app) as client:
        assert client.get("/").status_code == 200
    assert levels == [main_module.settings.log_level]
