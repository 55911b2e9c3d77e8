"""
HTTP surface over the repository facade, exercised with FastAPI's TestClient.
"""
from __future__ import annotations

import dataclasses
import logging

import pytest
from fastapi.testclient import TestClient

from gigbook.app import create_app
from gigbook.repositories import BackendSelector, MemoryStore, SQLRepository
from gigbook.repositories.selector import database_probe


def _refused() -> None:
    raise ConnectionRefusedError("connection refused")


@pytest.fixture()
def memory_client(settings):
    selector = BackendSelector(SQLRepository(), MemoryStore(), probe=_refused)
    selector.connect()
    with TestClient(create_app(settings, selector)) as client:
        yield client


@pytest.fixture()
def durable_client(temp_db, settings):
    selector = BackendSelector(SQLRepository(), MemoryStore(), probe=database_probe(temp_db))
    selector.connect()
    with TestClient(create_app(settings, selector)) as client:
        yield client


@pytest.fixture(params=["memory", "durable"])
def client(request):
    return request.getfixturevalue(f"{request.param}_client")


def test_healthz_reports_fallback(memory_client):
    body = memory_client.get("/healthz").json()

    assert body["status"] == "ok"
    assert body["db"] == 0
    assert body["state"] == "disconnected"
    assert body["last_error"] == "connection refused"
    assert body["memory"] is True
    assert body["secure"] is False


def test_healthz_reports_durable(durable_client):
    body = durable_client.get("/healthz").json()

    assert body["state"] == "connected"
    assert body["memory"] is False
    assert body["last_error"] is None


def test_song_crud(client):
    resp = client.post("/api/songs", json={"title": "Paint It Black", "bpm": 160, "tags": ["rock", "rock", "60s"]})
    assert resp.status_code == 201
    song = resp.json()
    assert song["title"] == "Paint It Black"
    assert song["tags"] == ["rock", "60s"]

    assert client.get("/api/songs").json() == [song]
    assert client.get(f"/api/songs/{song['id']}").json() == song

    resp = client.put(f"/api/songs/{song['id']}", json={"key": "Em"})
    assert resp.status_code == 200
    assert resp.json()["key"] == "Em"
    assert resp.json()["title"] == "Paint It Black"

    assert client.delete(f"/api/songs/{song['id']}").status_code == 204
    assert client.delete(f"/api/songs/{song['id']}").status_code == 404
    assert client.get(f"/api/songs/{song['id']}").status_code == 404


def test_missing_title_is_rejected(client):
    assert client.post("/api/songs", json={"bpm": 100}).status_code == 422
    assert client.post("/api/venues", json={"name": "   "}).status_code == 422
    assert client.get("/api/songs").json() == []


def test_update_unknown_record_is_404(client):
    assert client.put("/api/venues/12345", json={"name": "Nowhere"}).status_code == 404


def test_show_with_date_and_setlists(client):
    setlist = client.post("/api/setlists", json={"name": "Hits", "items": [{"song_id": "1", "notes": "open"}]}).json()
    assert setlist["items"] == [{"song_id": "1", "notes": "open", "mood_tags": []}]

    resp = client.post(
        "/api/shows",
        json={"name": "Tokyo", "date": "2025-03-01", "setlist_ids": [setlist["id"]], "arrive_at": "16:00"},
    )
    assert resp.status_code == 201
    show = resp.json()
    assert show["date"] == "2025-03-01"
    assert show["setlist_ids"] == [setlist["id"]]


def test_stageplot_endpoints(client):
    empty = client.get("/api/stageplots/stage-1")
    assert empty.status_code == 200
    assert empty.json()["nodes"] == []
    assert empty.json()["context_id"] == "stage-1"
    assert empty.json()["owner_id"] == "user1"

    saved = client.post(
        "/api/stageplots/stage-1",
        json={"name": "Main", "nodes": [{"id": "n1", "label": "Kick", "x": 10, "y": 20}]},
    )
    assert saved.status_code == 200

    client.post("/api/stageplots/stage-1", json={"nodes": [{"id": "n2", "label": "Snare", "x": 12, "y": 22}]})
    plot = client.get("/api/stageplots/stage-1").json()
    assert plot["name"] == "Main"
    assert [n["id"] for n in plot["nodes"]] == ["n2"]

    assert client.get("/api/stageplots").json() == [{"context_id": "stage-1", "name": "Main"}]
    assert client.delete("/api/stageplots/stage-1").status_code == 204
    assert client.delete("/api/stageplots/stage-1").status_code == 404


def test_stageplot_null_name_clears_and_omitted_name_keeps(client):
    client.post("/api/stageplots/stage-1", json={"name": "Main", "nodes": []})

    client.post("/api/stageplots/stage-1", json={"nodes": []})
    assert client.get("/api/stageplots/stage-1").json()["name"] == "Main"

    cleared = client.post("/api/stageplots/stage-1", json={"name": None, "nodes": []})
    assert cleared.json()["name"] is None
    assert client.get("/api/stageplots/stage-1").json()["name"] is None


def test_failing_request_is_still_access_logged(settings, caplog):
    selector = BackendSelector(SQLRepository(), MemoryStore(), probe=_refused)
    selector.connect()
    app = create_app(settings, selector)
    # create_app reinstalls the root handlers, so listen on the app logger itself.
    app_logger = logging.getLogger("gigbook.app")
    app_logger.addHandler(caplog.handler)

    def _broken(owner_id):
        raise RuntimeError("store exploded")

    app.state.repository.songs.list = _broken
    try:
        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/api/songs")
    finally:
        app_logger.removeHandler(caplog.handler)

    assert resp.status_code == 500
    assert any("GET /api/songs 500" in record.getMessage() for record in caplog.records)


def test_security_headers(memory_client):
    resp = memory_client.get("/healthz")

    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_app_without_database_url_serves_from_memory(settings):
    app = create_app(dataclasses.replace(settings, database_url=""))
    with TestClient(app) as client:
        app.state.selector.connect()
        created = client.post("/api/songs", json={"title": "Paint It Black"}).json()
        body = client.get("/healthz").json()

    assert body["memory"] is True
    assert body["last_error"] == "DATABASE_URL is not configured"
    assert app.state.selector.volatile.songs.list("user1")[0].id == created["id"]
