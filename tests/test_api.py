"""Tests for the HTTP layer."""

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.endpoints.achievements import router, stream_events
from app.config import Settings
from main import create_app


@pytest.fixture()
def app(engine):
    application = FastAPI()
    application.include_router(router)
    application.state.engine = engine
    application.state.settings = Settings()
    return application


@pytest.fixture()
def api(app):
    return TestClient(app)


@pytest.fixture()
def spacewar(client, strategy):
    client.achievements = {"A": (False, None), "B": (True, 1700000000)}
    strategy.titles = [480]
    return client


class TestEndpoints:
    def test_engine_missing_returns_503(self):
        application = FastAPI()
        application.include_router(router)

        response = TestClient(application).get("/api/v1/session")

        assert response.status_code == 503

    def test_no_session(self, api):
        response = api.get("/api/v1/session")

        assert response.status_code == 200
        assert response.json() == {
            "detected": False,
            "session": None,
            "connected": False,
            "achievement_count": 0,
        }

    def test_session_and_achievements(self, api, engine, spacewar):
        engine.run_cycle()

        session = api.get("/api/v1/session").json()
        assert session["detected"] is True
        assert session["connected"] is True
        assert session["achievement_count"] == 2
        assert session["session"]["title_id"] == 480
        assert session["session"]["detection_source"] == "process_scan"

        achievements = api.get("/api/v1/achievements").json()
        assert [a["id"] for a in achievements] == ["A", "B"]
        assert achievements[1]["unlock_timestamp"] == 1700000000

    def test_stats(self, api, engine, spacewar):
        engine.run_cycle()

        stats = api.get("/api/v1/achievements/stats").json()

        assert stats["total"] == 2
        assert stats["unlocked"] == 1
        assert stats["completion_percent"] == 50.0
        assert set(stats["by_rarity"]) == {"common", "uncommon", "rare", "epic", "legendary"}

    def test_profile_404_before_first_snapshot(self, api):
        assert api.get("/api/v1/profile").status_code == 404

    def test_profile(self, api, engine, spacewar):
        engine.run_cycle()

        profile = api.get("/api/v1/profile").json()

        assert profile["session_title_name"] == "Spacewar"
        assert profile["total_count"] == 2

    def test_refresh_runs_cycle(self, api, engine, spacewar):
        response = api.post("/api/v1/refresh")

        assert response.json() == {"ran": True}
        assert engine.get_current_session().title_id == 480

    def test_status(self, api, engine):
        engine.run_cycle()

        texts = [m["text"] for m in api.get("/api/v1/status").json()]

        assert "Steam API initialized successfully" in texts

    def test_simulate(self, api, recorded):
        response = api.post("/api/v1/achievements/simulate")

        assert response.status_code == 200
        assert response.json()["id"] == "TEST_ACHIEVEMENT"
        assert recorded[-1].type == "achievement_unlocked"

    def test_simulate_disabled(self, app, api):
        app.state.settings = Settings(ENABLE_SIMULATE_ENDPOINT=False)
        assert api.post("/api/v1/achievements/simulate").status_code == 404


class FakeRequest:
    """Request stand-in reporting a disconnect after *polls* checks."""

    def __init__(self, polls):
        self._polls = polls

    async def is_disconnected(self):
        self._polls -= 1
        return self._polls < 0


@pytest.mark.asyncio
async def test_event_stream_formats_sse(engine):
    response = await stream_events(FakeRequest(polls=1), engine)
    assert response.media_type == "text/event-stream"
    assert engine.events.subscriber_count == 1

    engine.simulate_unlock()
    chunks = [chunk async for chunk in response.body_iterator]

    assert len(chunks) == 1
    header, data = chunks[0].strip().split("\n")
    assert header == "event: achievement_unlocked"
    assert json.loads(data[len("data: "):])["record"]["id"] == "TEST_ACHIEVEMENT"
    assert engine.events.subscriber_count == 0


def test_lifespan_starts_and_stops_scheduler(engine, client):
    application = create_app()
    application.state.settings = Settings(POLL_INTERVAL=60.0)
    application.state.engine = engine

    with TestClient(application) as api:
        assert api.get("/health").json()["status"] == "healthy"
        assert api.get("/").json()["endpoints"]["events"] == "/api/v1/events"
        assert application.state.scheduler.running is True

    assert application.state.scheduler.running is False
    # The first tick initialized the client; shutdown released it.
    assert client.shutdown_called is True
