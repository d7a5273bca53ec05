"""
test_main.py — Route tests for the FastAPI app.

The lifespan is not run: the broadcaster, query cache and location store are
swapped in through app.dependency_overrides and the external clients are patched.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from backend import main
from backend.main import app, get_broadcaster, get_location_store, get_query_cache
from backend.models import Coordinate, EonetEvent, OpenAQMeasurement, SelectedLocation
from backend.nasa_api import ExternalApiError
from backend.query_cache import QueryCache
from conftest import no_sleep


@pytest.fixture()
def cache():
    return QueryCache(sleep=no_sleep)


@pytest.fixture()
def overrides(broadcaster, cache, store, new_york):
    broadcaster.initialize(new_york)
    app.dependency_overrides[get_broadcaster] = lambda: broadcaster
    app.dependency_overrides[get_query_cache] = lambda: cache
    app.dependency_overrides[get_location_store] = lambda: store
    yield
    app.dependency_overrides.clear()
    main.broadcaster = None


@pytest.fixture()
async def client(overrides):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestSeries:
    async def test_current_series(self, client, broadcaster):
        response = await client.get("/series")
        data = response.json()

        assert response.status_code == 200
        assert data["source"] == "simulated"
        assert data["notice"] == "Using demonstration data"
        assert len(data["samples"]) == 73
        assert data["coordinates"] == {"lat": 40.7128, "lon": -74.006}

    async def test_other_coordinate_is_synthesized(self, client):
        response = await client.get("/series", params={"lat": 51.5, "lon": -0.12})
        data = response.json()

        assert response.status_code == 200
        assert len(data["samples"]) == 73
        assert data["samples"][-1]["coordinates"] == {"lat": 51.5, "lon": -0.12}

    async def test_other_coordinate_keeps_history_when_stale(self, client, overrides):
        clock = {"now": 0.0}
        clocked_cache = QueryCache(clock=lambda: clock["now"], sleep=no_sleep)
        app.dependency_overrides[get_query_cache] = lambda: clocked_cache
        params = {"lat": 10, "lon": 10}

        first = (await client.get("/series", params=params)).json()["samples"]
        clock["now"] = 31.0
        second = (await client.get("/series", params=params)).json()["samples"]

        # an hour boundary between the two calls shifts the window by one
        kept = {(s["timestamp"], s["aqi"], s["pm25"]) for s in first[:-1]}
        assert len(second) == 73
        assert sum((s["timestamp"], s["aqi"], s["pm25"]) in kept for s in second[:-1]) >= 71

    async def test_half_a_coordinate(self, client):
        response = await client.get("/series", params={"lat": 10})
        assert response.status_code == 400

    async def test_out_of_range_coordinate(self, client):
        response = await client.get("/series", params={"lat": 95, "lon": 0})
        assert response.status_code == 422

    async def test_latest(self, client, broadcaster):
        response = await client.get("/series/latest")
        assert response.status_code == 200
        assert response.json()["aqi"] == broadcaster.get_current()[-1].aqi

    async def test_refresh(self, client, broadcaster):
        before = broadcaster.get_current()
        response = await client.post("/series/refresh")

        assert response.status_code == 200
        assert broadcaster.get_current() is not before

    async def test_visibility(self, client):
        hidden = await client.post("/visibility", json={"visible": False})
        visible = await client.post("/visibility", json={"visible": True})

        assert hidden.json() == {"refreshed": False}
        assert visible.json() == {"refreshed": True}

    async def test_broadcaster_not_running(self):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/series")
        assert response.status_code == 503



class TestSeriesStream:
    def test_pushes_current_then_refreshed_series(self, overrides, broadcaster):
        # no context manager: the lifespan must not start a real broadcaster
        test_client = TestClient(app)
        with test_client.websocket_connect("/ws/series") as websocket:
            first = websocket.receive_json()
            broadcaster.refresh()
            second = websocket.receive_json()

        assert len(first["samples"]) == 73
        assert len(second["samples"]) == 73
        assert second["samples"][-1]["aqi"] == broadcaster.get_current()[-1].aqi

    def test_stream_follows_location_change(self, overrides, broadcaster):
        test_client = TestClient(app)
        location = {"city": "Toronto", "country": "Canada", "lat": 43.6532, "lng": -79.3832}
        with test_client.websocket_connect("/ws/series") as websocket:
            first = websocket.receive_json()
            response = test_client.put("/location", json=location)
            moved = websocket.receive_json()
            broadcaster.refresh()
            refreshed = websocket.receive_json()

        assert response.status_code == 200
        assert first["coordinates"] == {"lat": 40.7128, "lon": -74.006}
        assert moved["coordinates"] == {"lat": 43.6532, "lon": -79.3832}
        assert moved["samples"][-1]["coordinates"] == {"lat": 43.6532, "lon": -79.3832}
        assert len(refreshed["samples"]) == 73


class TestDerivedViews:
    async def test_baseline(self, client):
        response = await client.get("/baseline", params={"lat": 10, "lon": 10})
        assert response.json()["region"] == "industrial"

    async def test_baseline_without_coordinate(self, client):
        response = await client.get("/baseline")
        assert response.json()["region"] == "default"

    async def test_forecast(self, client):
        response = await client.get("/forecast")
        assert response.status_code == 200
        assert len(response.json()) == 9

    async def test_historical(self, client):
        response = await client.get("/historical", params={"time_range": "3m", "location": "rural"})
        assert response.status_code == 200
        assert len(response.json()) == 91

    async def test_historical_rejects_unknown_range(self, client):
        response = await client.get("/historical", params={"time_range": "5y"})
        assert response.status_code == 422

    async def test_pollutants(self, client):
        response = await client.get("/pollutants")
        assert [level["id"] for level in response.json()] == ["pm25", "no2", "o3", "so2", "co"]

    async def test_health_insights(self, client, broadcaster):
        response = await client.get("/health_insights", params={"age": "elderly",
                                                                "conditions": ["respiratory", "heart"]})
        data = response.json()

        assert response.status_code == 200
        assert data["aqi"] == broadcaster.get_current()[-1].aqi
        assert data["risk_score"] >= 65

    async def test_exposure_risk(self, client):
        response = await client.post("/exposure_risk", json={"hours_outdoors": 2, "use_mask": True})
        data = response.json()

        assert response.status_code == 200
        assert 0 <= data["risk_score"] <= 100
        assert data["costs"]["total"] >= data["costs"]["equipment"]

    async def test_exposure_risk_validation(self, client):
        response = await client.post("/exposure_risk", json={"hours_outdoors": 30})
        assert response.status_code == 422

    async def test_rankings_are_cached(self, client, cache):
        first = await client.get("/rankings")
        second = await client.get("/rankings")

        assert len(first.json()) == 47
        assert first.json() == second.json()
        assert ("rankings",) in cache

    async def test_cities(self, client):
        response = await client.get("/cities")
        assert len(response.json()) == 47


class TestLocation:
    async def test_no_selection(self, client):
        response = await client.get("/location")
        assert response.status_code == 200
        assert response.json() is None

    async def test_new_city_moves_the_series(self, client, broadcaster, store):
        location = {"city": "Toronto", "country": "Canada", "lat": 43.6532, "lng": -79.3832}
        response = await client.put("/location", json=location)

        assert response.status_code == 200
        assert store.load() == SelectedLocation(**location)
        assert broadcaster.state.value == "ready"
        assert broadcaster.coordinate == Coordinate(lat=43.6532, lon=-79.3832)
        assert broadcaster.get_current()[-1].coordinates == broadcaster.coordinate

    async def test_same_city_keeps_the_series(self, client, broadcaster):
        location = {"city": "New York", "country": "United States", "lat": 40.7128, "lng": -74.006}
        before = broadcaster.get_current()
        response = await client.put("/location", json=location)

        assert response.status_code == 200
        assert broadcaster.get_current() is before

    async def test_invalid_location(self, client):
        response = await client.put("/location", json={"city": "X", "country": "Y", "lat": 100, "lng": 0})
        assert response.status_code == 422


class TestExternalData:
    async def test_events(self, client):
        event = EonetEvent(id="EONET_1", title="Wildfire")
        with patch("backend.main.fetch_air_quality_events", new=AsyncMock(return_value=[event])):
            response = await client.get("/events")

        data = response.json()
        assert data["notice"] is None
        assert data["events"][0]["id"] == "EONET_1"

    async def test_events_unavailable(self, client):
        with patch("backend.main.fetch_air_quality_events", new=AsyncMock(side_effect=ExternalApiError("down"))):
            response = await client.get("/events", params={"days": 3})

        assert response.status_code == 200
        assert response.json() == {"notice": "Natural event feed unavailable", "events": []}

    async def test_events_fall_back_to_previous_fetch(self, client, cache):
        event = EonetEvent(id="EONET_2", title="Dust storm")
        with patch("backend.main.fetch_air_quality_events", new=AsyncMock(return_value=[event])):
            await client.get("/events")
        cache.invalidate(main.events_key(7))
        with patch("backend.main.fetch_air_quality_events", new=AsyncMock(side_effect=ExternalApiError("down"))):
            response = await client.get("/events")

        data = response.json()
        assert data["notice"] == "Showing previously fetched events"
        assert data["events"][0]["id"] == "EONET_2"

    async def test_imagery(self, client):
        with patch("backend.main.fetch_earth_imagery", new=AsyncMock(return_value=b"\x89PNG")):
            response = await client.get("/imagery", params={"lat": 40.7, "lon": -74.0, "date": "2025-03-01"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content == b"\x89PNG"

    async def test_imagery_unavailable(self, client):
        with patch("backend.main.fetch_earth_imagery", new=AsyncMock(side_effect=ExternalApiError("HTTP 500"))):
            response = await client.get("/imagery", params={"lat": 40.7, "lon": -74.0, "date": "2025-03-01"})
        assert response.status_code == 502

    async def test_measured_air_quality(self, client):
        measurement = OpenAQMeasurement(parameter="pm25", value=8.2, unit="µg/m³")
        with patch("backend.main.fetch_openaq_latest", new=AsyncMock(return_value=[measurement])):
            response = await client.get("/air_quality/latest", params={"lat": 40.7, "lon": -74.0})

        data = response.json()
        assert data["source"] == "openaq"
        assert data["measurements"][0]["value"] == 8.2

    async def test_air_quality_falls_back_to_simulation(self, client):
        with patch("backend.main.fetch_openaq_latest", new=AsyncMock(side_effect=ExternalApiError("down"))):
            response = await client.get("/air_quality/latest", params={"lat": 40.7, "lon": -74.0})

        data = response.json()
        assert data["source"] == "simulated"
        assert data["notice"] == "Using demonstration data"
        assert data["sample"]["aqi"] >= 15


class TestWebhook:
    async def test_missing_command(self, client):
        response = await client.post("/api/n8n", json={"payload": 1})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing command"}

    async def test_forwards_command(self, client):
        with patch("backend.main.forward_to_webhook", new=AsyncMock(return_value={"ok": True})) as forward:
            response = await client.post("/api/n8n", json={"command": "status"})

        assert response.json() == {"success": True, "n8nResponse": {"ok": True}}
        forward.assert_awaited_once_with({"command": "status"})

    async def test_webhook_failure(self, client):
        with patch("backend.main.forward_to_webhook", new=AsyncMock(side_effect=ExternalApiError("not configured"))):
            response = await client.post("/api/n8n", json={"command": "status"})

        assert response.status_code == 500
        assert response.json() == {"error": "not configured"}
