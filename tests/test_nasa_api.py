"""
test_nasa_api.py — Tests for the EONET / Earth imagery / OpenAQ / webhook clients.
The network is never touched: `_get_json` and `create_session` are patched.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from backend import nasa_api
from backend.nasa_api import (ExternalApiError, _get_json, eonet_params, fetch_air_quality_events, fetch_eonet_events,
                              fetch_openaq_latest, forward_to_webhook, merge_events)
from backend.models import EonetEvent


def _event(event_id, date, category=8):
    return {
        "id": event_id,
        "title": f"Event {event_id}",
        "categories": [{"id": category, "title": "Wildfires"}],
        "sources": [{"id": "InciWeb", "url": "https://inciweb.example"}],
        "geometries": [{"date": date, "type": "Point", "coordinates": [-120.5, 38.2]}]
    }


class FakeResponse:
    def __init__(self, status=200, payload=None):
        self.status = status
        self.payload = payload

    async def json(self, content_type=None):
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, params=None):
        self.requests.append((url, params))
        if self.error:
            raise self.error
        return self.response


class TestGetJson:
    async def test_returns_payload(self):
        session = FakeSession(FakeResponse(payload={"events": []}))
        assert await _get_json(session, "https://x", {"a": "1"}) == {"events": []}
        assert session.requests == [("https://x", {"a": "1"})]

    async def test_http_error(self):
        with pytest.raises(ExternalApiError, match="HTTP 503"):
            await _get_json(FakeSession(FakeResponse(status=503)), "https://x", {})

    async def test_client_error(self):
        with pytest.raises(ExternalApiError):
            await _get_json(FakeSession(error=aiohttp.ClientConnectionError("refused")), "https://x", {})


class TestEonet:
    def test_params_drop_empty_values(self):
        assert eonet_params(status="open", limit=50, days=None, category=8) == {
            "status": "open", "limit": "50", "category": "8"}

    async def test_category_endpoint(self):
        payload = {"events": [_event("EONET_1", "2025-03-09T00:00:00Z")]}
        with patch("backend.nasa_api._get_json", new=AsyncMock(return_value=payload)) as get_json:
            events = await fetch_eonet_events(MagicMock(), status="open", limit=5, category=8)

        url, params = get_json.call_args.args[1:]
        assert url.endswith("/categories/8")
        assert params["limit"] == "5"
        assert events[0].id == "EONET_1"
        assert events[0].geometries[0].coordinates == [-120.5, 38.2]

    async def test_events_endpoint_without_category(self):
        with patch("backend.nasa_api._get_json", new=AsyncMock(return_value={"events": []})) as get_json:
            assert await fetch_eonet_events(MagicMock()) == []
        assert get_json.call_args.args[1].endswith("/events")

    async def test_invalid_payload(self):
        with patch("backend.nasa_api._get_json", new=AsyncMock(return_value={"events": [{"title": "no id"}]})):
            with pytest.raises(ExternalApiError, match="Unexpected EONET payload"):
                await fetch_eonet_events(MagicMock())

    def test_merge_dedupes_and_sorts_newest_first(self):
        older = EonetEvent.model_validate(_event("A", "2025-03-01T00:00:00Z"))
        newer = EonetEvent.model_validate(_event("B", "2025-03-05T00:00:00Z"))
        updated = EonetEvent.model_validate({**_event("A", "2025-03-01T00:00:00Z"), "title": "updated"})
        undated = EonetEvent(id="C", title="no geometry")

        merged = merge_events([older, undated], [newer, updated])

        assert [event.id for event in merged] == ["B", "A", "C"]
        assert merged[1].title == "updated"

    async def test_air_quality_events_query_each_category(self):
        groups = {8: [_event("W", "2025-03-02T00:00:00Z", 8)], 16: [_event("D", "2025-03-04T00:00:00Z", 16)],
                  12: [_event("V", "2025-03-03T00:00:00Z", 12)]}

        async def fake_get_json(_session, url, params):
            return {"events": groups[int(params["category"])]}

        with patch("backend.nasa_api.create_session", return_value=MagicMock()), \
                patch("backend.nasa_api._get_json", new=fake_get_json):
            events = await fetch_air_quality_events(days=3)

        assert [event.id for event in events] == ["D", "V", "W"]


class TestOpenAQ:
    async def test_first_location_measurements(self):
        payload = {"results": [{"location": "Station", "measurements": [
            {"parameter": "pm25", "value": 9.5, "unit": "µg/m³", "lastUpdated": "2025-03-10T14:00:00Z"}]}]}
        with patch("backend.nasa_api.create_session", return_value=MagicMock()), \
                patch("backend.nasa_api._get_json", new=AsyncMock(return_value=payload)) as get_json:
            measurements = await fetch_openaq_latest(40.7, -74.0)

        assert get_json.call_args.args[2]["coordinates"] == "40.7,-74.0"
        assert measurements[0].parameter == "pm25"
        assert measurements[0].last_updated is not None

    async def test_no_station_nearby(self):
        with patch("backend.nasa_api.create_session", return_value=MagicMock()), \
                patch("backend.nasa_api._get_json", new=AsyncMock(return_value={"results": []})):
            assert await fetch_openaq_latest(0, 0) == []


class TestWebhook:
    async def test_missing_url(self, monkeypatch):
        monkeypatch.setattr(nasa_api, "N8N_WEBHOOK_URL", "")
        with pytest.raises(ExternalApiError, match="not configured"):
            await forward_to_webhook({"command": "status"})
