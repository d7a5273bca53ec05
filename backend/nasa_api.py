# file: backend/nasa_api.py

import aiohttp
import asyncio
import logging
import ssl
from datetime import datetime, timezone
from typing import Any, Dict, List

import certifi
from pydantic import ValidationError

from backend.config import (EONET_BASE_URL, HTTP_TIMEOUT_SECONDS, N8N_WEBHOOK_URL, NASA_API_KEY, NASA_BASE_URL,
                            OPENAQ_BASE_URL)
from backend.models import EonetEvent, EonetEventsPayload, OpenAQMeasurement, OpenAQPayload

EONET_CATEGORIES = {
    "wildfires": 8,
    "volcanoes": 12,
    "dust_haze": 16,
    "water_color": 17
}
# category -> result limit for the events that affect air quality
AIR_QUALITY_EVENT_LIMITS = {
    EONET_CATEGORIES["wildfires"]: 50,
    EONET_CATEGORIES["dust_haze"]: 30,
    EONET_CATEGORIES["volcanoes"]: 20
}


class ExternalApiError(Exception):
    """Raised when an external endpoint fails or returns an unexpected payload."""


def create_session() -> aiohttp.ClientSession:
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    return aiohttp.ClientSession(
        connector=aiohttp.TCPConnector(ssl=ssl_context),
        timeout=aiohttp.ClientTimeout(total=HTTP_TIMEOUT_SECONDS)
    )


async def _get_json(session: aiohttp.ClientSession, url: str, params: Dict[str, Any]) -> Any:
    try:
        async with session.get(url, params=params) as response:
            if response.status != 200:
                raise ExternalApiError(f"{url} returned HTTP {response.status}")
            return await response.json(content_type=None)
    except aiohttp.ClientError as e:
        raise ExternalApiError(f"Request to {url} failed: {e}") from e


def eonet_params(status: str | None = None, limit: int | None = None, days: int | None = None,
                 category: int | None = None, source: str | None = None) -> Dict[str, str]:
    params = {"status": status, "limit": limit, "days": days, "category": category, "source": source}
    return {key: str(value) for key, value in params.items() if value}


async def fetch_eonet_events(session: aiohttp.ClientSession, status: str | None = None, limit: int | None = None,
                             days: int | None = None, category: int | None = None,
                             source: str | None = None) -> List[EonetEvent]:
    """Fetch natural events from EONET, optionally for one category."""
    url = f"{EONET_BASE_URL}/categories/{category}" if category else f"{EONET_BASE_URL}/events"
    payload = await _get_json(session, url, eonet_params(status, limit, days, category, source))
    try:
        return EonetEventsPayload.model_validate(payload).events
    except ValidationError as e:
        raise ExternalApiError(f"Unexpected EONET payload: {e.error_count()} errors") from e


def _event_date(event: EonetEvent) -> datetime:
    if event.geometries:
        date = event.geometries[0].date
        return date if date.tzinfo else date.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(0, tz=timezone.utc)


def merge_events(*groups: List[EonetEvent]) -> List[EonetEvent]:
    """Deduplicate by id (later groups win) and sort newest first."""
    unique = {}
    for events in groups:
        for event in events:
            unique[event.id] = event
    return sorted(unique.values(), key=_event_date, reverse=True)


async def fetch_air_quality_events(days: int = 7) -> List[EonetEvent]:
    """Open wildfire, dust/haze and volcano events of the last `days` days."""
    async with create_session() as session:
        groups = await asyncio.gather(*[
            fetch_eonet_events(session, status="open", limit=limit, days=days, category=category)
            for category, limit in AIR_QUALITY_EVENT_LIMITS.items()
        ])
    events = merge_events(*groups)
    logging.info(f"Fetched {len(events)} air quality related EONET events")
    return events


async def fetch_earth_imagery(lat: float, lon: float, date: str, dim: float = 0.1) -> bytes:
    """Fetch a satellite image tile for a location and date."""
    params = {"lat": str(lat), "lon": str(lon), "date": date, "dim": str(dim), "api_key": NASA_API_KEY}
    url = f"{NASA_BASE_URL}/planetary/earth/imagery"
    async with create_session() as session:
        try:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    raise ExternalApiError(f"Earth Imagery API error: HTTP {response.status}")
                return await response.read()
        except aiohttp.ClientError as e:
            raise ExternalApiError(f"Earth Imagery request failed: {e}") from e


async def fetch_openaq_latest(lat: float, lon: float, radius: int = 50000) -> List[OpenAQMeasurement]:
    """Latest measurements of the nearest OpenAQ location within `radius` metres."""
    params = {"coordinates": f"{lat},{lon}", "radius": str(radius), "limit": "1"}
    async with create_session() as session:
        payload = await _get_json(session, f"{OPENAQ_BASE_URL}/latest", params)
    try:
        results = OpenAQPayload.model_validate(payload).results
    except ValidationError as e:
        raise ExternalApiError(f"Unexpected OpenAQ payload: {e.error_count()} errors") from e
    return results[0].measurements if results else []


async def forward_to_webhook(body: Dict[str, Any], url: str | None = None) -> Any:
    """POST a JSON body to the configured webhook and return its JSON answer."""
    url = url or N8N_WEBHOOK_URL
    if not url:
        raise ExternalApiError("N8N_WEBHOOK_URL is not configured")
    async with create_session() as session:
        async with session.post(url, json=body) as response:
            return await response.json(content_type=None)
