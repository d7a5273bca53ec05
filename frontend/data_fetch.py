#file: frontend/data_fetch.py

import aiohttp
import logging
import os

FASTAPI_URL = os.getenv("BACKEND_URL", "http://localhost:8000")


async def _request(method, path, default, params=None, json=None):
    url = f"{FASTAPI_URL}{path}"
    async with aiohttp.ClientSession() as session:
        try:
            async with session.request(method, url, params=params, json=json) as response:
                response.raise_for_status()
                return await response.json()
        except aiohttp.ClientResponseError as e:
            logging.error(f"[ERROR] HTTP {e.status} for {url}: {e.message}")
        except aiohttp.ClientError as e:
            logging.error(f"[ERROR] Network request failed: {e}")
    return default


async def fetch_series():
    """Fetch the rolling 73-hour series for the selected location."""
    return await _request("GET", "/series", None)


async def refresh_series():
    """Ask the backend to regenerate the series now."""
    return await _request("POST", "/series/refresh", None)


async def fetch_forecast(hours=24, interval=3):
    return await _request("GET", "/forecast", [], params={"hours": hours, "interval": interval})


async def fetch_historical(time_range="24h", location="urban"):
    return await _request("GET", "/historical", [], params={"time_range": time_range, "location": location})


async def fetch_pollutants():
    return await _request("GET", "/pollutants", [])


async def fetch_health_insights(age="adult", conditions=None, sensitivity="medium"):
    params = [("age", age), ("sensitivity", sensitivity)] + [("conditions", c) for c in conditions or []]
    return await _request("GET", "/health_insights", None, params=params)


async def fetch_exposure_risk(profile):
    return await _request("POST", "/exposure_risk", None, json=profile)


async def fetch_rankings():
    return await _request("GET", "/rankings", [])


async def fetch_events(days=7):
    """Fetch natural events (wildfires, dust/haze, volcanoes) from FastAPI."""
    return await _request("GET", "/events", {"events": [], "notice": None}, params={"days": days})
