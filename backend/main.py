# file : backend/main.py

import asyncio
import logging
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from contextlib import asynccontextmanager
from typing import List, Literal, Optional

from backend.broadcaster import SeriesBroadcaster
from backend.cities import NORTH_AMERICAN_CITIES
from backend.config import DEMO_NOTICE, EVENTS_POLL_SECONDS, SELECTED_LOCATION_FILE, SERIES_REFRESH_SECONDS
from backend.health import exposure_risk, health_insights, pollutant_levels
from backend.models import (AirQualityLatest, City, CityRanking, Coordinate, EventsResponse, ExposureProfile,
                            ExposureRisk, ForecastPoint, HealthInsights, HealthProfile, PollutantLevel,
                            PollutantSample, RegionalBaseline, SelectedLocation, SeriesResponse, VisibilityChange)
from backend.nasa_api import fetch_air_quality_events, fetch_earth_imagery, fetch_openaq_latest, forward_to_webhook
from backend.preferences import LocationStore
from backend.query_cache import QueryCache
from backend.rankings import synthesize_rankings
from backend.regional import regional_baseline
from backend.synthesis import Series, historical_series, hourly_forecast, regenerate_series

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

query_cache = QueryCache()
location_store = LocationStore(SELECTED_LOCATION_FILE)
broadcaster: SeriesBroadcaster | None = None


def create_broadcaster(coord: Coordinate | None = None) -> SeriesBroadcaster :
    series_broadcaster = SeriesBroadcaster(refresh_seconds = SERIES_REFRESH_SECONDS, location_store = location_store)
    series_broadcaster.initialize(coord)
    return series_broadcaster


def get_broadcaster() -> SeriesBroadcaster :
    if broadcaster is None :
        raise HTTPException(status_code = 503, detail = "Series broadcaster is not running")
    return broadcaster


def get_query_cache() -> QueryCache :
    return query_cache


def get_location_store() -> LocationStore :
    return location_store


def events_key(days: int) -> tuple :
    return ("eonet-air-quality", days)


@asynccontextmanager
async def lifespan(app: FastAPI) :
    """Start the series broadcaster and the natural events poller."""
    global broadcaster
    broadcaster = create_broadcaster()
    query_cache.watch(events_key(7), lambda : fetch_air_quality_events(7), EVENTS_POLL_SECONDS, retry = 3)
    yield
    await query_cache.close()
    broadcaster.dispose()
    broadcaster = None


app = FastAPI(
    title = "Air Quality Dashboard",
    description = "Pseudo-real-time air quality series, forecasts, health insights and NASA natural events.",
    version = "0.2",
    lifespan = lifespan
)


def series_response(series_broadcaster: SeriesBroadcaster, series: Series) -> SeriesResponse :
    return SeriesResponse(coordinates = series_broadcaster.coordinate, notice = DEMO_NOTICE, samples = list(series))


def optional_coordinate(lat: float | None, lon: float | None) -> Coordinate | None :
    if lat is None and lon is None :
        return None
    if lat is None or lon is None :
        raise HTTPException(status_code = 400, detail = "Both lat and lon are required")
    return Coordinate(lat = lat, lon = lon)


@app.get("/series", response_model=SeriesResponse)
async def series(
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Latitude, defaults to the selected location"),
    lon: Optional[float] = Query(None, ge=-180, le=180, description="Longitude, defaults to the selected location"),
    series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster),
    cache: QueryCache = Depends(get_query_cache)
):
    """Fetch the rolling 73-hour series."""
    coord = optional_coordinate(lat, lon)
    if coord is None or coord == series_broadcaster.coordinate :
        return series_response(series_broadcaster, series_broadcaster.get_current())

    key = ("series", coord.lat, coord.lon)

    async def synthesize() :
        # keep already served history for this coordinate
        return regenerate_series(coord, cache.peek(key))

    result = await cache.fetch(key, synthesize, stale_time = SERIES_REFRESH_SECONDS)
    return SeriesResponse(coordinates = coord, notice = DEMO_NOTICE, samples = list(result.data or []))


@app.get("/series/latest", response_model=PollutantSample)
async def latest_sample(series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster)):
    """Fetch the most recent sample of the rolling series."""
    current = series_broadcaster.get_current()
    if not current :
        raise HTTPException(status_code = 404, detail = "No samples available yet")
    return current[-1]


@app.post("/series/refresh", response_model=SeriesResponse)
async def refresh_series(series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster)):
    """Regenerate the series immediately."""
    return series_response(series_broadcaster, series_broadcaster.refresh())


@app.post("/visibility")
async def visibility(change: VisibilityChange, series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster)):
    """Report the consumer's visibility; regaining focus forces one regeneration."""
    return {"refreshed": series_broadcaster.notify_visibility(change.visible)}


@app.websocket("/ws/series")
async def series_stream(websocket: WebSocket, series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster)):
    """Push every new series snapshot to the client, starting with the current one."""
    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    # listeners run on the scheduler thread
    unsubscribe = series_broadcaster.subscribe(lambda snapshot : loop.call_soon_threadsafe(queue.put_nowait, snapshot))

    async def pump() :
        while True :
            snapshot = await queue.get()
            await websocket.send_json(jsonable_encoder(series_response(series_broadcaster, snapshot)))

    sender = asyncio.ensure_future(pump())
    try :
        while True :
            await websocket.receive_text()
    except WebSocketDisconnect :
        logging.info("Series WebSocket client disconnected")
    finally :
        sender.cancel()
        unsubscribe()


@app.get("/baseline", response_model=RegionalBaseline)
async def baseline(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180)
):
    """Regional baseline concentrations for a coordinate."""
    return regional_baseline(optional_coordinate(lat, lon))


@app.get("/forecast", response_model=List[ForecastPoint])
async def forecast(
    hours: int = Query(24, ge=1, le=72, description="Forecast horizon in hours"),
    interval: int = Query(3, ge=1, le=24, description="Step between forecast points in hours"),
    series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster)
):
    """Forecast from the latest sample of the rolling series."""
    current = series_broadcaster.get_current()
    return hourly_forecast(current[-1] if current else None, hours, interval)


@app.get("/historical", response_model=List[PollutantSample])
async def historical(
    time_range: Literal["24h", "3m", "6m", "1y"] = Query("24h", description="History window"),
    location: Literal["urban", "suburban", "rural"] = Query("urban", description="Location profile"),
    cache: QueryCache = Depends(get_query_cache),
    store: LocationStore = Depends(get_location_store)
):
    """Long-range simulated history for the selected location."""
    selected = store.load()
    coord = selected.to_coordinate() if selected else Coordinate(lat = 37.7749, lon = -122.4194)

    async def synthesize() :
        return historical_series(time_range, location, coord)

    result = await cache.fetch(("historical", time_range, location, coord.lat, coord.lon), synthesize,
                               stale_time = 300, gc_time = 1800)
    return result.data or []


@app.get("/pollutants", response_model=List[PollutantLevel])
async def pollutants(series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster)):
    """Latest pollutant levels against WHO and EPA guidelines."""
    return pollutant_levels(series_broadcaster.get_current())


@app.get("/health_insights", response_model=HealthInsights)
async def insights(
    age: Literal["child", "adult", "elderly"] = Query("adult"),
    conditions: Optional[List[str]] = Query(None, description="Health conditions, e.g. respiratory, heart"),
    sensitivity: Literal["low", "medium", "high"] = Query("medium"),
    series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster)
):
    """Health risks and recommendations for the current AQI and a health profile."""
    current = series_broadcaster.get_current()
    aqi = current[-1].aqi if current else 45
    return health_insights(aqi, HealthProfile(age = age, conditions = conditions or [], sensitivity = sensitivity))


@app.post("/exposure_risk", response_model=ExposureRisk)
async def personal_exposure(profile: ExposureProfile, series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster)):
    """Personal exposure score and estimated costs at the current AQI."""
    current = series_broadcaster.get_current()
    return exposure_risk(current[-1].aqi if current else 45, profile)


@app.get("/rankings", response_model=List[CityRanking])
async def rankings(cache: QueryCache = Depends(get_query_cache)):
    """North American cities ranked by current AQI, cleanest first."""
    async def synthesize() :
        return synthesize_rankings()

    result = await cache.fetch(("rankings",), synthesize, stale_time = SERIES_REFRESH_SECONDS)
    return result.data or []


@app.get("/cities", response_model=List[City])
async def cities():
    return NORTH_AMERICAN_CITIES


@app.get("/location", response_model=Optional[SelectedLocation])
async def get_location(store: LocationStore = Depends(get_location_store)):
    """Fetch the persisted city selection."""
    return store.load()


@app.put("/location", response_model=SelectedLocation)
async def set_location(location: SelectedLocation, store: LocationStore = Depends(get_location_store),
                       series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster)):
    """Persist a new city selection and move the series to it."""
    try :
        store.save(location)
    except OSError as e :
        logging.error(f"Error saving selected location: {e}")
        raise HTTPException(status_code = 500, detail = "Failed to save selected location")
    # open streams stay subscribed and receive the new location's series
    series_broadcaster.retarget(location.to_coordinate())
    return location


@app.get("/events", response_model=EventsResponse)
async def events(
    days: int = Query(7, ge=1, le=365, description="Look back this many days"),
    cache: QueryCache = Depends(get_query_cache)
):
    """Open wildfire, dust/haze and volcano events."""
    result = await cache.fetch(events_key(days), lambda : fetch_air_quality_events(days),
                               stale_time = EVENTS_POLL_SECONDS, retry = 3)
    if result.ok :
        return EventsResponse(events = result.data)
    notice = "Showing previously fetched events" if result.is_stale else "Natural event feed unavailable"
    return EventsResponse(events = result.data or [], notice = notice)


@app.get("/imagery")
async def imagery(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    date: str = Query(..., description="Date in YYYY-MM-DD format"),
    dim: float = Query(0.1, gt=0, le=1, description="Tile width and height in degrees"),
    cache: QueryCache = Depends(get_query_cache)
):
    """Satellite imagery tile for a location."""
    result = await cache.fetch(("earth-imagery", lat, lon, date, dim), lambda : fetch_earth_imagery(lat, lon, date, dim),
                               stale_time = 2 * 3600, gc_time = 24 * 3600)
    if result.data is None :
        raise HTTPException(status_code = 502, detail = result.error or "Imagery unavailable")
    return Response(content = result.data, media_type = "image/png")


@app.get("/air_quality/latest", response_model=AirQualityLatest)
async def air_quality_latest(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    cache: QueryCache = Depends(get_query_cache),
    series_broadcaster: SeriesBroadcaster = Depends(get_broadcaster)
):
    """Measured values near a coordinate, falling back to the simulated series."""
    result = await cache.fetch(("openaq-latest", lat, lon), lambda : fetch_openaq_latest(lat, lon), stale_time = 10)
    if result.data :
        return AirQualityLatest(source = "openaq", measurements = result.data)
    current = series_broadcaster.get_current()
    return AirQualityLatest(source = "simulated", notice = DEMO_NOTICE, sample = current[-1] if current else None)


@app.post("/api/n8n")
async def n8n_command(request: Request):
    """Forward a command body to the configured webhook."""
    try :
        body = await request.json()
        if not isinstance(body, dict) or not body.get("command") :
            return JSONResponse({"error": "Missing command"}, status_code = 400)
        data = await forward_to_webhook(body)
        return {"success": True, "n8nResponse": data}
    except Exception as e :
        logging.error(f"Error forwarding command to webhook: {e}")
        return JSONResponse({"error": str(e)}, status_code = 500)


if __name__ == "__main__" :
    uvicorn.run(app, host = "0.0.0.0", port = 8000, log_level="info")
