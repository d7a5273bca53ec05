#file: backend/synthesis.py

import math
import random
from datetime import datetime, timedelta
from typing import List, Tuple

from backend.models import Coordinate, ForecastPoint, PollutantSample, RegionalBaseline
from backend.regional import regional_baseline
from backend.utils import clamp, get_current_time, round_half_up, to_local

SERIES_HOURS = 72
SERIES_LENGTH = SERIES_HOURS + 1
MIN_AQI, MAX_AQI = 15, 300

Series = Tuple[PollutantSample, ...]

HISTORICAL_LEVELS = {
    "urban": {"aqi": 65, "pm25": 18, "no2": 25, "o3": 35, "so2": 8, "co": 0.8},
    "suburban": {"aqi": 45, "pm25": 12, "no2": 15, "o3": 30, "so2": 4, "co": 0.5},
    "rural": {"aqi": 35, "pm25": 8, "no2": 10, "o3": 25, "so2": 2, "co": 0.3}
}
HISTORICAL_DAYS = {"3m": 90, "6m": 180, "1y": 365}


def diurnal_factor(hour: int, amplitude: float = 0.4, offset: float = 0.8) -> float:
    """Single daily cycle peaking mid-afternoon."""
    return math.sin((hour - 6) * math.pi / 12) * amplitude + offset


def is_rush_hour(hour: int) -> bool:
    return 7 <= hour <= 9 or 16 <= hour <= 18


def is_daytime(hour: int) -> bool:
    return 6 <= hour <= 18


def synthesize_sample(hour_offset: int, baseline: RegionalBaseline, coord: Coordinate | None,
                      now: datetime | None = None, rng: random.Random | None = None,
                      tz: str | None = None) -> PollutantSample:
    """Produce one reading for `hour_offset` hours before `now`."""
    rng = rng or random
    timestamp = (now or get_current_time()) - timedelta(hours=hour_offset)
    hour = to_local(timestamp, tz).hour

    diurnal = diurnal_factor(hour)
    traffic = 1.2 if is_rush_hour(hour) else 1.0
    weather = 0.9 + rng.random() * 0.2
    spike = 1.4 if rng.random() > 0.95 else 1.0  # occasional pollution event
    composite = diurnal * traffic * weather * spike

    return PollutantSample(
        timestamp=timestamp,
        aqi=int(clamp(round_half_up(baseline.aqi * composite), MIN_AQI, MAX_AQI)),
        pm25=baseline.pm25 * composite,
        no2=baseline.no2 * composite,
        o3=baseline.o3 * (1.3 if is_daytime(hour) else 0.8) * weather,
        so2=baseline.so2 * weather,
        co=baseline.co * traffic * weather,
        coordinates=coord if coord is not None else Coordinate(lat=0, lon=0)
    )


def _slot(timestamp: datetime, tz: str | None) -> Tuple[int, int]:
    local = to_local(timestamp, tz)
    return local.day, local.hour


def regenerate_series(coord: Coordinate | None, previous: Series | None = None,
                      now: datetime | None = None, rng: random.Random | None = None,
                      tz: str | None = None, continuity_hours: int | None = None) -> Series:
    """Build the 73-sample rolling window ending now, reusing already published history."""
    now = now or get_current_time()
    baseline = regional_baseline(coord)

    candidates = list(previous or ())
    if continuity_hours is not None:
        candidates = candidates[-continuity_hours:] if continuity_hours > 0 else []
    by_slot = {}
    for sample in candidates:
        by_slot.setdefault(_slot(sample.timestamp, tz), sample)

    series: List[PollutantSample] = []
    for offset in range(SERIES_HOURS, -1, -1):
        target = now - timedelta(hours=offset)
        existing = by_slot.get(_slot(target, tz)) if offset > 0 else None
        # a reused sample must sit between its neighbours (DST folds repeat local hours)
        if existing is not None and (not series or series[-1].timestamp < existing.timestamp) \
                and existing.timestamp < target + timedelta(hours=1):
            series.append(existing)
        else:
            series.append(synthesize_sample(offset, baseline, coord, now=now, rng=rng, tz=tz))
    return tuple(series)


def hourly_forecast(current: PollutantSample | None, hours: int = 24, interval: int = 3,
                    now: datetime | None = None, rng: random.Random | None = None,
                    tz: str | None = None) -> List[ForecastPoint]:
    """Project the current reading forward with weather-driven dispersion factors."""
    rng = rng or random
    now = now or get_current_time()

    current_aqi = current.aqi if current else 45
    current_pm25 = current.pm25 if current else 12.5
    current_no2 = current.no2 if current else 18.3
    base_trend = 1.1 if is_daytime(to_local(now, tz).hour) else 0.9

    forecast = []
    for step in range(0, hours + 1, interval):
        timestamp = now + timedelta(hours=step)
        local = to_local(timestamp, tz)
        hour = local.hour

        temperature = 15 + math.sin((hour - 6) * math.pi / 12) * 10
        wind_speed = 2 + rng.random() * 8
        humidity = 40 + math.sin((hour - 12) * math.pi / 12) * 20

        wind = max(0.7, 1 - wind_speed * 0.03)
        trapped = 1.1 if humidity > 80 else 1.0
        rush = 1.15 if is_rush_hour(hour) else 1.0
        combined = diurnal_factor(hour) * rush * wind * trapped * base_trend

        aqi = round_half_up(current_aqi * combined * (0.95 + rng.random() * 0.1))
        pm25 = current_pm25 * combined * (0.95 + rng.random() * 0.1)
        no2 = current_no2 * combined * (0.95 + rng.random() * 0.1)

        forecast.append(ForecastPoint(
            hour=local.strftime("%H:%M"),
            timestamp=timestamp,
            aqi=int(clamp(aqi, 0, 500)),
            pm25=max(0.0, round(pm25, 1)),
            no2=max(0.0, round(no2, 1)),
            temperature=round_half_up(temperature),
            wind_speed=round(wind_speed, 1),
            humidity=round_half_up(humidity)
        ))
    return forecast


def seasonal_variation(timestamp: datetime) -> float:
    # heating season in winter, ozone in summer
    return math.sin((timestamp.month - 1 - 2) * math.pi / 6) * 15


def historical_series(time_range: str = "24h", location_type: str = "urban",
                      coord: Coordinate | None = None, now: datetime | None = None,
                      rng: random.Random | None = None) -> List[PollutantSample]:
    """Long-range history: hourly for 24h, daily for 3m/6m/1y."""
    rng = rng or random
    now = now or get_current_time()
    levels = HISTORICAL_LEVELS.get(location_type, HISTORICAL_LEVELS["urban"])

    if time_range in HISTORICAL_DAYS:
        points, step = HISTORICAL_DAYS[time_range], timedelta(days=1)
    else:
        points, step = 24, timedelta(hours=1)

    data = []
    for i in range(points, -1, -1):
        timestamp = now - step * i
        seasonal = seasonal_variation(timestamp)
        aqi = max(10.0, levels["aqi"] + seasonal + (rng.random() - 0.5) * 20)
        data.append(PollutantSample(
            timestamp=timestamp,
            aqi=round_half_up(aqi),
            pm25=levels["pm25"] * (1 + seasonal * 0.01),
            no2=levels["no2"] * (1 + seasonal * 0.01),
            o3=levels["o3"] * (1 + seasonal * 0.01),
            so2=levels["so2"],
            co=levels["co"],
            coordinates=coord if coord is not None else Coordinate(lat=0, lon=0)
        ))
    return data
