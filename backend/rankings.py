#file: backend/rankings.py

import random
from datetime import datetime
from typing import Dict, List, Sequence

from backend.cities import NORTH_AMERICAN_CITIES
from backend.models import City, CityRanking, PollutantSample
from backend.synthesis import regenerate_series


def ranking_category(aqi: int) -> str:
    if aqi <= 25:
        return "best"
    if aqi <= 50:
        return "good"
    if aqi <= 100:
        return "moderate"
    if aqi <= 150:
        return "poor"
    return "worst"


def aqi_trend(series: Sequence[PollutantSample]) -> str:
    """Compare the last two readings; moves of 5 AQI or less count as stable."""
    if len(series) < 2:
        return "stable"
    current, previous = series[-1].aqi, series[-2].aqi
    if current < previous - 5:
        return "improving"
    if current > previous + 5:
        return "deteriorating"
    return "stable"


def rank_cities(series_by_city: Dict[str, Sequence[PollutantSample]], cities: Sequence[City]) -> List[CityRanking]:
    """Rank cities by their latest AQI, cleanest first."""
    entries = []
    for city in cities:
        series = series_by_city.get(city.city)
        if not series:
            continue
        latest = series[-1]
        entries.append((latest, city, aqi_trend(series)))
    entries.sort(key=lambda entry: entry[0].aqi)

    return [
        CityRanking(
            rank=position,
            city=city.city,
            country=city.country,
            aqi=latest.aqi,
            pm25=latest.pm25,
            no2=latest.no2,
            o3=latest.o3,
            so2=latest.so2,
            co=latest.co,
            trend=trend,
            category=ranking_category(latest.aqi),
            last_update=latest.timestamp,
            coordinates=latest.coordinates
        )
        for position, (latest, city, trend) in enumerate(entries, start=1)
    ]


def synthesize_rankings(cities: Sequence[City] = NORTH_AMERICAN_CITIES, now: datetime | None = None,
                        rng: random.Random | None = None) -> List[CityRanking]:
    series_by_city = {
        city.city: regenerate_series(city.to_coordinate(), None, now=now, rng=rng)
        for city in cities
    }
    return rank_cities(series_by_city, cities)
