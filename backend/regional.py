#file: backend/regional.py

from backend.models import Coordinate, RegionalBaseline

BASE_LEVELS = {
    "aqi": 35.0,
    "pm25": 12.0,
    "no2": 18.0,
    "o3": 25.0,
    "so2": 2.0,
    "co": 0.5
}

REGION_MULTIPLIERS = {
    "industrial": 1.5,
    "urban": 1.3,
    "coastal": 0.8,
    "rural": 0.7
}


def classify_region(lat: float, lon: float) -> str:
    """Map a coordinate pair to its pollution bucket, first match wins."""
    if abs(lat) < 40 and abs(lon) < 90:
        return "industrial"
    if abs(lat) < 45 and abs(lon) < 100:
        return "urban"
    if abs(lat) < 35:
        return "coastal"
    return "rural"


def regional_baseline(coord: Coordinate | None) -> RegionalBaseline:
    """Baseline pollutant concentrations for a coordinate, before time-of-day factors."""
    if coord is None:
        region, multiplier = "default", REGION_MULTIPLIERS["rural"]
    else:
        region = classify_region(coord.lat, coord.lon)
        multiplier = REGION_MULTIPLIERS[region]

    return RegionalBaseline(region=region, **{field: base * multiplier for field, base in BASE_LEVELS.items()})
