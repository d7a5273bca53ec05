"""
test_regional.py — Tests for the regional baseline model.
"""

import math

import pytest

from backend.models import Coordinate
from backend.regional import classify_region, regional_baseline


class TestClassification:
    def test_industrial_wins_over_urban(self):
        assert classify_region(10, 10) == "industrial"

    def test_urban_when_outside_industrial_box(self):
        assert classify_region(42, -95) == "urban"
        assert classify_region(30, 95) == "urban"

    def test_coastal_low_latitude_far_longitude(self):
        assert classify_region(30, 150) == "coastal"

    def test_los_angeles_falls_through_to_coastal(self):
        # |lon| = 118 is outside the urban box
        assert classify_region(34.05, -118.24) == "coastal"

    def test_high_latitude_is_rural(self):
        assert classify_region(80, 10) == "rural"


class TestBaseline:
    def test_missing_coordinate_uses_default_rural_profile(self):
        baseline = regional_baseline(None)
        assert baseline.region == "default"
        assert baseline.aqi == pytest.approx(35 * 0.7)
        assert baseline.co == pytest.approx(0.5 * 0.7)

    def test_urban_multiplier(self):
        baseline = regional_baseline(Coordinate(lat=42, lon=-95))
        assert baseline.region == "urban"
        assert baseline.aqi == pytest.approx(45.5)
        assert baseline.pm25 == pytest.approx(12 * 1.3)

    def test_industrial_multiplier(self):
        baseline = regional_baseline(Coordinate(lat=10, lon=10))
        assert baseline.aqi == pytest.approx(52.5)
        assert baseline.no2 == pytest.approx(27.0)

    def test_los_angeles_coastal_multiplier(self):
        baseline = regional_baseline(Coordinate(lat=34.05, lon=-118.24))
        assert baseline.aqi == pytest.approx(28.0)

    def test_rural_fall_through(self):
        baseline = regional_baseline(Coordinate(lat=80, lon=10))
        assert baseline.region == "rural"
        assert baseline.aqi == pytest.approx(24.5)
        assert baseline.o3 == pytest.approx(17.5)

    def test_deterministic(self):
        coord = Coordinate(lat=51.5, lon=-0.12)
        assert regional_baseline(coord) == regional_baseline(coord)

    @pytest.mark.parametrize("lat", [-1e9, -91, -90, 0, 39.999, 90, 1000, math.nan, math.inf])
    @pytest.mark.parametrize("lon", [-1e9, -181, 0, 89.999, 180, 500, math.nan])
    def test_total_over_any_float_pair(self, lat, lon):
        baseline = regional_baseline(Coordinate.model_construct(lat=lat, lon=lon))
        assert baseline.region in {"industrial", "urban", "coastal", "rural"}
        assert baseline.aqi >= 0
