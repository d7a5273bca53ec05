#file: backend/utils.py

import math
from datetime import datetime
import pytz

from backend.config import SERIES_TIMEZONE


def get_current_time() -> datetime:
    """Get current UTC time as an aware datetime."""
    return datetime.now(pytz.utc)


def to_local(timestamp: datetime, tz_name: str | None = None) -> datetime:
    """Convert an aware timestamp to the zone used for hour-of-day bucketing."""
    return timestamp.astimezone(pytz.timezone(tz_name or SERIES_TIMEZONE))


def round_half_up(value: float) -> int:
    # round() would use banker's rounding
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
