from datetime import date, datetime, time, timedelta
from typing import Tuple

import pytz

UTC = pytz.utc


def utc_now() -> datetime:
    """Get current time in UTC"""
    return datetime.now(UTC)


def start_of_day_utc(day: date) -> datetime:
    """UTC midnight that opens the business day"""
    return UTC.localize(datetime.combine(day, time.min))


def utc_day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Half-open range [00:00Z, next 00:00Z) covering one business day"""
    start = start_of_day_utc(day)
    return start, start + timedelta(days=1)


def utc_range_bounds(start_day: date, end_day: date) -> Tuple[datetime, datetime]:
    """Half-open range covering every day from start_day to end_day inclusive"""
    return start_of_day_utc(start_day), start_of_day_utc(end_day) + timedelta(days=1)
