
from __future__ import annotations
import calendar
import math
from datetime import date, datetime, timedelta

import numpy as np
import pandas as pd

MS_PER_DAY = 86_400_000


def drop_timezone_preserving_wall(value):
    """Return ``value`` as a naive local datetime.

    Aware values are converted to the local zone first so that an instant maps
    to the calendar day the user sees on their wall clock.
    """
    if value is None or value is pd.NaT:
        return pd.NaT
    if isinstance(value, pd.Timestamp):
        if value.tzinfo is not None:
            return value.to_pydatetime().astimezone().replace(tzinfo=None)
        return value.to_pydatetime()
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    return value


def _to_local_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return drop_timezone_preserving_wall(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float, np.integer, np.floating)):
        return datetime.fromtimestamp(float(value) / 1000.0)
    raise TypeError(f"Cannot interpret {value!r} as a point in time")


def day_from_date(value: date) -> int:
    """Milliseconds since epoch of local midnight on ``value``."""
    midnight = datetime(value.year, value.month, value.day)
    return int(round(midnight.timestamp() * 1000))


def get_day(value) -> int:
    """Normalize ``value`` (ms epoch, datetime, date or Timestamp) to its local-midnight day."""
    return day_from_date(_to_local_datetime(value).date())


def day_to_date(day: int) -> date:
    return datetime.fromtimestamp(day / 1000.0).date()


def day_to_datetime(day: int) -> datetime:
    return datetime.fromtimestamp(day / 1000.0)


def previous_day(day: int) -> int:
    # Calendar arithmetic, so days around DST changes stay on local midnight.
    return day_from_date(day_to_date(day) - timedelta(days=1))


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_date(value) -> str:
    """Format as ``"October 19th, 2026"``."""
    d = _to_local_datetime(value).date()
    return f"{calendar.month_name[d.month]} {ordinal(d.day)}, {d.year}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def from_now(value, now: datetime) -> str:
    """Humanized distance between ``value`` and ``now`` (``"3 days ago"``, ``"in an hour"``)."""
    then = _to_local_datetime(value)
    delta = (drop_timezone_preserving_wall(now) - then).total_seconds()
    seconds = abs(delta)

    minutes = seconds / 60.0
    hours = minutes / 60.0
    days = hours / 24.0
    if seconds < 45:
        text = "a few seconds"
    elif seconds < 90:
        text = "a minute"
    elif minutes < 45:
        text = f"{_round_half_up(minutes)} minutes"
    elif minutes < 90:
        text = "an hour"
    elif hours < 22:
        text = f"{_round_half_up(hours)} hours"
    elif hours < 36:
        text = "a day"
    elif days < 26:
        text = f"{_round_half_up(days)} days"
    elif days < 45:
        text = "a month"
    elif days < 320:
        text = f"{_round_half_up(days / 30.4)} months"
    elif days < 548:
        text = "a year"
    else:
        text = f"{_round_half_up(days / 365.0)} years"

    return f"{text} ago" if delta >= 0 else f"in {text}"


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


__all__ = [
    "MS_PER_DAY",
    "capitalize",
    "day_from_date",
    "day_to_date",
    "day_to_datetime",
    "drop_timezone_preserving_wall",
    "format_date",
    "from_now",
    "get_day",
    "ordinal",
    "previous_day",
]
