"""Calendar day count: expiration date -> days remaining -> year fraction."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional, Union

from .config import DAYS_PER_YEAR

DateLike = Union[date, datetime, str]

_SECONDS_PER_DAY = 86_400.0


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip())
    raise TypeError(f"expected date, datetime or ISO string, got {type(value).__name__}")


def days_to_expiry(expiration: DateLike, today: Optional[DateLike] = None) -> int:
    """Calendar days until ``expiration``.

    Partial days round up, so an expiration later today counts as one
    day; past expirations clamp to 0.
    """
    exp_dt = _as_datetime(expiration)
    now = datetime.now() if today is None else _as_datetime(today)
    seconds = (exp_dt - now).total_seconds()
    return max(0, math.ceil(seconds / _SECONDS_PER_DAY))


def year_fraction(days: float) -> float:
    """Days -> years on the calendar/365 convention."""
    if days < 0:
        raise ValueError(f"days must be non-negative, got {days}")
    return days / DAYS_PER_YEAR
