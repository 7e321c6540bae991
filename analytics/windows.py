"""
Time window helpers.

All windows are half-open: ``[as_of - days, as_of)``. A review created exactly
at the lower bound is inside the window, one created exactly at ``as_of`` is not.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Tuple

from .exceptions import InvalidWindow


def validate_window(days: Any, name: str = "window_days") -> int:
    """Fail fast on a non-positive or non-integer day count."""
    if isinstance(days, bool) or not isinstance(days, int):
        raise InvalidWindow(f"{name} must be an integer number of days, got {days!r}")
    if days <= 0:
        raise InvalidWindow(f"{name} must be > 0, got {days}")
    return days


def validate_threshold(threshold_percent: Any) -> float:
    """Fail fast on a threshold outside [0, 100]."""
    if isinstance(threshold_percent, bool) or not isinstance(threshold_percent, (int, float)):
        raise InvalidWindow(f"threshold_percent must be a number, got {threshold_percent!r}")
    if math.isnan(threshold_percent) or not 0.0 <= threshold_percent <= 100.0:
        raise InvalidWindow(f"threshold_percent must be within [0, 100], got {threshold_percent}")
    return float(threshold_percent)


def ensure_utc(moment: datetime) -> datetime:
    """Return an aware UTC datetime. Naive values are taken to be UTC already."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def window_bounds(
    as_of: Optional[datetime], days: int, name: str = "window_days"
) -> Tuple[datetime, datetime]:
    """
    Compute the half-open window ending at as_of.

    Args:
        as_of: End of the window (exclusive). Defaults to now.
        days: Window length in days, must be > 0
        name: Parameter name used in the InvalidWindow message

    Returns:
        (from_inclusive, to_exclusive) as aware UTC datetimes
    """
    validate_window(days, name)
    end = ensure_utc(as_of) if as_of is not None else utc_now()
    return end - timedelta(days=days), end


def in_window(moment: datetime, start: datetime, end: datetime) -> bool:
    return start <= ensure_utc(moment) < end
