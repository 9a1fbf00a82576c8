# app/services/usage_rate.py
"""
Daily usage-rate estimation for usage-measured deadlines.

estimate_daily_rate() looks at the trailing window of usage logs of one
entity and returns (latest - earliest) / whole days between them, or None
when the window does not carry enough signal.

resolve_rate_source() picks the effective rate for one deadline:
  manual -> the manual average (if positive)
  auto   -> the estimate; the manual average as safety net; else nothing
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional, Union

log = logging.getLogger("app.usage_rate")

DEFAULT_WINDOW_DAYS = 30
MIN_WINDOW_DAYS = 2

SECONDS_PER_DAY = 86400


# ---- Helpers -----------------------------------------------------------------
def finite_or_none(v) -> Optional[float]:
    """Numbers that are None/NaN/inf/non-numeric count as absent."""
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def as_utc(dt: Union[date, datetime]) -> datetime:
    """Dates become end-of-day UTC; naive datetimes are taken as UTC."""
    if not isinstance(dt, datetime):
        return datetime.combine(dt, time.max, tzinfo=timezone.utc)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _field(obj, name: str):
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


# ---- Estimator ---------------------------------------------------------------
def estimate_daily_rate(
    observations: Iterable,
    *,
    as_of: Union[date, datetime],
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> Optional[float]:
    """
    Observations are anything exposing .value / .logged_at (or dict keys).
    Returns a positive finite rate, or None.
    """
    if window_days is None:
        window_days = DEFAULT_WINDOW_DAYS
    window_days = max(int(window_days), MIN_WINDOW_DAYS)
    end = as_utc(as_of)
    start = end - timedelta(days=window_days)

    points = []
    for o in observations or ():
        value = finite_or_none(_field(o, "value"))
        ts = _field(o, "logged_at")
        if value is None or ts is None:
            continue
        ts = as_utc(ts)
        if start <= ts <= end:
            points.append((ts, value))

    if len(points) < 2:
        return None

    points.sort(key=lambda p: p[0])
    (first_ts, first_val), (last_ts, last_val) = points[0], points[-1]

    delta_days = math.floor((last_ts - first_ts).total_seconds() / SECONDS_PER_DAY)
    delta_value = last_val - first_val
    if delta_days < 1:
        return None
    if delta_value <= 0:
        # meter reset or no activity in the window
        log.debug(
            "no usage estimate: non-positive delta %s over %s days", delta_value, delta_days
        )
        return None

    rate = delta_value / delta_days
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


# ---- Rate source -------------------------------------------------------------
@dataclass(frozen=True)
class ManualRate:
    value: float
    kind = "manual"


@dataclass(frozen=True)
class AutoRate:
    value: float
    kind = "auto"


@dataclass(frozen=True)
class AutoWithManualFallback:
    value: float
    kind = "manual_fallback"


@dataclass(frozen=True)
class NoRate:
    value = None
    kind = "none"


RateSource = Union[ManualRate, AutoRate, AutoWithManualFallback, NoRate]


def _positive(v) -> Optional[float]:
    f = finite_or_none(v)
    return f if f is not None and f > 0 else None


def resolve_rate_source(
    mode: Optional[str],
    manual_daily_average,
    estimate: Optional[float],
) -> RateSource:
    manual = _positive(manual_daily_average)

    if (mode or "manual").strip().lower() != "auto":
        return ManualRate(manual) if manual is not None else NoRate()

    auto = _positive(estimate)
    if auto is not None:
        return AutoRate(auto)
    if manual is not None:
        return AutoWithManualFallback(manual)
    return NoRate()


def rate_source_for(deadline, estimate: Optional[float]) -> RateSource:
    """Same as resolve_rate_source, reading mode/average off a deadline record."""
    return resolve_rate_source(
        _field(deadline, "usage_daily_average_mode"),
        _field(deadline, "usage_daily_average"),
        estimate,
    )
