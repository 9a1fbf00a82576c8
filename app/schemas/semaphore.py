# app/schemas/semaphore.py
from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_THRESHOLD_DAYS = 3650

THRESHOLD_KEYS = {
    name: (name, f"date_{name}", f"usage_{name}")
    for name in ("yellow_days", "orange_days", "red_days")
}


class SemaphoreSettingsError(ValueError):
    """Threshold values rejected before they reach storage."""


def _trunc(v: Any) -> float:
    if v is None or isinstance(v, bool):
        return math.nan
    try:
        f = float(v)
    except (TypeError, ValueError):
        return math.nan
    return float(math.trunc(f)) if math.isfinite(f) else math.nan


def validate_thresholds(yellow: Any, orange: Any, red: Any) -> tuple[int, int, int]:
    """
    Truncate to whole days and check 0 <= red <= orange <= yellow <= 3650.
    Raises SemaphoreSettingsError with a user-facing message.
    """
    y, o, r = _trunc(yellow), _trunc(orange), _trunc(red)
    if not all(math.isfinite(n) for n in (y, o, r)):
        raise SemaphoreSettingsError("invalid values")
    if y < 0 or o < 0 or r < 0:
        raise SemaphoreSettingsError("values cannot be negative")
    if y > MAX_THRESHOLD_DAYS or o > MAX_THRESHOLD_DAYS or r > MAX_THRESHOLD_DAYS:
        raise SemaphoreSettingsError(f"value too high (max {MAX_THRESHOLD_DAYS})")
    if not (y >= o >= r):
        raise SemaphoreSettingsError("must be yellow >= orange >= red")
    return int(y), int(o), int(r)


# -----------------------------
# Payloads
# -----------------------------
class SemaphoreSettingsIn(BaseModel):
    # Older clients send separate date_*/usage_* keys; one policy covers both.
    # The first non-null of <x>, date_<x>, usage_<x> wins.
    yellow_days: Optional[Any] = None
    orange_days: Optional[Any] = None
    red_days: Optional[Any] = None

    @model_validator(mode="before")
    @classmethod
    def _coalesce_legacy_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        out = dict(data)
        for name in THRESHOLD_KEYS:
            out[name] = next(
                (
                    data[key]
                    for key in THRESHOLD_KEYS[name]
                    if data.get(key) is not None
                ),
                None,
            )
        return out


class SemaphoreSettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    organization_id: int
    yellow_days: int = Field(60, description="Yellow when days remaining <= this.")
    orange_days: int = Field(30, description="Orange when days remaining <= this.")
    red_days: int = Field(15, description="Red (critical) when days remaining <= this.")
    updated_at: Optional[datetime] = None


class SemaphoreSettingsResponse(BaseModel):
    organization_id: int
    settings: SemaphoreSettingsOut
