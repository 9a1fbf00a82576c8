# app/schemas/deadline.py
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.semaphore import Tier

MeasureBy = Literal["date", "usage"]
AverageMode = Literal["manual", "auto"]


# -----------------------------
# Records read from the data store
# -----------------------------
class DeadlineTypeRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    name: Optional[str] = None
    measure_by: Optional[str] = Field(
        None, description="'date' or 'usage'; anything else is treated as unknown."
    )
    requires_document: bool = False
    is_active: Optional[bool] = True


class DeadlineRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    entity_id: Optional[int] = None
    deadline_type_id: Optional[int] = None

    last_done_date: Optional[date] = None

    # measure_by = date
    next_due_date: Optional[date] = None

    # measure_by = usage
    last_done_usage: Optional[float] = None
    frequency: Optional[float] = Field(None, description="Usage units between fulfilments.")
    frequency_unit: Optional[str] = None
    usage_daily_average_mode: Optional[str] = Field(
        "manual", description="'manual' or 'auto'; missing means manual."
    )
    usage_daily_average: Optional[float] = Field(
        None, description="Manual daily average (also the fallback in auto mode)."
    )

    created_at: Optional[datetime] = None

    # joined type, the way list endpoints return it
    deadline_type: Optional[DeadlineTypeRecord] = None


class UsageObservation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entity_id: Optional[int] = None
    value: Optional[float] = None
    logged_at: Optional[datetime] = None


# -----------------------------
# Engine output
# -----------------------------
class DeadlineStatus(BaseModel):
    deadline_id: Optional[int] = None
    due_at: Optional[date] = None
    days_remaining: Optional[float] = Field(
        None, description="Unrounded distance in days used for classification."
    )
    tier: Tier = Tier.NONE
    label: str
    measure_by: Literal["date", "usage", "unknown"] = "unknown"
    type_name: str = "—"
    daily_rate: Optional[float] = None
    rate_source: Optional[Literal["manual", "auto", "manual_fallback", "none"]] = None


# -----------------------------
# Stateless evaluation payloads
# -----------------------------
class ThresholdPolicyIn(BaseModel):
    yellow_days: int = 60
    orange_days: int = 30
    red_days: int = 15


class EvaluateRequest(BaseModel):
    deadlines: List[DeadlineRecord] = Field(default_factory=list)
    observations: List[UsageObservation] = Field(
        default_factory=list, description="Usage history of the entity (any order)."
    )
    latest_usage: Optional[float] = Field(
        None, description="Latest usage value; derived from observations when omitted."
    )
    policy: Optional[ThresholdPolicyIn] = None
    as_of: Optional[Union[datetime, date]] = Field(
        None,
        description="Evaluation instant (default: now, UTC). A plain day means the end of that day.",
    )
    window_days: Optional[int] = Field(None, ge=2, le=3650)

    @field_validator("as_of", mode="before")
    @classmethod
    def _date_only_as_day(cls, v):
        # "YYYY-MM-DD" stays a day instead of becoming its midnight
        if isinstance(v, str) and len(v.strip()) == 10:
            try:
                return date.fromisoformat(v.strip())
            except ValueError:
                return v
        return v


class EvaluateResponse(BaseModel):
    as_of: date
    statuses: List[DeadlineStatus]
    nearest: DeadlineStatus
