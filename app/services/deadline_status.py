# app/services/deadline_status.py
from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Optional, Union

from app.schemas.deadline import DeadlineStatus
from app.services.semaphore import ThresholdPolicy, Tier, classify, LABEL_EXPIRED
from app.services.usage_rate import (
    NoRate,
    RateSource,
    as_utc,
    finite_or_none,
    rate_source_for,
)

LABEL_NO_TYPE = "No type"
LABEL_NO_DATE = "No date"
LABEL_INCOMPLETE = "Incomplete"


def _field(obj, name: str):
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _as_date(v) -> Optional[date]:
    if v is None:
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    try:
        return date.fromisoformat(str(v)[:10])
    except ValueError:
        return None


def evaluation_day(as_of: Union[date, datetime]) -> date:
    """Calendar day of the evaluation instant (UTC for aware datetimes)."""
    if isinstance(as_of, datetime):
        return as_utc(as_of).date() if as_of.tzinfo else as_of.date()
    return as_of


def _due_from_days(today: date, days: float) -> date:
    # display rounding only; classification uses the raw value
    return today + timedelta(days=math.ceil(days))


def calculate_status(
    deadline,
    deadline_type,
    policy: ThresholdPolicy,
    *,
    as_of: Union[date, datetime],
    latest_usage=None,
    rate: Optional[RateSource] = None,
) -> DeadlineStatus:
    """
    Status of one deadline on the calendar day of `as_of`.

    deadline / deadline_type may be schema objects, ORM rows or dicts.
    rate: effective daily rate for usage deadlines; when omitted it is taken
    from the deadline itself (manual average, or manual fallback in auto mode).
    Data gaps never raise; they come back as tier "none".
    """
    if deadline is None:
        raise ValueError("deadline is required")

    deadline_id = _field(deadline, "id")
    today = evaluation_day(as_of)

    if deadline_type is None:
        return DeadlineStatus(
            deadline_id=deadline_id, tier=Tier.NONE, label=LABEL_NO_TYPE
        )

    type_name = _field(deadline_type, "name") or "—"
    measure_by = _field(deadline_type, "measure_by")

    if measure_by == "date":
        due = _as_date(_field(deadline, "next_due_date"))
        if due is None:
            return DeadlineStatus(
                deadline_id=deadline_id,
                tier=Tier.NONE,
                label=LABEL_NO_DATE,
                measure_by="date",
                type_name=type_name,
            )
        days = float((due - today).days)
        tier, label = classify(days, policy)
        return DeadlineStatus(
            deadline_id=deadline_id,
            due_at=due,
            days_remaining=days,
            tier=tier,
            label=label,
            measure_by="date",
            type_name=type_name,
        )

    if measure_by != "usage":
        return DeadlineStatus(
            deadline_id=deadline_id,
            tier=Tier.NONE,
            label=LABEL_INCOMPLETE,
            measure_by="unknown",
            type_name=type_name,
        )

    return _usage_status(
        deadline,
        policy,
        today=today,
        latest_usage=latest_usage,
        rate=rate if rate is not None else rate_source_for(deadline, None),
        deadline_id=deadline_id,
        type_name=type_name,
    )


def _usage_status(
    deadline,
    policy: ThresholdPolicy,
    *,
    today: date,
    latest_usage,
    rate: RateSource,
    deadline_id,
    type_name: str,
) -> DeadlineStatus:
    frequency = finite_or_none(_field(deadline, "frequency"))
    last_done_usage = finite_or_none(_field(deadline, "last_done_usage"))
    latest = finite_or_none(latest_usage)
    avg = finite_or_none(rate.value)

    base = dict(
        deadline_id=deadline_id,
        measure_by="usage",
        type_name=type_name,
        rate_source=rate.kind,
    )

    if isinstance(rate, NoRate) or avg is None or avg <= 0 or frequency is None:
        return DeadlineStatus(tier=Tier.NONE, label=LABEL_INCOMPLETE, **base)
    base["daily_rate"] = avg

    # Observation-anchored: how much of the interval has been consumed
    if latest is not None and last_done_usage is not None:
        remaining = frequency - (latest - last_done_usage)
        if remaining <= 0:
            # already past the interval; today stands in for the due date
            return DeadlineStatus(
                due_at=today,
                days_remaining=0.0,
                tier=Tier.RED,
                label=LABEL_EXPIRED,
                **base,
            )
        days = remaining / avg
        tier, label = classify(days, policy)
        return DeadlineStatus(
            due_at=_due_from_days(today, days),
            days_remaining=days,
            tier=tier,
            label=label,
            **base,
        )

    # Last-done-anchored projection
    last_done = _as_date(_field(deadline, "last_done_date"))
    if last_done is not None:
        days = (last_done - today).days + frequency / avg
        tier, label = classify(days, policy)
        return DeadlineStatus(
            due_at=_due_from_days(today, days),
            days_remaining=days,
            tier=tier,
            label=label,
            **base,
        )

    return DeadlineStatus(tier=Tier.NONE, label=LABEL_INCOMPLETE, **base)
