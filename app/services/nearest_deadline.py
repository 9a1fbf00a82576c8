# app/services/nearest_deadline.py
from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple, Union

from app.schemas.deadline import DeadlineStatus
from app.services.deadline_status import calculate_status
from app.services.semaphore import ThresholdPolicy, Tier, tier_priority
from app.services.usage_rate import (
    DEFAULT_WINDOW_DAYS,
    estimate_daily_rate,
    rate_source_for,
)

LABEL_NO_DEADLINES = "No deadlines"


def _deadline_type(d):
    if isinstance(d, dict):
        return d.get("deadline_type")
    return getattr(d, "deadline_type", None)


def is_active(d) -> bool:
    """A deadline counts unless its type is explicitly inactive."""
    t = _deadline_type(d)
    if t is None:
        return True
    flag = t.get("is_active") if isinstance(t, dict) else getattr(t, "is_active", None)
    return flag is not False


def evaluate_deadlines(
    deadlines: Optional[Iterable],
    policy: ThresholdPolicy,
    *,
    as_of: Union[date, datetime],
    latest_usage=None,
    observations: Iterable = (),
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[DeadlineStatus]:
    """
    Status of every active deadline of one entity, in input order.
    The usage estimate is computed once per entity and shared.
    """
    active = [d for d in (deadlines or ()) if is_active(d)]
    if not active:
        return []

    estimate = estimate_daily_rate(observations, as_of=as_of, window_days=window_days)
    return [
        calculate_status(
            d,
            _deadline_type(d),
            policy,
            as_of=as_of,
            latest_usage=latest_usage,
            rate=rate_source_for(d, estimate),
        )
        for d in active
    ]


def nearest_of(statuses: Iterable[DeadlineStatus]) -> DeadlineStatus:
    """
    Earliest non-null due_at wins (ties keep the first seen).
    A null due_at never replaces a dated one; all null -> the first one.
    """
    best: Optional[DeadlineStatus] = None
    for current in statuses:
        if best is None:
            best = current
        elif best.due_at is None and current.due_at is not None:
            best = current
        elif (
            best.due_at is not None
            and current.due_at is not None
            and current.due_at < best.due_at
        ):
            best = current

    if best is None:
        return DeadlineStatus(tier=Tier.NONE, label=LABEL_NO_DEADLINES)
    return best


def pick_nearest_deadline(
    deadlines: Optional[Iterable],
    policy: ThresholdPolicy,
    *,
    as_of: Union[date, datetime],
    latest_usage=None,
    observations: Iterable = (),
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> DeadlineStatus:
    return nearest_of(
        evaluate_deadlines(
            deadlines,
            policy,
            as_of=as_of,
            latest_usage=latest_usage,
            observations=observations,
            window_days=window_days,
        )
    )


def critical_sort_key(tier, due_at: Optional[date], name: str = "") -> Tuple[int, int, str]:
    """Outer ordering of entities: tier severity, then soonest due, then name."""
    due_ord = due_at.toordinal() if due_at is not None else date.max.toordinal() + 1
    return (tier_priority(tier), due_ord, (name or "").lower())
