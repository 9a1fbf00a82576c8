# app/services/dashboard.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from app.schemas.dashboard import EntityMini, EntityStatusRow, TierCounts
from app.schemas.deadline import DeadlineRecord, DeadlineStatus, UsageObservation
from app.services.nearest_deadline import critical_sort_key, evaluate_deadlines, nearest_of
from app.services.semaphore import ThresholdPolicy, Tier
from app.services.usage_rate import DEFAULT_WINDOW_DAYS

log = logging.getLogger("app.dashboard")


def entity_mini(e) -> EntityMini:
    etype = getattr(e, "entity_type", None)
    return EntityMini(
        id=e.id,
        name=e.name,
        entity_type_id=getattr(e, "entity_type_id", None),
        entity_type_name=getattr(etype, "name", None),
        tracks_usage=bool(getattr(e, "tracks_usage", False)),
        created_at=getattr(e, "created_at", None),
    )


def entity_statuses(
    entity,
    policy: ThresholdPolicy,
    *,
    as_of: Union[date, datetime],
    latest=None,
    window: Sequence = (),
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[DeadlineStatus]:
    """All deadline statuses of one entity; usage data only for usage-tracking entities."""
    deadlines = [DeadlineRecord.model_validate(d) for d in (entity.deadlines or [])]
    tracks_usage = bool(getattr(entity, "tracks_usage", False))
    observations = (
        [UsageObservation.model_validate(o) for o in window] if tracks_usage else []
    )
    return evaluate_deadlines(
        deadlines,
        policy,
        as_of=as_of,
        latest_usage=getattr(latest, "value", None) if tracks_usage else None,
        observations=observations,
        window_days=window_days,
    )


def build_rows(
    entities: Iterable,
    policy: ThresholdPolicy,
    *,
    as_of: Union[date, datetime],
    latest_usage: Optional[Mapping[int, object]] = None,
    usage_windows: Optional[Mapping[int, Sequence]] = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[EntityStatusRow]:
    """
    One row per entity, represented by its nearest deadline.
    latest_usage: entity_id -> row with .value / .logged_at
    usage_windows: entity_id -> usage rows inside the estimation window
    """
    latest_usage = latest_usage or {}
    usage_windows = usage_windows or {}

    rows: List[EntityStatusRow] = []
    for e in entities:
        latest = latest_usage.get(e.id)
        statuses = entity_statuses(
            e,
            policy,
            as_of=as_of,
            latest=latest,
            window=usage_windows.get(e.id, ()),
            window_days=window_days,
        )
        nearest = nearest_of(statuses)
        rows.append(
            EntityStatusRow(
                entity=entity_mini(e),
                tier=nearest.tier.value,
                nearest=nearest,
                latest_usage=getattr(latest, "value", None),
                latest_usage_at=getattr(latest, "logged_at", None),
            )
        )
    return rows


def count_tiers(rows: Iterable[EntityStatusRow]) -> TierCounts:
    counts: Dict[str, int] = {t.value: 0 for t in Tier}
    total = 0
    for r in rows:
        counts[r.tier if r.tier in counts else Tier.NONE.value] += 1
        total += 1
    return TierCounts(total=total, **counts)


def filter_rows(
    rows: Iterable[EntityStatusRow],
    *,
    status: Optional[str] = None,
    entity_type_id: Optional[int] = None,
    q: Optional[str] = None,
) -> List[EntityStatusRow]:
    needle = (q or "").strip().lower()
    out = []
    for r in rows:
        if status and status != "all" and r.tier != status:
            continue
        if entity_type_id is not None and r.entity.entity_type_id != entity_type_id:
            continue
        if needle and needle not in r.entity.name.lower():
            continue
        out.append(r)
    return out


def _created_ts(r: EntityStatusRow) -> float:
    c = r.entity.created_at
    if c is None:
        return float("-inf")
    return c.timestamp()


def sort_rows(rows: Iterable[EntityStatusRow], mode: str = "critical") -> List[EntityStatusRow]:
    rows = list(rows)
    if mode == "name":
        return sorted(rows, key=lambda r: r.entity.name.lower())
    if mode == "type":
        return sorted(rows, key=lambda r: (r.entity.entity_type_name or "").lower())
    if mode == "created":
        return sorted(rows, key=_created_ts, reverse=True)
    if mode != "critical":
        log.warning("unknown sort mode %r, using 'critical'", mode)
    return sorted(
        rows,
        key=lambda r: critical_sort_key(r.tier, r.nearest.due_at, r.entity.name),
    )
