# app/api/v1/deadlines.py
from __future__ import annotations

import os
from datetime import date, datetime, time, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.crud import deadlines as crud
from app.crud.semaphore_settings import get_settings
from app.db.session import get_db
from app.schemas.dashboard import (
    DashboardMeta,
    DashboardOut,
    EntityDeadlinesOut,
    SortMode,
)
from app.schemas.deadline import EvaluateRequest, EvaluateResponse
from app.services.dashboard import (
    build_rows,
    count_tiers,
    entity_mini,
    entity_statuses,
    filter_rows,
    sort_rows,
)
from app.services.deadline_status import evaluation_day
from app.services.nearest_deadline import evaluate_deadlines, nearest_of
from app.services.semaphore import ThresholdPolicy, DEFAULT_POLICY
from app.services.usage_rate import as_utc

router = APIRouter()

USAGE_WINDOW_DAYS = max(int(os.getenv("USAGE_WINDOW_DAYS", "30")), 2)


# ----- helpers -----


def _evaluation_instant(as_of: Optional[date]) -> datetime:
    """Given a day: end of that day (UTC). Otherwise: now."""
    if as_of is None:
        return datetime.now(timezone.utc)
    return datetime.combine(as_of, time.max, tzinfo=timezone.utc)


# ----- endpoints -----


@router.get("/orgs/{org_id}/dashboard", response_model=DashboardOut)
def dashboard(
    org_id: int,
    status: Optional[str] = Query(None, pattern="^(all|red|orange|yellow|green|none)$"),
    entity_type_id: Optional[int] = Query(None, ge=1),
    q: Optional[str] = Query(None, max_length=255),
    sort: SortMode = Query("critical"),
    as_of: Optional[date] = Query(None, description="Evaluate as of this day (default: today, UTC)."),
    db: Session = Depends(get_db),
):
    """
    One row per entity, represented by its nearest deadline.
    Counts are over all entities; filters only narrow the rows.
    """
    instant = _evaluation_instant(as_of)
    settings = get_settings(db, org_id)
    policy = ThresholdPolicy.from_obj(settings)

    entities = crud.list_entities(db, org_id)
    ids = [e.id for e in entities]
    usage_ids = [e.id for e in entities if e.tracks_usage]

    rows = build_rows(
        entities,
        policy,
        as_of=instant,
        latest_usage=crud.latest_usage_by_entity(db, usage_ids),
        usage_windows=crud.usage_window_by_entity(
            db, usage_ids, until=instant, window_days=USAGE_WINDOW_DAYS
        ),
        window_days=USAGE_WINDOW_DAYS,
    )

    visible = filter_rows(rows, status=status, entity_type_id=entity_type_id, q=q)
    return DashboardOut(
        meta=DashboardMeta(
            organization_id=org_id,
            as_of=evaluation_day(instant),
            entity_count_in_org=len(ids),
            settings=settings,
        ),
        counts=count_tiers(rows),
        rows=sort_rows(visible, sort),
    )


@router.get(
    "/orgs/{org_id}/entities/{entity_id}/deadlines",
    response_model=EntityDeadlinesOut,
)
def entity_deadlines(
    org_id: int,
    entity_id: int,
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    entity = crud.get_entity(db, org_id, entity_id)
    if entity is None:
        raise HTTPException(status_code=404, detail="entity not found")

    instant = _evaluation_instant(as_of)
    policy = ThresholdPolicy.from_obj(get_settings(db, org_id))

    latest = None
    window = []
    if entity.tracks_usage:
        latest = crud.latest_usage_by_entity(db, [entity.id]).get(entity.id)
        window = crud.usage_window_by_entity(
            db, [entity.id], until=instant, window_days=USAGE_WINDOW_DAYS
        ).get(entity.id, [])

    statuses = entity_statuses(
        entity,
        policy,
        as_of=instant,
        latest=latest,
        window=window,
        window_days=USAGE_WINDOW_DAYS,
    )
    return EntityDeadlinesOut(
        entity=entity_mini(entity),
        as_of=evaluation_day(instant),
        latest_usage=getattr(latest, "value", None),
        latest_usage_at=getattr(latest, "logged_at", None),
        statuses=statuses,
        nearest=nearest_of(statuses),
    )


@router.post("/deadline-status/evaluate", response_model=EvaluateResponse)
def evaluate(payload: EvaluateRequest):
    """
    Stateless evaluation of one entity snapshot.
    latest_usage defaults to the value of the newest observation at or
    before the evaluation instant. A plain day is evaluated at its end.
    """
    instant = as_utc(payload.as_of) if payload.as_of else datetime.now(timezone.utc)
    policy = (
        ThresholdPolicy(**payload.policy.model_dump()) if payload.policy else DEFAULT_POLICY
    )

    latest_usage = payload.latest_usage
    if latest_usage is None:
        dated = [
            o
            for o in payload.observations
            if o.logged_at is not None and o.value is not None and as_utc(o.logged_at) <= instant
        ]
        if dated:
            latest_usage = max(dated, key=lambda o: as_utc(o.logged_at)).value

    statuses = evaluate_deadlines(
        payload.deadlines,
        policy,
        as_of=instant,
        latest_usage=latest_usage,
        observations=payload.observations,
        window_days=payload.window_days or USAGE_WINDOW_DAYS,
    )
    return EvaluateResponse(
        as_of=evaluation_day(instant),
        statuses=statuses,
        nearest=nearest_of(statuses),
    )
