# app/crud/deadlines.py
from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.models.deadline import Deadline
from app.models.entity import Entity
from app.models.usage_log import UsageLog


def list_entities(db: Session, organization_id: int) -> List[Entity]:
    """Entities of an organization with their deadlines (+types), newest first."""
    return (
        db.query(Entity)
        .options(selectinload(Entity.deadlines).joinedload(Deadline.deadline_type))
        .filter(Entity.organization_id == organization_id)
        .order_by(Entity.created_at.desc(), Entity.id.desc())
        .all()
    )


def get_entity(db: Session, organization_id: int, entity_id: int) -> Optional[Entity]:
    # scoped by org so foreign ids are indistinguishable from missing ones
    return (
        db.query(Entity)
        .options(selectinload(Entity.deadlines).joinedload(Deadline.deadline_type))
        .filter(Entity.organization_id == organization_id, Entity.id == entity_id)
        .first()
    )


def latest_usage_by_entity(db: Session, entity_ids: List[int]) -> Dict[int, UsageLog]:
    """Most recent usage log per entity (greatest logged_at, then id)."""
    if not entity_ids:
        return {}

    latest = (
        db.query(UsageLog.entity_id, func.max(UsageLog.logged_at).label("logged_at"))
        .filter(UsageLog.entity_id.in_(entity_ids))
        .group_by(UsageLog.entity_id)
        .subquery()
    )
    rows = (
        db.query(UsageLog)
        .join(
            latest,
            (UsageLog.entity_id == latest.c.entity_id)
            & (UsageLog.logged_at == latest.c.logged_at),
        )
        .order_by(UsageLog.id.asc())
        .all()
    )
    out: Dict[int, UsageLog] = {}
    for r in rows:
        out[r.entity_id] = r  # same timestamp: highest id wins
    return out


def usage_window_by_entity(
    db: Session,
    entity_ids: List[int],
    *,
    until: datetime,
    window_days: int,
) -> Dict[int, List[UsageLog]]:
    """Usage logs inside [until - window_days, until], oldest first, per entity."""
    if not entity_ids:
        return {}

    since = until - timedelta(days=window_days)
    rows = (
        db.query(UsageLog)
        .filter(
            UsageLog.entity_id.in_(entity_ids),
            UsageLog.logged_at >= since,
            UsageLog.logged_at <= until,
        )
        .order_by(UsageLog.entity_id.asc(), UsageLog.logged_at.asc())
        .all()
    )
    out: Dict[int, List[UsageLog]] = defaultdict(list)
    for r in rows:
        out[r.entity_id].append(r)
    return dict(out)
