# app/crud/semaphore_settings.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from app.models.organization_settings import OrganizationSettings
from app.schemas.semaphore import SemaphoreSettingsOut, validate_thresholds
from app.services.semaphore import DEFAULT_POLICY, ThresholdPolicy

log = logging.getLogger("app.semaphore")


def get_settings(db: Session, organization_id: int) -> SemaphoreSettingsOut:
    """Persisted thresholds, or the defaults (60/30/15) if none were saved yet."""
    row = db.get(OrganizationSettings, organization_id)
    if row is None:
        return SemaphoreSettingsOut(
            organization_id=organization_id,
            yellow_days=DEFAULT_POLICY.yellow_days,
            orange_days=DEFAULT_POLICY.orange_days,
            red_days=DEFAULT_POLICY.red_days,
            updated_at=None,
        )
    return SemaphoreSettingsOut.model_validate(row)


def get_policy(db: Session, organization_id: int) -> ThresholdPolicy:
    return ThresholdPolicy.from_obj(get_settings(db, organization_id))


def upsert_settings(
    db: Session, organization_id: int, *, yellow: Any, orange: Any, red: Any
) -> SemaphoreSettingsOut:
    """Validate and store thresholds; raises SemaphoreSettingsError on bad input."""
    y, o, r = validate_thresholds(yellow, orange, red)

    row = db.get(OrganizationSettings, organization_id)
    if row is None:
        row = OrganizationSettings(organization_id=organization_id)
        db.add(row)
    row.yellow_days = y
    row.orange_days = o
    row.red_days = r
    row.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(row)
    log.info(
        "semaphore thresholds updated org=%s yellow=%s orange=%s red=%s",
        organization_id,
        y,
        o,
        r,
    )
    return SemaphoreSettingsOut.model_validate(row)
