# app/api/v1/semaphore.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.crud.semaphore_settings import get_settings, upsert_settings
from app.db.session import get_db
from app.schemas.semaphore import SemaphoreSettingsIn, SemaphoreSettingsResponse

router = APIRouter()


@router.get("/orgs/{org_id}/settings/semaphore", response_model=SemaphoreSettingsResponse)
def read_semaphore_settings(org_id: int, db: Session = Depends(get_db)):
    # defaults (60/30/15, updated_at=None) until something is saved
    return {"organization_id": org_id, "settings": get_settings(db, org_id)}


@router.put("/orgs/{org_id}/settings/semaphore", response_model=SemaphoreSettingsResponse)
def update_semaphore_settings(
    org_id: int,
    payload: SemaphoreSettingsIn,
    db: Session = Depends(get_db),
):
    """
    Rules: whole days, 0..3650, yellow >= orange >= red.
    Rejections come back as 400 via the SemaphoreSettingsError handler.
    """
    settings = upsert_settings(
        db,
        org_id,
        yellow=payload.yellow_days,
        orange=payload.orange_days,
        red=payload.red_days,
    )
    return {"organization_id": org_id, "settings": settings}
