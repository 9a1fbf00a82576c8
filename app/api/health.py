# app/api/health.py
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v1.deadlines import USAGE_WINDOW_DAYS
from app.db.session import get_db
from app.models.deadline import Deadline
from app.models.organization_settings import OrganizationSettings
from app.models.usage_log import UsageLog

router = APIRouter(tags=["health"])

# tables the dashboard cannot work without
READINESS_TABLES = (OrganizationSettings, Deadline, UsageLog)


@router.get("/healthz")
def healthz() -> dict:
    return {
        "ok": True,
        "service": "deadline_semaphore",
        "usage_window_days": USAGE_WINDOW_DAYS,
        "ts": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/readyz")
def readyz(db: Session = Depends(get_db)):
    """Ready when every table the semaphore reads answers a one-row query."""
    t0 = time.perf_counter()
    tables = {}
    for model in READINESS_TABLES:
        try:
            db.query(model).limit(1).all()
            tables[model.__tablename__] = "up"
        except SQLAlchemyError as e:
            db.rollback()
            tables[model.__tablename__] = f"down: {e.__class__.__name__}"

    ok = all(v == "up" for v in tables.values())
    return JSONResponse(
        status_code=200 if ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "ok": ok,
            "db": "up" if ok else "down",
            "tables": tables,
            "db_latency_ms": round((time.perf_counter() - t0) * 1000.0, 2),
        },
        headers={"Cache-Control": "no-store"},
    )
