# app/schemas/dashboard.py
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.deadline import DeadlineStatus
from app.schemas.semaphore import SemaphoreSettingsOut

SortMode = Literal["critical", "name", "type", "created"]


class TierCounts(BaseModel):
    red: int = 0
    orange: int = 0
    yellow: int = 0
    green: int = 0
    none: int = 0
    total: int = 0


class EntityMini(BaseModel):
    id: int
    name: str
    entity_type_id: Optional[int] = None
    entity_type_name: Optional[str] = None
    tracks_usage: bool = False
    created_at: Optional[datetime] = None


class EntityStatusRow(BaseModel):
    entity: EntityMini
    tier: str = Field(..., description="Tier of the nearest deadline ('none' if there is none).")
    nearest: DeadlineStatus
    latest_usage: Optional[float] = None
    latest_usage_at: Optional[datetime] = None


class DashboardMeta(BaseModel):
    organization_id: int
    as_of: date
    entity_count_in_org: int
    settings: SemaphoreSettingsOut


class DashboardOut(BaseModel):
    meta: DashboardMeta
    counts: TierCounts  # before filters
    rows: List[EntityStatusRow]


class EntityDeadlinesOut(BaseModel):
    entity: EntityMini
    as_of: date
    latest_usage: Optional[float] = None
    latest_usage_at: Optional[datetime] = None
    statuses: List[DeadlineStatus]
    nearest: DeadlineStatus
