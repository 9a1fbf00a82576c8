# app/models/organization_settings.py
from sqlalchemy import Column, DateTime, Integer

from app.db.base import Base


class OrganizationSettings(Base):
    """Per-organization semaphore thresholds (days)."""

    __tablename__ = "organization_settings"

    organization_id = Column(Integer, primary_key=True)

    yellow_days = Column(Integer, nullable=False, default=60)
    orange_days = Column(Integer, nullable=False, default=30)
    red_days = Column(Integer, nullable=False, default=15)

    updated_at = Column(DateTime(timezone=True), nullable=True)
