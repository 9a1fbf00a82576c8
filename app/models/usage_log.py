# app/models/usage_log.py
from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, func

from app.db.base import Base


class UsageLog(Base):
    """Append-only meter reading (odometer, hour-meter...) of an entity."""

    __tablename__ = "usage_logs"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, nullable=False, index=True)
    entity_id = Column(
        Integer, ForeignKey("entities.id", ondelete="CASCADE"), nullable=False, index=True
    )

    value = Column(Float, nullable=False)
    logged_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


Index("ix_usage_logs_entity_logged", UsageLog.entity_id, UsageLog.logged_at)
