# app/models/deadline.py
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import relationship

from app.db.base import Base


class DeadlineType(Base):
    """Reusable kind of recurring requirement (e.g. 'gas certificate')."""

    __tablename__ = "deadline_types"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, nullable=False, index=True)

    name = Column(String(255), nullable=False)
    measure_by = Column(String(10), nullable=False, default="date")  # date|usage
    requires_document = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Deadline(Base):
    """One deadline type bound to one entity."""

    __tablename__ = "deadlines"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, nullable=False, index=True)
    entity_id = Column(
        Integer, ForeignKey("entities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    deadline_type_id = Column(
        Integer, ForeignKey("deadline_types.id", ondelete="RESTRICT"), nullable=False
    )

    last_done_date = Column(Date, nullable=True)

    # measure_by = date
    next_due_date = Column(Date, nullable=True)

    # measure_by = usage
    last_done_usage = Column(Float, nullable=True)
    frequency = Column(Float, nullable=True)
    frequency_unit = Column(String(30), nullable=True)  # km, hours, cycles...
    usage_daily_average_mode = Column(String(10), nullable=False, default="manual")  # manual|auto
    usage_daily_average = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    entity = relationship("Entity", back_populates="deadlines")
    deadline_type = relationship(DeadlineType, lazy="joined")


Index("ix_deadlines_org_entity", Deadline.organization_id, Deadline.entity_id)
