# app/models/entity.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import relationship

from app.db.base import Base


class EntityType(Base):
    __tablename__ = "entity_types"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Entity(Base):
    """
    A tracked object (machine, vehicle, person...) owned by an organization.
    Rows are maintained by the CRUD layer; this service only reads them.
    """

    __tablename__ = "entities"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, nullable=False, index=True)
    entity_type_id = Column(
        Integer, ForeignKey("entity_types.id", ondelete="SET NULL"), nullable=True, index=True
    )

    name = Column(String(255), nullable=False)
    tracks_usage = Column(Boolean, nullable=False, default=False)  # has usage logs

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    entity_type = relationship(EntityType, lazy="joined")
    deadlines = relationship(
        "Deadline",
        back_populates="entity",
        order_by="Deadline.created_at.desc()",
        passive_deletes=True,
    )


Index("ix_entities_org_created", Entity.organization_id, Entity.created_at)
