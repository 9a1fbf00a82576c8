"""
Pytest fixtures: in-memory SQLite shared across threads, get_db overridden.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["ENABLE_CREATE_ALL"] = "0"

from datetime import date, datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base  # noqa: E402
from app.models.deadline import Deadline, DeadlineType  # noqa: E402
from app.models.entity import Entity, EntityType  # noqa: E402
from app.models.usage_log import UsageLog  # noqa: E402

ORG_ID = 1


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    def _override():
        yield db_session

    app.dependency_overrides[get_db] = _override
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def seeded(db_session):
    """
    Org 1 with:
      - "Boiler" (date deadlines: due 2024-01-10 and 2024-02-10)
      - "Truck"  (usage deadline, manual 10/day, last service at 1000, freq 500)
      - "Forklift" (no deadlines)
    Org 2 with one entity, to check scoping.
    """
    machines = EntityType(organization_id=ORG_ID, name="Machines")
    vehicles = EntityType(organization_id=ORG_ID, name="Vehicles")
    db_session.add_all([machines, vehicles])
    db_session.flush()

    gas = DeadlineType(organization_id=ORG_ID, name="Gas certificate", measure_by="date")
    insp = DeadlineType(organization_id=ORG_ID, name="Inspection", measure_by="date")
    service = DeadlineType(organization_id=ORG_ID, name="Service", measure_by="usage")
    db_session.add_all([gas, insp, service])
    db_session.flush()

    boiler = Entity(
        organization_id=ORG_ID,
        entity_type_id=machines.id,
        name="Boiler",
        created_at=datetime(2023, 1, 1),
    )
    truck = Entity(
        organization_id=ORG_ID,
        entity_type_id=vehicles.id,
        name="Truck",
        tracks_usage=True,
        created_at=datetime(2023, 2, 1),
    )
    forklift = Entity(
        organization_id=ORG_ID,
        entity_type_id=machines.id,
        name="Forklift",
        created_at=datetime(2023, 3, 1),
    )
    other = Entity(organization_id=2, name="Other org entity", created_at=datetime(2023, 1, 1))
    db_session.add_all([boiler, truck, forklift, other])
    db_session.flush()

    db_session.add_all(
        [
            Deadline(
                organization_id=ORG_ID,
                entity_id=boiler.id,
                deadline_type_id=gas.id,
                next_due_date=date(2024, 1, 10),
            ),
            Deadline(
                organization_id=ORG_ID,
                entity_id=boiler.id,
                deadline_type_id=insp.id,
                next_due_date=date(2024, 2, 10),
            ),
            Deadline(
                organization_id=ORG_ID,
                entity_id=truck.id,
                deadline_type_id=service.id,
                last_done_usage=1000,
                frequency=500,
                frequency_unit="km",
                usage_daily_average_mode="manual",
                usage_daily_average=10,
            ),
            UsageLog(
                organization_id=ORG_ID,
                entity_id=truck.id,
                value=1200,
                logged_at=datetime(2023, 12, 20, 8, 0),
            ),
            UsageLog(
                organization_id=ORG_ID,
                entity_id=truck.id,
                value=1300,
                logged_at=datetime(2023, 12, 30, 8, 0),
            ),
        ]
    )
    db_session.commit()
    return {"boiler": boiler, "truck": truck, "forklift": forklift, "other": other}
