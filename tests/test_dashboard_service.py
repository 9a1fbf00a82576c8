from datetime import date, datetime
from types import SimpleNamespace

from app.services.dashboard import build_rows, count_tiers, filter_rows, sort_rows
from app.services.semaphore import ThresholdPolicy

POLICY = ThresholdPolicy(60, 30, 15)
TODAY = date(2024, 1, 1)

DATE_T = SimpleNamespace(id=1, name="Certificate", measure_by="date", requires_document=False, is_active=True)
USAGE_T = SimpleNamespace(id=2, name="Service", measure_by="usage", requires_document=False, is_active=True)


def deadline(id, dtype, **kw):
    fields = dict(
        id=id,
        entity_id=None,
        deadline_type_id=dtype.id,
        last_done_date=None,
        next_due_date=None,
        last_done_usage=None,
        frequency=None,
        frequency_unit=None,
        usage_daily_average_mode="manual",
        usage_daily_average=None,
        created_at=None,
        deadline_type=dtype,
    )
    fields.update(kw)
    return SimpleNamespace(**fields)


def entity(id, name, deadlines, type_name="Machines", tracks_usage=False, created=None):
    return SimpleNamespace(
        id=id,
        name=name,
        entity_type_id=10 if type_name == "Machines" else 20,
        entity_type=SimpleNamespace(name=type_name),
        tracks_usage=tracks_usage,
        created_at=created or datetime(2023, 1, id),
        deadlines=deadlines,
    )


def fleet():
    return [
        entity(1, "Boiler", [deadline(11, DATE_T, next_due_date=date(2024, 2, 20))]),
        entity(2, "Alarm", [deadline(21, DATE_T, next_due_date=date(2023, 12, 1))]),
        entity(
            3,
            "Truck",
            [
                deadline(
                    31,
                    USAGE_T,
                    last_done_usage=1000,
                    frequency=500,
                    usage_daily_average=10,
                )
            ],
            type_name="Vehicles",
            tracks_usage=True,
        ),
        entity(4, "Crane", []),
        entity(5, "Elevator", [deadline(51, DATE_T, next_due_date=date(2024, 1, 5))]),
    ]


LATEST = {3: SimpleNamespace(value=1300, logged_at=datetime(2023, 12, 30))}


def test_rows_use_nearest_deadline():
    rows = build_rows(fleet(), POLICY, as_of=TODAY, latest_usage=LATEST)
    by_name = {r.entity.name: r for r in rows}
    assert by_name["Boiler"].tier == "yellow"
    assert by_name["Alarm"].nearest.label == "Expired"
    assert by_name["Truck"].tier == "orange"
    assert by_name["Truck"].latest_usage == 1300
    assert by_name["Crane"].tier == "none"
    assert by_name["Elevator"].nearest.label == "Critical"


def test_usage_is_ignored_for_non_tracking_entities():
    ents = fleet()
    ents[2].tracks_usage = False
    rows = build_rows(ents, POLICY, as_of=TODAY, latest_usage=LATEST)
    truck = next(r for r in rows if r.entity.name == "Truck")
    assert truck.tier == "none"
    assert truck.nearest.label == "Incomplete"


def test_counts():
    counts = count_tiers(build_rows(fleet(), POLICY, as_of=TODAY, latest_usage=LATEST))
    assert counts.model_dump() == {
        "red": 2,
        "orange": 1,
        "yellow": 1,
        "green": 0,
        "none": 1,
        "total": 5,
    }


def test_critical_sort_is_tier_then_due():
    rows = sort_rows(build_rows(fleet(), POLICY, as_of=TODAY, latest_usage=LATEST), "critical")
    assert [r.entity.name for r in rows] == ["Alarm", "Elevator", "Truck", "Boiler", "Crane"]


def test_other_sort_modes():
    rows = build_rows(fleet(), POLICY, as_of=TODAY, latest_usage=LATEST)
    assert [r.entity.name for r in sort_rows(rows, "name")] == [
        "Alarm",
        "Boiler",
        "Crane",
        "Elevator",
        "Truck",
    ]
    assert sort_rows(rows, "type")[-1].entity.name == "Truck"
    assert [r.entity.id for r in sort_rows(rows, "created")] == [5, 4, 3, 2, 1]
    # unknown mode falls back to critical
    assert sort_rows(rows, "bogus")[0].entity.name == "Alarm"


def test_filters():
    rows = build_rows(fleet(), POLICY, as_of=TODAY, latest_usage=LATEST)
    assert {r.entity.name for r in filter_rows(rows, status="red")} == {"Alarm", "Elevator"}
    assert len(filter_rows(rows, status="all")) == 5
    assert [r.entity.name for r in filter_rows(rows, entity_type_id=20)] == ["Truck"]
    assert [r.entity.name for r in filter_rows(rows, q="  BOIL ")] == ["Boiler"]
    assert filter_rows(rows, status="green") == []
