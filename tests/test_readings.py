"""CRUD behaviour of the readings store."""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from glucotrack.crud.readings import (
    clamp_limit,
    create_reading,
    delete_reading,
    get_reading,
    list_readings,
)
from glucotrack.core.guayaquil import parse_instant
from glucotrack.db.session import Base

# Ensure models are registered so metadata tables are created
from glucotrack.models import reading as reading_model  # noqa: F401


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def test_create_reading_stores_utc_from_local_form_value(db_session):
    reading = create_reading(
        db_session,
        {"glucose_value": "112", "measured_at": "2024-03-04T08:30", "notes": "  en ayunas  "},
    )
    assert len(reading.id) == 32
    assert reading.glucose_value == 112
    assert reading.unit == "mg/dL"
    assert reading.measured_at == "2024-03-04T13:30:00.000Z"
    assert reading.notes == "en ayunas"
    assert reading.photo_url is None
    assert reading.created_at.endswith("Z")


def test_create_reading_accepts_iso_instants_and_datetimes(db_session):
    from_iso = create_reading(db_session, {"glucose_value": 90, "measured_at": "2024-03-04T13:30:00Z"})
    from_dt = create_reading(
        db_session,
        {"glucose_value": 95, "measured_at": datetime(2024, 3, 4, 13, 30, tzinfo=timezone.utc)},
    )
    assert from_iso.measured_at == from_dt.measured_at == "2024-03-04T13:30:00.000Z"


@pytest.mark.parametrize("measured_at", [None, "", "ayer", "2024-13-01T00:00"])
def test_unusable_measured_at_falls_back_to_now(db_session, measured_at):
    reading = create_reading(db_session, {"glucose_value": 100, "measured_at": measured_at})
    stored = parse_instant(reading.measured_at)
    assert abs(datetime.now(tz=timezone.utc) - stored) < timedelta(minutes=1)


@pytest.mark.parametrize("value", [0, -4, "0", "abc", "", None, True, 12.5, "12.5"])
def test_invalid_glucose_value_is_rejected(db_session, value):
    with pytest.raises(ValueError, match="Valor de glucosa invalido"):
        create_reading(db_session, {"glucose_value": value})
    assert list_readings(db_session) == []


def test_blank_notes_become_none(db_session):
    reading = create_reading(db_session, {"glucose_value": 100, "notes": "   "})
    assert reading.notes is None


def test_list_readings_newest_first_with_limit(db_session):
    for hour, value in [(8, 100), (12, 140), (20, 110)]:
        create_reading(db_session, {"glucose_value": value, "measured_at": f"2024-03-04T{hour:02d}:00"})
    create_reading(db_session, {"glucose_value": 95, "measured_at": "2024-03-03T23:00"})

    values = [r.glucose_value for r in list_readings(db_session)]
    assert values == [110, 140, 100, 95]
    assert [r.glucose_value for r in list_readings(db_session, 2)] == [110, 140]


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 50), ("", 50), ("abc", 50), ("0", 50), (-3, 50), (True, 50), ("10", 10), (10, 10), (" 25 ", 25), ("9999", 500), (500, 500)],
)
def test_clamp_limit(raw, expected):
    assert clamp_limit(raw) == expected


def test_delete_reading(db_session):
    reading = create_reading(db_session, {"glucose_value": 100})
    delete_reading(db_session, reading)
    assert get_reading(db_session, reading.id) is None
    assert get_reading(db_session, "missing") is None
