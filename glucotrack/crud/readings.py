"""CRUD helpers for glucose readings."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.guayaquil import parse_instant, parse_local_input_to_instant, to_utc_iso, utcnow
from ..models.reading import DEFAULT_UNIT, Reading

INVALID_VALUE_MESSAGE = "Valor de glucosa invalido"


def clamp_limit(raw: object, *, default: int | None = None, maximum: int | None = None) -> int:
    """Parse a caller-supplied limit, falling back to the default when unusable."""

    default = default or settings.READINGS_DEFAULT_LIMIT
    maximum = maximum or settings.READINGS_MAX_LIMIT
    if isinstance(raw, bool):
        return default
    try:
        value = int(str(raw).strip()) if raw is not None else 0
    except (TypeError, ValueError):
        return default
    if value <= 0:
        return default
    return min(value, maximum)


def coerce_glucose_value(raw: object) -> int:
    if isinstance(raw, bool):
        raise ValueError(INVALID_VALUE_MESSAGE)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float) and raw.is_integer():
        value = int(raw)
    elif isinstance(raw, str):
        try:
            value = int(raw.strip())
        except ValueError as exc:
            raise ValueError(INVALID_VALUE_MESSAGE) from exc
    else:
        raise ValueError(INVALID_VALUE_MESSAGE)
    if value <= 0:
        raise ValueError(INVALID_VALUE_MESSAGE)
    return value


def resolve_measured_at(raw: object) -> datetime:
    """Accept a datetime, a Guayaquil form value or an ISO instant; default to now."""

    if isinstance(raw, str):
        instant = parse_local_input_to_instant(raw) or parse_instant(raw)
    else:
        instant = parse_instant(raw)
    return instant or utcnow()


def _clean_notes(raw: object) -> str | None:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def list_readings(db: Session, limit: int | None = None) -> list[Reading]:
    stmt = select(Reading).order_by(desc(Reading.measured_at)).limit(clamp_limit(limit))
    return list(db.execute(stmt).scalars().all())


def get_reading(db: Session, reading_id: str) -> Reading | None:
    return db.get(Reading, reading_id)


def create_reading(db: Session, payload: dict) -> Reading:
    glucose_value = coerce_glucose_value(payload.get("glucose_value"))
    reading = Reading(
        id=uuid4().hex,
        glucose_value=glucose_value,
        unit=DEFAULT_UNIT,
        measured_at=to_utc_iso(resolve_measured_at(payload.get("measured_at"))),
        photo_url=(payload.get("photo_url") or None),
        notes=_clean_notes(payload.get("notes")),
        created_at=to_utc_iso(utcnow()),
    )
    db.add(reading)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(reading)
    return reading


def delete_reading(db: Session, reading: Reading) -> None:
    db.delete(reading)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
