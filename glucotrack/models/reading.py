"""SQLAlchemy model for a single glucose-meter reading."""

from __future__ import annotations

from sqlalchemy import Column, Integer, Text

from ..db.session import Base

DEFAULT_UNIT = "mg/dL"


class Reading(Base):
    """One logged meter value. Timestamps are UTC ISO-8601 strings."""

    __tablename__ = "glucose_readings"

    id = Column(Text, primary_key=True)
    glucose_value = Column(Integer, nullable=False)
    unit = Column(Text, nullable=False, default=DEFAULT_UNIT)
    measured_at = Column(Text, nullable=False, index=True)
    photo_url = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)


__all__ = ["DEFAULT_UNIT", "Reading"]
