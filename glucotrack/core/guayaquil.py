"""Display helpers for America/Guayaquil civil time.

Readings are stored as UTC instants. Everything the user sees (history
headings, list times, chart ticks and the datetime input) is rendered in
Guayaquil local time, which is a fixed ``UTC-05:00`` with no daylight saving.
The offset is a constant rather than a zoneinfo lookup so results never depend
on the host's tz database or locale.

Every formatter accepts a ``datetime`` or an ISO-8601 string and returns ``""``
for anything it cannot parse. Naive datetimes are taken to be UTC.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any

GUAYAQUIL_TIME_ZONE = "America/Guayaquil"
GUAYAQUIL_UTC_OFFSET = timedelta(hours=-5)
GUAYAQUIL = timezone(GUAYAQUIL_UTC_OFFSET, "ECT")

MONTH_NAMES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)
MONTH_ABBREVIATIONS = (
    "ene", "feb", "mar", "abr", "may", "jun",
    "jul", "ago", "sept", "oct", "nov", "dic",
)
# Indexed by ``datetime.weekday()`` (Monday == 0).
WEEKDAY_NAMES = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")

_LOCAL_INPUT_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})(?::(\d{2}))?$", re.ASCII)
_UTC_SUFFIX_RE = re.compile(r"[zZ]$")


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def parse_instant(value: Any) -> datetime | None:
    """Coerce a datetime or ISO string into an aware UTC datetime."""

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(_UTC_SUFFIX_RE.sub("+00:00", value.strip()))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError:
        return None


def to_guayaquil(value: Any) -> datetime | None:
    instant = parse_instant(value)
    if instant is None:
        return None
    try:
        return instant.astimezone(GUAYAQUIL)
    except OverflowError:
        return None


def to_utc_iso(value: Any) -> str:
    """Canonical storage form, e.g. ``2024-03-04T13:30:00.000Z``."""

    instant = parse_instant(value)
    if instant is None:
        return ""
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:] if value else value


def _date_key(local: datetime) -> str:
    return f"{local.year:04d}-{local.month:02d}-{local.day:02d}"


def _clock(local: datetime) -> str:
    return f"{local.hour:02d}:{local.minute:02d}"


def to_local_input(value: Any) -> str:
    """Render ``YYYY-MM-DDTHH:mm`` for a ``datetime-local`` form field."""

    local = to_guayaquil(value)
    if local is None:
        return ""
    return f"{_date_key(local)}T{_clock(local)}"


def now_local_input() -> str:
    return to_local_input(utcnow())


def parse_local_input_to_instant(text: str | None) -> datetime | None:
    """Read ``YYYY-MM-DDTHH:mm[:ss]`` as Guayaquil time and return the UTC instant."""

    if not isinstance(text, str):
        return None
    match = _LOCAL_INPUT_RE.match(text.strip())
    if not match:
        return None
    year, month, day, hour, minute = (int(group) for group in match.groups()[:5])
    second = int(match.group(6) or 0)
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59 and 0 <= second <= 59):
        return None
    try:
        local = datetime(year, month, day, hour, minute, second, tzinfo=GUAYAQUIL)
        return local.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        # Year 0, days past the end of the month, or instants beyond datetime.max.
        return None


def month_label(value: Any) -> str:
    local = to_guayaquil(value)
    if local is None:
        return ""
    return _capitalize(f"{MONTH_NAMES[local.month - 1]} de {local.year}")


def day_label(value: Any) -> str:
    local = to_guayaquil(value)
    if local is None:
        return ""
    return _capitalize(f"{WEEKDAY_NAMES[local.weekday()]} {local.day}")


def month_key(value: Any) -> str:
    local = to_guayaquil(value)
    if local is None:
        return ""
    return f"{local.year:04d}-{local.month:02d}"


def day_key(value: Any) -> str:
    local = to_guayaquil(value)
    return _date_key(local) if local else ""


def time_label(value: Any) -> str:
    local = to_guayaquil(value)
    return _clock(local) if local else ""


def chart_label(value: Any) -> str:
    """Compact axis tick: ``04 mar 08:30``."""

    local = to_guayaquil(value)
    if local is None:
        return ""
    return f"{local.day:02d} {MONTH_ABBREVIATIONS[local.month - 1]} {_clock(local)}"


def full_label(value: Any) -> str:
    """Tooltip text: ``04 de marzo, 08:30``."""

    local = to_guayaquil(value)
    if local is None:
        return ""
    return f"{local.day:02d} de {MONTH_NAMES[local.month - 1]}, {_clock(local)}"


__all__ = [
    "GUAYAQUIL",
    "GUAYAQUIL_TIME_ZONE",
    "chart_label",
    "day_key",
    "day_label",
    "full_label",
    "month_key",
    "month_label",
    "now_local_input",
    "parse_instant",
    "parse_local_input_to_instant",
    "time_label",
    "to_guayaquil",
    "to_local_input",
    "to_utc_iso",
    "utcnow",
]
