from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

from ..core.guayaquil import (
    chart_label,
    day_key,
    day_label,
    full_label,
    month_key,
    month_label,
    parse_instant,
)
from ..models.reading import Reading

LOW_THRESHOLD = 70
NORMAL_CEILING = 100
PREDIABETIC_CEILING = 125

STATUS_LABELS = {
    "low": "Bajo",
    "normal": "Normal",
    "prediabetic": "Pre-diabetes",
    "high": "Alto",
}

# (value, css modifier) drawn as dashed guides on the trend chart.
REFERENCE_LINES = ((70, "low"), (100, "normal"), (126, "high"))

CHART_WIDTH = 320
CHART_HEIGHT = 180
CHART_PADDING = 16


def glucose_status(value: int) -> str:
    if value < LOW_THRESHOLD:
        return "low"
    if value <= NORMAL_CEILING:
        return "normal"
    if value <= PREDIABETIC_CEILING:
        return "prediabetic"
    return "high"


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, "")


def _sort_key(reading: Reading) -> float:
    instant = parse_instant(reading.measured_at)
    return instant.timestamp() if instant else float("-inf")


def sort_newest_first(readings: Iterable[Reading]) -> List[Reading]:
    return sorted(readings, key=_sort_key, reverse=True)


def summarize(readings: Sequence[Reading]) -> Dict[str, int] | None:
    """Average, minimum, maximum and count of the given readings."""

    values = [r.glucose_value for r in readings]
    if not values:
        return None
    return {
        "average": int(sum(values) / len(values) + 0.5),
        "minimum": min(values),
        "maximum": max(values),
        "count": len(values),
    }


def group_by_month_and_day(readings: Iterable[Reading]) -> List[Dict[str, Any]]:
    """Bucket readings newest-first into Guayaquil months, then days.

    Keys and labels for a reading are derived from the same instant, so a
    reading is always listed under the day its rendered time belongs to.
    """

    months: Dict[str, Dict[str, Any]] = {}
    for reading in sort_newest_first(readings):
        m_key = month_key(reading.measured_at)
        d_key = day_key(reading.measured_at)
        month = months.get(m_key)
        if month is None:
            month = months[m_key] = {
                "month_key": m_key,
                "month_label": month_label(reading.measured_at),
                "days": {},
                "total_readings": 0,
            }
        day = month["days"].get(d_key)
        if day is None:
            day = month["days"][d_key] = {
                "day_key": d_key,
                "day_label": day_label(reading.measured_at),
                "readings": [],
            }
        day["readings"].append(reading)
        month["total_readings"] += 1

    grouped = []
    for month in months.values():
        grouped.append({**month, "days": list(month["days"].values())})
    return grouped


def chart_series(readings: Sequence[Reading]) -> Dict[str, Any] | None:
    """Chronological chart points scaled into an SVG viewbox."""

    if len(readings) < 2:
        return None
    ordered = list(reversed(sort_newest_first(readings)))
    values = [r.glucose_value for r in ordered]
    y_min = min(values) - 10
    y_max = max(values) + 10
    span = max(y_max - y_min, 1)
    inner_w = CHART_WIDTH - 2 * CHART_PADDING
    inner_h = CHART_HEIGHT - 2 * CHART_PADDING
    step = inner_w / (len(ordered) - 1)

    def y_for(value: float) -> float:
        return round(CHART_PADDING + inner_h * (y_max - value) / span, 2)

    points = []
    for index, reading in enumerate(ordered):
        points.append(
            {
                "x": round(CHART_PADDING + step * index, 2),
                "y": y_for(reading.glucose_value),
                "value": reading.glucose_value,
                "label": chart_label(reading.measured_at),
                "full_label": full_label(reading.measured_at),
                "status": glucose_status(reading.glucose_value),
            }
        )
    references = [
        {"value": value, "y": y_for(value), "kind": kind}
        for value, kind in REFERENCE_LINES
        if y_min <= value <= y_max
    ]
    return {
        "width": CHART_WIDTH,
        "height": CHART_HEIGHT,
        "points": points,
        "polyline": " ".join(f"{p['x']},{p['y']}" for p in points),
        "references": references,
        "y_min": y_min,
        "y_max": y_max,
    }
