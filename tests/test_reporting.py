"""Status bands, summary numbers, history grouping and chart points."""

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

import pytest

from glucotrack.models.reading import Reading
from glucotrack.services.reporting import (
    chart_series,
    glucose_status,
    group_by_month_and_day,
    status_label,
    summarize,
)


def make_reading(rid, value, measured_at):
    return Reading(id=rid, glucose_value=value, unit="mg/dL", measured_at=measured_at, created_at=measured_at)


@pytest.mark.parametrize(
    "value, status, label",
    [
        (55, "low", "Bajo"),
        (69, "low", "Bajo"),
        (70, "normal", "Normal"),
        (100, "normal", "Normal"),
        (101, "prediabetic", "Pre-diabetes"),
        (125, "prediabetic", "Pre-diabetes"),
        (126, "high", "Alto"),
    ],
)
def test_glucose_status_bands(value, status, label):
    assert glucose_status(value) == status
    assert status_label(status) == label


def test_summarize():
    readings = [
        make_reading("a", 100, "2024-03-04T13:00:00.000Z"),
        make_reading("b", 101, "2024-03-04T14:00:00.000Z"),
        make_reading("c", 80, "2024-03-04T15:00:00.000Z"),
        make_reading("d", 141, "2024-03-04T16:00:00.000Z"),
    ]
    # 422 / 4 = 105.5 rounds half up
    assert summarize(readings) == {"average": 106, "minimum": 80, "maximum": 141, "count": 4}
    assert summarize([]) is None


def test_readings_group_by_local_day_across_utc_midnight():
    late_evening = make_reading("late", 120, "2024-03-04T04:00:00.000Z")  # 03-03 23:00 local
    past_midnight = make_reading("midnight", 110, "2024-03-04T05:30:00.000Z")  # 03-04 00:30 local
    morning = make_reading("morning", 95, "2024-03-04T14:00:00.000Z")  # 03-04 09:00 local

    groups = group_by_month_and_day([past_midnight, late_evening, morning])

    assert len(groups) == 1
    month = groups[0]
    assert month["month_key"] == "2024-03"
    assert month["month_label"] == "Marzo de 2024"
    assert month["total_readings"] == 3
    assert [d["day_key"] for d in month["days"]] == ["2024-03-04", "2024-03-03"]
    assert [d["day_label"] for d in month["days"]] == ["Lunes 4", "Domingo 3"]
    assert [r.id for r in month["days"][0]["readings"]] == ["morning", "midnight"]
    assert [r.id for r in month["days"][1]["readings"]] == ["late"]


def test_months_are_ordered_newest_first():
    groups = group_by_month_and_day(
        [
            make_reading("feb", 100, "2024-02-10T12:00:00.000Z"),
            make_reading("apr-local-mar", 100, "2024-04-01T02:00:00.000Z"),
            make_reading("apr", 100, "2024-04-02T12:00:00.000Z"),
        ]
    )
    assert [g["month_key"] for g in groups] == ["2024-04", "2024-03", "2024-02"]
    assert [g["total_readings"] for g in groups] == [1, 1, 1]


def test_chart_needs_two_readings():
    assert chart_series([]) is None
    assert chart_series([make_reading("a", 100, "2024-03-04T13:00:00.000Z")]) is None


def test_chart_points_are_chronological():
    readings = [
        make_reading("c", 150, "2024-03-05T13:00:00.000Z"),
        make_reading("a", 90, "2024-03-04T13:00:00.000Z"),
        make_reading("b", 110, "2024-03-04T20:00:00.000Z"),
    ]
    chart = chart_series(readings)

    assert [p["value"] for p in chart["points"]] == [90, 110, 150]
    assert chart["points"][0]["label"] == "04 mar 08:00"
    assert chart["points"][0]["full_label"] == "04 de marzo, 08:00"
    assert chart["y_min"] == 80 and chart["y_max"] == 160
    xs = [p["x"] for p in chart["points"]]
    assert xs == sorted(xs)
    # Higher values sit higher on the SVG (smaller y).
    assert chart["points"][2]["y"] < chart["points"][0]["y"]
    assert [r["value"] for r in chart["references"]] == [100, 126]
    assert len(chart["polyline"].split()) == 3
