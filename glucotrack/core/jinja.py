"""Jinja2 environment with the Guayaquil time helpers registered as filters."""

from __future__ import annotations

from fastapi.templating import Jinja2Templates

from ..services.reporting import glucose_status, status_label
from . import guayaquil
from .config import settings

_templates: Jinja2Templates | None = None


def get_templates() -> Jinja2Templates:
    """Return the shared ``Jinja2Templates`` with our filters registered."""

    global _templates
    if _templates is not None:
        return _templates
    templates = Jinja2Templates(directory=str(settings.TEMPLATES_DIR))
    env = templates.env
    # Usable in templates as ``{{ reading.measured_at|time_label }}``.
    env.filters["time_label"] = guayaquil.time_label
    env.filters["day_label"] = guayaquil.day_label
    env.filters["month_label"] = guayaquil.month_label
    env.filters["chart_label"] = guayaquil.chart_label
    env.filters["full_label"] = guayaquil.full_label
    env.filters["local_input"] = guayaquil.to_local_input
    env.filters["glucose_status"] = glucose_status
    env.filters["status_label"] = status_label
    _templates = templates
    return templates
