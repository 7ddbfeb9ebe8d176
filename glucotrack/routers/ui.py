"""Dashboard page and the form actions behind it.

Reading the history needs no access; every action that changes data goes
through ``require_write_access``. Failures are reported to the user as flashed
Spanish messages and the browser is sent back to the dashboard, so repeating
the action is always safe.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.access import AccessVerifier
from ..core.flash import flash, pop_flashes
from ..core.guayaquil import now_local_input
from ..core.jinja import get_templates
from ..crud.readings import clamp_limit, coerce_glucose_value, create_reading, delete_reading, get_reading, list_readings
from ..db.session import get_db
from ..deps.access import can_edit, get_access_verifier, require_write_access
from ..schemas.reading import ReadingSuggestion
from ..services.images import downscale_for_vision, photo_taken_at
from ..services.photos import PhotoStoreError, get_photo_store
from ..services.reporting import chart_series, group_by_month_and_day, summarize
from ..services.vision import get_glucose_detector

logger = logging.getLogger(__name__)

router = APIRouter()
templates = get_templates()


SAVE_FAILED_MESSAGE = "No se pudo guardar la lectura. Revisa la configuracion del servidor."
DELETE_FAILED_MESSAGE = "No se pudo eliminar la lectura. Revisa la configuracion del servidor."


def _home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


def _discard_photo(photo_store, photo_url: str | None) -> None:
    if not photo_url:
        return
    try:
        photo_store.delete(photo_url)
    except PhotoStoreError:
        logger.exception("orphaned photo %s", photo_url)


@router.get("/", response_class=HTMLResponse)
def index_page(
    request: Request,
    limit: str | None = None,
    db: Session = Depends(get_db),
    verifier: AccessVerifier = Depends(get_access_verifier),
):
    load_error = False
    try:
        readings = list_readings(db, clamp_limit(limit))
    except SQLAlchemyError:
        logger.exception("could not load readings")
        readings = []
        load_error = True

    context = {
        "request": request,
        "can_edit": can_edit(request, verifier),
        "has_code": verifier.has_secret_configured(),
        "flashes": pop_flashes(request),
        "readings": readings,
        "load_error": load_error,
        "stats": summarize(readings),
        "chart": chart_series(readings),
        "groups": group_by_month_and_day(readings),
        "now_input": now_local_input(),
    }
    return templates.TemplateResponse(request, "index.html", context)


@router.post("/readings", dependencies=[Depends(require_write_access)])
def ui_add_reading(
    request: Request,
    glucose_value: str = Form(""),
    measured_at: str = Form(""),
    notes: str = Form(""),
    photo: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    photo_store=Depends(get_photo_store),
):
    try:
        value = coerce_glucose_value(glucose_value)
    except ValueError as exc:
        flash(request, str(exc), "error")
        return _home()

    photo_url = None
    if photo is not None and photo.filename:
        try:
            data = photo.file.read()
            if data:
                photo_url = photo_store.save(data, photo.filename, photo.content_type)
        except (PhotoStoreError, OSError):
            logger.exception("photo upload failed")
            flash(request, "Error al subir la foto", "error")
            return _home()

    try:
        create_reading(
            db,
            {"glucose_value": value, "measured_at": measured_at, "notes": notes, "photo_url": photo_url},
        )
    except SQLAlchemyError:
        logger.exception("insert failed")
        _discard_photo(photo_store, photo_url)
        flash(request, "Error al guardar la lectura", "error")
        return _home()
    except Exception:
        logger.exception("unexpected error saving reading")
        _discard_photo(photo_store, photo_url)
        flash(request, SAVE_FAILED_MESSAGE, "error")
        return _home()

    flash(request, "Lectura guardada correctamente", "success")
    return _home()


@router.post("/readings/{reading_id}/delete", dependencies=[Depends(require_write_access)])
def ui_delete_reading(
    request: Request,
    reading_id: str,
    db: Session = Depends(get_db),
    photo_store=Depends(get_photo_store),
):
    try:
        reading = get_reading(db, reading_id)
    except SQLAlchemyError:
        logger.exception("lookup failed")
        reading = None
    if reading is None:
        flash(request, "Error al eliminar la lectura", "error")
        return _home()

    if reading.photo_url:
        try:
            photo_store.delete(reading.photo_url)
        except PhotoStoreError:
            # The record still goes; a stray blob is harmless.
            logger.exception("photo delete failed")

    try:
        delete_reading(db, reading)
    except SQLAlchemyError:
        logger.exception("delete failed")
        flash(request, "Error al eliminar la lectura", "error")
        return _home()
    except Exception:
        logger.exception("unexpected error deleting reading")
        flash(request, DELETE_FAILED_MESSAGE, "error")
        return _home()

    flash(request, "Lectura eliminada", "success")
    return _home()


@router.post("/readings/detect", response_model=ReadingSuggestion, dependencies=[Depends(require_write_access)])
def ui_detect_reading(
    photo: UploadFile = File(...),
    detector=Depends(get_glucose_detector),
):
    data = photo.file.read()
    if not data:
        raise HTTPException(status_code=422, detail="Empty image")
    image, mime_type = downscale_for_vision(data)
    return ReadingSuggestion(value=detector(image, mime_type), measured_at=photo_taken_at(data))
