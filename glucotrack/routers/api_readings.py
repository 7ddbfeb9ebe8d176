from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..crud.readings import create_reading, delete_reading, get_reading, list_readings
from ..db.session import get_db
from ..deps.access import require_write_access
from ..schemas.reading import ReadingCreate, ReadingOut
from ..services.photos import PhotoStoreError, get_photo_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/readings", tags=["readings"])


@router.get("", response_model=list[ReadingOut])
def api_list_readings(limit: str | None = None, db: Session = Depends(get_db)):
    try:
        return list_readings(db, limit)
    except SQLAlchemyError as exc:
        logger.exception("could not list readings")
        raise HTTPException(status_code=500, detail="No se pudieron cargar las lecturas") from exc


@router.post("", response_model=ReadingOut, status_code=201, dependencies=[Depends(require_write_access)])
def api_create_reading(payload: ReadingCreate, db: Session = Depends(get_db)):
    try:
        return create_reading(db, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception("insert failed")
        raise HTTPException(status_code=500, detail="Error al guardar la lectura") from exc


@router.delete("/{reading_id}", dependencies=[Depends(require_write_access)])
def api_delete_reading(reading_id: str, db: Session = Depends(get_db), photo_store=Depends(get_photo_store)):
    reading = get_reading(db, reading_id)
    if not reading:
        raise HTTPException(404, "Not found")
    if reading.photo_url:
        try:
            photo_store.delete(reading.photo_url)
        except PhotoStoreError:
            logger.exception("photo delete failed")
    try:
        delete_reading(db, reading)
    except SQLAlchemyError as exc:
        logger.exception("delete failed")
        raise HTTPException(status_code=500, detail="Error al eliminar la lectura") from exc
    return {"status": "deleted"}
