"""Application wiring for GlucoTrack.

Configuration, logging, the readings table, templates, middleware, routers
and error handlers all come together here. ``uvicorn glucotrack.main:app``
serves the result.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .core.config import settings
from .core.errors import http_exception_handler, validation_exception_handler
from .core.logging import configure_logging
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# Registers the table with the metadata before ``create_all``.
from .models import reading as _reading  # noqa: F401
from .routers import access_ui, api_readings, ui

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title=settings.APP_NAME)

app.mount("/static", StaticFiles(directory=str(settings.STATIC_DIR)), name="static")
if not settings.S3_BUCKET:
    settings.photos_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/photos", StaticFiles(directory=str(settings.photos_dir)), name="photos")

Base.metadata.create_all(bind=engine)

# Only carries flash messages; write access lives in its own cookie.
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.APP_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    same_site="lax",
    https_only=settings.is_production,
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIdMiddleware)

app.include_router(access_ui.router)
app.include_router(ui.router)
app.include_router(api_readings.router)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


Instrumentator().instrument(app).expose(app, include_in_schema=False)


__all__ = ["app"]
