from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..core.access import AccessVerifier
from ..core.config import get_settings
from ..core.jinja import get_templates
from ..deps.access import can_edit, get_access_verifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/access", tags=["access"])
templates = get_templates()


def sanitize_next_path(raw_next: str | None) -> str:
    """Only same-site paths are allowed, and never back to the access page."""

    value = raw_next or "/"
    if not value.startswith("/") or value.startswith("//") or value.startswith("/access"):
        return "/"
    return value


@router.get("", response_class=HTMLResponse)
def access_page(
    request: Request,
    next: str = "/",
    error: str = "",
    verifier: AccessVerifier = Depends(get_access_verifier),
):
    if can_edit(request, verifier):
        return RedirectResponse(url="/", status_code=303)
    context = {
        "request": request,
        "next": sanitize_next_path(next),
        "has_error": error == "1",
        "has_code": verifier.has_secret_configured(),
    }
    return templates.TemplateResponse(request, "access.html", context)


@router.post("")
def access_submit(
    access_code: str = Form(""),
    next: str = Form("/"),
    verifier: AccessVerifier = Depends(get_access_verifier),
):
    next_path = sanitize_next_path(next)
    if not verifier.is_code_valid(access_code):
        logger.warning("access.denied")
        return RedirectResponse(url=f"/access?error=1&next={quote(next_path, safe='')}", status_code=303)

    config = get_settings()
    response = RedirectResponse(url=next_path, status_code=303)
    response.set_cookie(
        config.ACCESS_COOKIE_NAME,
        verifier.expected_token() or "",
        max_age=config.ACCESS_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=config.is_production,
        samesite="lax",
    )
    logger.info("access.granted")
    return response


@router.post("/logout")
def access_logout():
    response = RedirectResponse(url="/", status_code=303)
    response.delete_cookie(get_settings().ACCESS_COOKIE_NAME, path="/")
    return response
