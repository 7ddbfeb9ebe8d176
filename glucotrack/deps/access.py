from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from ..core.access import AccessVerifier
from ..core.config import get_settings
from ..middlewares import principal_ctx_var


def get_access_verifier() -> AccessVerifier:
    """Verifier bound to the live settings; overridden in tests."""

    return AccessVerifier(lambda: get_settings().APP_ACCESS_CODE)


def access_token_from(request: Request) -> str | None:
    return request.cookies.get(get_settings().ACCESS_COOKIE_NAME)


def can_edit(request: Request, verifier: AccessVerifier) -> bool:
    return verifier.has_valid_token(access_token_from(request))


async def require_write_access(
    request: Request,
    verifier: AccessVerifier = Depends(get_access_verifier),
) -> bool:
    if not can_edit(request, verifier):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access code required")
    principal_ctx_var.set("access-code")
    request.state.principal = "access-code"
    return True
