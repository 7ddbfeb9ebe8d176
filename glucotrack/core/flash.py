"""One-shot UI messages stored in the signed session cookie."""

from __future__ import annotations

from fastapi import Request

FLASH_KEY = "_flashes"


def flash(request: Request, message: str, category: str = "info") -> None:
    messages = list(request.session.get(FLASH_KEY) or [])
    messages.append({"message": message, "category": category})
    request.session[FLASH_KEY] = messages


def pop_flashes(request: Request) -> list[dict[str, str]]:
    return list(request.session.pop(FLASH_KEY, None) or [])
