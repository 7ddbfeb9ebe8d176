"""Read the number shown on a glucose meter photo with Gemini.

A failed or doubtful read is never an error for the caller: it simply means
there is no suggestion and the value has to be typed by hand.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import google.generativeai as genai

from ..core.config import settings

logger = logging.getLogger(__name__)

MIN_PLAUSIBLE_VALUE = 20
MAX_PLAUSIBLE_VALUE = 600

PROMPT = (
    "This is a photo of a glucose meter display. Read the main glucose value shown on "
    'the LCD screen. Reply with ONLY the number (e.g. "298"). If you cannot read it, reply "null".'
)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_model_reply(text: str | None) -> int | None:
    """Take the leading integer of the reply if it is a plausible reading."""

    match = _LEADING_INT_RE.match(text or "")
    if not match:
        return None
    value = int(match.group(1))
    if MIN_PLAUSIBLE_VALUE <= value <= MAX_PLAUSIBLE_VALUE:
        return value
    return None


def _build_model() -> Any | None:
    api_key = (settings.GEMINI_API_KEY or "").strip()
    if not api_key:
        logger.warning("GEMINI_API_KEY is not set; photo detection disabled")
        return None
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(settings.GEMINI_MODEL)


def detect_glucose_value(image_bytes: bytes, mime_type: str = "image/jpeg", model: Any | None = None) -> int | None:
    if not image_bytes:
        return None
    try:
        model = model or _build_model()
        if model is None:
            return None
        image_part = {"mime_type": mime_type or "image/jpeg", "data": image_bytes}
        response = model.generate_content([image_part, PROMPT])
        text = (response.text or "").strip()
    except Exception:
        logger.exception("gemini glucose detection failed")
        return None
    value = parse_model_reply(text)
    logger.info("vision.detect", extra={"extra_data": {"detected": value is not None}})
    return value


def get_glucose_detector():
    """FastAPI dependency; tests override it with a fake detector."""

    return detect_glucose_value
