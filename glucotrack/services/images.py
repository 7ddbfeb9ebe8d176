"""Photo pre-processing for the capture form: EXIF timestamps and downscaling."""

from __future__ import annotations

import logging
from datetime import datetime
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from ..core.guayaquil import GUAYAQUIL, to_local_input

logger = logging.getLogger(__name__)

MAX_SIDE = 800
JPEG_QUALITY = 80

EXIF_IFD = 0x8769
TAG_DATETIME = 0x0132
TAG_DATETIME_ORIGINAL = 0x9003
TAG_DATETIME_DIGITIZED = 0x9004

# Oversized images raise DecompressionBombError, which is not an OSError.
_UNREADABLE = (UnidentifiedImageError, Image.DecompressionBombError, OSError)


def _parse_exif_datetime(raw: object) -> datetime | None:
    if isinstance(raw, bytes):
        raw = raw.decode("ascii", "ignore")
    if not isinstance(raw, str):
        return None
    try:
        return datetime.strptime(raw.strip("\x00 ").strip(), "%Y:%m:%d %H:%M:%S")
    except ValueError:
        return None


def photo_taken_at(data: bytes) -> str | None:
    """Capture time as a Guayaquil ``datetime-local`` value, if the photo has one.

    EXIF clocks carry no offset; the camera is assumed to be set to local time.
    """

    try:
        with Image.open(BytesIO(data)) as image:
            exif = image.getexif()
            sub_ifd = exif.get_ifd(EXIF_IFD)
    except _UNREADABLE:
        return None
    for raw in (sub_ifd.get(TAG_DATETIME_ORIGINAL), sub_ifd.get(TAG_DATETIME_DIGITIZED), exif.get(TAG_DATETIME)):
        taken = _parse_exif_datetime(raw)
        if taken is not None:
            return to_local_input(taken.replace(tzinfo=GUAYAQUIL))
    return None


def downscale_for_vision(data: bytes) -> tuple[bytes, str]:
    """Shrink to at most 800px on the long side and re-encode as JPEG."""

    try:
        with Image.open(BytesIO(data)) as image:
            image = image.convert("RGB")
            image.thumbnail((MAX_SIDE, MAX_SIDE))
            buffer = BytesIO()
            image.save(buffer, format="JPEG", quality=JPEG_QUALITY)
    except _UNREADABLE:
        logger.info("image could not be decoded; sending original bytes")
        return data, "image/jpeg"
    return buffer.getvalue(), "image/jpeg"
