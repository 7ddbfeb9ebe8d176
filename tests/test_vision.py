"""Meter photo reading: model reply parsing and image pre-processing."""

import os
import sys
from io import BytesIO
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

import pytest
from PIL import Image

from glucotrack.services import vision
from glucotrack.services.images import downscale_for_vision, photo_taken_at


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.requests = []

    def generate_content(self, contents):
        self.requests.append(contents)
        if self.error:
            raise self.error
        return FakeResponse(self.reply)


@pytest.mark.parametrize(
    "reply, expected",
    [
        ("298", 298),
        (" 120 mg/dL", 120),
        ("20", 20),
        ("600", 600),
        ("19", None),
        ("601", None),
        ("null", None),
        ("", None),
        (None, None),
        ("about 120", None),
    ],
)
def test_parse_model_reply(reply, expected):
    assert vision.parse_model_reply(reply) == expected


def test_detect_sends_image_and_prompt():
    model = FakeModel(reply="145\n")
    assert vision.detect_glucose_value(b"jpeg", "image/jpeg", model=model) == 145
    image_part, prompt = model.requests[0]
    assert image_part == {"mime_type": "image/jpeg", "data": b"jpeg"}
    assert prompt == vision.PROMPT


def test_detect_treats_failures_as_no_suggestion():
    assert vision.detect_glucose_value(b"jpeg", model=FakeModel(error=RuntimeError("quota"))) is None
    assert vision.detect_glucose_value(b"jpeg", model=FakeModel(reply="null")) is None
    assert vision.detect_glucose_value(b"", model=FakeModel(reply="120")) is None


def test_detect_without_api_key_returns_none(monkeypatch):
    monkeypatch.setattr(vision.settings, "GEMINI_API_KEY", None)
    assert vision.detect_glucose_value(b"jpeg") is None


def _jpeg(size=(40, 20), exif=None):
    buffer = BytesIO()
    image = Image.new("RGB", size, color=(200, 30, 30))
    if exif is not None:
        image.save(buffer, format="JPEG", exif=exif)
    else:
        image.save(buffer, format="JPEG")
    return buffer.getvalue()


def test_photo_taken_at_reads_exif_as_local_time():
    exif = Image.Exif()
    exif[0x0132] = "2024:03:04 08:30:00"
    assert photo_taken_at(_jpeg(exif=exif)) == "2024-03-04T08:30"


def test_photo_taken_at_without_metadata():
    assert photo_taken_at(_jpeg()) is None
    assert photo_taken_at(b"not an image") is None


def test_downscale_for_vision_caps_long_side():
    data, mime_type = downscale_for_vision(_jpeg(size=(2000, 1000)))
    assert mime_type == "image/jpeg"
    with Image.open(BytesIO(data)) as image:
        assert image.size == (800, 400)


def test_downscale_passes_through_undecodable_bytes():
    assert downscale_for_vision(b"raw") == (b"raw", "image/jpeg")


def test_oversized_images_fall_back_without_raising(monkeypatch):
    data = _jpeg(size=(100, 100))
    # 100x100 is more than twice this limit, so Pillow refuses to open it.
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    assert photo_taken_at(data) is None
    assert downscale_for_vision(data) == (data, "image/jpeg")
