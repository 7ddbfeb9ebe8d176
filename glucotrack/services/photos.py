"""Blob storage for meter photos.

Photos are stored under a generated unique name and referenced from readings
by a URL. Deleting works from that URL alone: the last path segment is the
stored name. The local backend keeps files in ``DATA_DIR/photos`` (served by
the app at ``/photos``); when ``S3_BUCKET`` is set photos go to that bucket.
"""

from __future__ import annotations

import logging
import re
import secrets
import time
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..core.config import AppSettings, settings

logger = logging.getLogger(__name__)

PHOTOS_URL_PREFIX = "/photos"
_SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "webp", "heic", "gif"})


class PhotoStoreError(Exception):
    """Raised when the blob store cannot save or delete a photo."""


def generate_photo_name(filename: str | None) -> str:
    ext = Path(filename or "").suffix.lstrip(".").lower()
    if ext not in IMAGE_EXTENSIONS:
        ext = "jpg"
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}.{ext}"


def name_from_url(url: str | None) -> str | None:
    if not url:
        return None
    path = urlparse(url).path
    name = path.rstrip("/").rsplit("/", 1)[-1]
    if not name or not _SAFE_NAME_RE.match(name):
        return None
    return name


class LocalPhotoStore:
    def __init__(self, root: Path, url_prefix: str = PHOTOS_URL_PREFIX) -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def save(self, data: bytes, filename: str | None, content_type: str | None = None) -> str:
        name = generate_photo_name(filename)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / name).write_bytes(data)
        except OSError as exc:
            raise PhotoStoreError(f"could not write {name}") from exc
        return f"{self.url_prefix}/{name}"

    def delete(self, url: str | None) -> None:
        name = name_from_url(url)
        if not name:
            return
        try:
            (self.root / name).unlink(missing_ok=True)
        except OSError as exc:
            raise PhotoStoreError(f"could not delete {name}") from exc


class S3PhotoStore:
    def __init__(self, config: AppSettings, client=None) -> None:
        if client is None:
            client = boto3.client(
                "s3",
                region_name=config.S3_REGION,
                endpoint_url=config.S3_ENDPOINT_URL,
                aws_access_key_id=config.S3_ACCESS_KEY,
                aws_secret_access_key=config.S3_SECRET_KEY,
            )
        self.client = client
        self.bucket = config.S3_BUCKET
        self.public_url = (config.S3_PUBLIC_URL or f"https://{config.S3_BUCKET}.s3.amazonaws.com").rstrip("/")

    def save(self, data: bytes, filename: str | None, content_type: str | None = None) -> str:
        name = generate_photo_name(filename)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=name,
                Body=data,
                ContentType=content_type or "image/jpeg",
                CacheControl="max-age=3600",
            )
        except (BotoCoreError, ClientError) as exc:
            raise PhotoStoreError(f"could not upload {name}") from exc
        return f"{self.public_url}/{name}"

    def delete(self, url: str | None) -> None:
        name = name_from_url(url)
        if not name:
            return
        try:
            self.client.delete_object(Bucket=self.bucket, Key=name)
        except (BotoCoreError, ClientError) as exc:
            raise PhotoStoreError(f"could not delete {name}") from exc


def build_photo_store(config: Optional[AppSettings] = None):
    config = config or settings
    if config.S3_BUCKET:
        logger.info("photo store: s3 bucket %s", config.S3_BUCKET)
        return S3PhotoStore(config)
    return LocalPhotoStore(config.photos_dir)


_store = None


def get_photo_store():
    """FastAPI dependency returning the process-wide photo store."""

    global _store
    if _store is None:
        _store = build_photo_store()
    return _store
