"""
Heart: Photo blob store.

``store_blob`` is the only contract the rest of the service relies on: it
takes raw bytes and a content type and returns an opaque reference that is
saved on the user record.  Objects go to GCS when ``GCS_BUCKET_NAME`` is
configured, otherwise to the local ``MEDIA_ROOT`` directory.

All functions here block; call them through ``asyncio.to_thread``.
"""

from __future__ import annotations

import mimetypes
import uuid
from pathlib import Path

import structlog

from heart.config import get_settings

logger = structlog.get_logger("heart.storage")

_GCS_PREFIX = "gs://"
_PHOTO_PREFIX = "photos/"


def get_bucket():
    from google.cloud import storage as gcs_storage

    settings = get_settings()
    client = gcs_storage.Client(project=settings.GCP_PROJECT_ID or None)
    return client.bucket(settings.GCS_BUCKET_NAME)


def upload_file(path: str, file_bytes: bytes, content_type: str = "application/octet-stream") -> str:
    """Upload file to GCS bucket. Returns the GCS URI."""
    bucket = get_bucket()
    blob = bucket.blob(path)
    blob.upload_from_string(file_bytes, content_type=content_type)
    return f"{_GCS_PREFIX}{bucket.name}/{path}"


def _extension_for(content_type: str) -> str:
    ext = mimetypes.guess_extension(content_type) or ".bin"
    return ".jpg" if ext == ".jpe" else ext


def store_blob(data: bytes, content_type: str) -> str:
    """Persist ``data`` and return its reference."""
    settings = get_settings()
    name = f"{uuid.uuid4().hex}{_extension_for(content_type)}"

    if settings.GCS_BUCKET_NAME:
        reference = upload_file(f"{_PHOTO_PREFIX}{name}", data, content_type=content_type)
    else:
        root = Path(settings.MEDIA_ROOT)
        root.mkdir(parents=True, exist_ok=True)
        (root / name).write_bytes(data)
        reference = name

    logger.info("blob_stored", reference=reference, size=len(data), content_type=content_type)
    return reference


def public_url(reference: str) -> str:
    """Map a stored reference to the URL clients fetch it from."""
    if reference.startswith(_GCS_PREFIX):
        return f"https://storage.googleapis.com/{reference[len(_GCS_PREFIX):]}"
    return f"/images/{reference}"
