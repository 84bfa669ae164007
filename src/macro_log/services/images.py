"""Meal photo uploads producing the image reference used for estimation."""

import logging
from dataclasses import dataclass
from typing import Protocol

from macro_log.domain.errors import InputValidationError
from macro_log.domain.models import new_id

_EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}

_logger = logging.getLogger(__name__)


class ImageStore(Protocol):
    """Interface for photo storage."""

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store the bytes under ``path`` and return their image reference."""


@dataclass
class ImageService:
    """Names, types and uploads meal photos."""

    store: ImageStore

    def upload(self, image_bytes: bytes) -> str:
        if not image_bytes:
            raise InputValidationError("Image must not be empty", field="image")
        mime_type = detect_mime_type(image_bytes)
        path = f"{new_id()}.{_EXTENSIONS[mime_type]}"
        image_ref = self.store.upload(path, image_bytes, mime_type)
        _logger.info("Uploaded image %s (%s bytes)", path, len(image_bytes))
        return image_ref


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
