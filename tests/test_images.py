"""Tests for photo uploads."""

from dataclasses import dataclass, field

import pytest

from macro_log.adapters.supabase_image_store import SupabaseImageStore
from macro_log.domain.errors import InputValidationError
from macro_log.services.images import ImageService, detect_mime_type
from tests.conftest import FakeImageStore


@dataclass
class FakeBucket:
    name: str
    uploads: list[tuple[str, bytes, dict[str, str]]] = field(default_factory=list)

    def upload(self, path: str, file: bytes, file_options: dict[str, str]) -> None:
        self.uploads.append((path, file, file_options))

    def get_public_url(self, path: str) -> str:
        return f"https://project.supabase.co/storage/v1/object/public/{self.name}/{path}"


@dataclass
class FakeStorage:
    buckets: dict[str, FakeBucket] = field(default_factory=dict)

    def from_(self, name: str) -> FakeBucket:
        return self.buckets.setdefault(name, FakeBucket(name))


@dataclass
class FakeSupabaseClient:
    storage: FakeStorage = field(default_factory=FakeStorage)


def test_detect_mime_type_from_signatures() -> None:
    assert detect_mime_type(b"\x89PNG\r\n\x1a\n" + b"rest") == "image/png"
    assert detect_mime_type(b"\xff\xd8\xff\xe0rest") == "image/jpeg"
    assert detect_mime_type(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"
    assert detect_mime_type(b"unknown") == "image/jpeg"


def test_image_service_names_upload_by_type() -> None:
    store = FakeImageStore()
    service = ImageService(store)

    image_ref = service.upload(b"\x89PNG\r\n\x1a\nrest")

    (path,) = store.uploads
    assert path.endswith(".png")
    assert store.uploads[path][1] == "image/png"
    assert image_ref == f"https://images.test/{path}"


def test_image_service_rejects_empty_upload() -> None:
    with pytest.raises(InputValidationError):
        ImageService(FakeImageStore()).upload(b"")


def test_supabase_store_uploads_and_returns_public_url() -> None:
    client = FakeSupabaseClient()
    store = SupabaseImageStore(client, bucket="food-images")

    url = store.upload("abc.jpg", b"\xff\xd8\xff", "image/jpeg")

    bucket = client.storage.buckets["food-images"]
    assert bucket.uploads == [
        ("abc.jpg", b"\xff\xd8\xff", {"content-type": "image/jpeg", "upsert": "false"})
    ]
    assert url.endswith("/food-images/abc.jpg")
