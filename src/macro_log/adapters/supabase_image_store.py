"""Supabase storage-backed image store."""

from dataclasses import dataclass

from supabase import Client

from macro_log.services.images import ImageStore


@dataclass
class SupabaseImageStore(ImageStore):
    """Uploads meal photos to a Supabase storage bucket."""

    client: Client
    bucket: str

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Upload the bytes and return their public URL."""
        bucket = self.client.storage.from_(self.bucket)
        bucket.upload(
            path,
            data,
            file_options={"content-type": content_type, "upsert": "false"},
        )
        return bucket.get_public_url(path)
