"""Supabase Storage adapter for signed read URLs."""

from dataclasses import dataclass

from supabase import Client

from gallery_curation.services.analysis import ObjectStorage


@dataclass
class SupabaseObjectStorage(ObjectStorage):
    """Signs object keys in one storage bucket."""

    client: Client
    bucket: str

    def create_signed_url(self, key: str, expires_in: int) -> str:
        """Return a signed URL for an object key."""
        response = self.client.storage.from_(self.bucket).create_signed_url(
            key, expires_in
        )
        url = response.get("signedURL") or response.get("signedUrl")
        if not url:
            raise RuntimeError(f"Failed to sign storage key {key}")
        return str(url)
