"""Supabase repository for album suggestions."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from gallery_curation.domain.albums import AlbumSuggestion
from gallery_curation.services.albums import AlbumRepository

_ALBUM_COLUMNS = "project_id, category, name, cover_photo_id, photo_count"


@dataclass
class SupabaseAlbumRepository(AlbumRepository):
    """Supabase implementation for album suggestions."""

    client: Client

    def replace_albums(self, project_id: UUID, albums: list[AlbumSuggestion]) -> None:
        """Delete and recreate suggestions inside one database function call."""
        self.client.rpc(
            "replace_album_suggestions",
            {
                "p_project_id": str(project_id),
                "p_albums": [
                    {
                        "category": album.category,
                        "name": album.name,
                        "cover_photo_id": str(album.cover_photo_id)
                        if album.cover_photo_id
                        else None,
                        "photo_count": album.photo_count,
                    }
                    for album in albums
                ],
            },
        ).execute()

    def list_albums(self, project_id: UUID) -> list[AlbumSuggestion]:
        """Return suggestions ordered by photo count."""
        response = (
            self.client.table("album_suggestions")
            .select(_ALBUM_COLUMNS)
            .eq("project_id", str(project_id))
            .order("photo_count", desc=True)
            .execute()
        )
        return [_parse_album(row) for row in response.data or []]

    def rename_album(
        self, project_id: UUID, category: str, name: str
    ) -> AlbumSuggestion | None:
        """Update the display name of one suggestion."""
        response = (
            self.client.table("album_suggestions")
            .update({"name": name})
            .eq("project_id", str(project_id))
            .eq("category", category)
            .execute()
        )
        if not response.data:
            return None
        return _parse_album(response.data[0])

    def delete_album(self, project_id: UUID, category: str) -> bool:
        """Delete one suggestion."""
        response = (
            self.client.table("album_suggestions")
            .delete()
            .eq("project_id", str(project_id))
            .eq("category", category)
            .execute()
        )
        return bool(response.data)


def _parse_album(row: dict[str, object]) -> AlbumSuggestion:
    cover = row.get("cover_photo_id")
    return AlbumSuggestion(
        project_id=UUID(str(row["project_id"])),
        category=str(row["category"]),
        name=str(row["name"]),
        cover_photo_id=UUID(str(cover)) if cover else None,
        photo_count=int(row.get("photo_count") or 0),
    )
