"""Domain models for curated album suggestions."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class AlbumSuggestion:
    """Derived best-of album for one category, or the highlight reel."""

    project_id: UUID
    category: str
    name: str
    cover_photo_id: UUID | None
    photo_count: int
