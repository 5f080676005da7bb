"""Per-category album curation and the cross-category highlight reel."""

import logging
import math
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from gallery_curation.domain.albums import AlbumSuggestion
from gallery_curation.domain.categories import HIGHLIGHTS_KEY, Category
from gallery_curation.domain.photos import PhotoRecord
from gallery_curation.services.analysis import PhotoRepository
from gallery_curation.services.categories import category_label
from gallery_curation.services.narrative import NarrativeService

logger = logging.getLogger(__name__)

CURATED_SHARE = 0.30
MIN_CURATED = 5
HIGHLIGHT_SHARE = 0.15
MIN_HIGHLIGHTS = 10
MAX_HIGHLIGHTS = 30


class AlbumRepository(Protocol):
    """Persistence interface for album suggestions."""

    def replace_albums(self, project_id: UUID, albums: list[AlbumSuggestion]) -> None:
        """Atomically swap all suggestions of a project for ``albums``."""

    def list_albums(self, project_id: UUID) -> list[AlbumSuggestion]:
        """Return suggestions ordered by photo count, largest first."""

    def rename_album(
        self, project_id: UUID, category: str, name: str
    ) -> AlbumSuggestion | None:
        """Set the display name of one album; None if it does not exist."""

    def delete_album(self, project_id: UUID, category: str) -> bool:
        """Remove one album; return whether it existed."""


class AlbumNameError(ValueError):
    """Raised when an album name is blank."""


def curated_count(group_size: int) -> int:
    """Top 30% of a category, at least 5, never more than exist."""
    if group_size <= 0:
        return 0
    return min(max(math.ceil(CURATED_SHARE * group_size), MIN_CURATED), group_size)


def highlight_count(total_curated: int, available: int) -> int:
    """Size of the highlight reel, between 10 and 30 and capped by supply."""
    if total_curated <= 0 or available <= 0:
        return 0
    wanted = max(math.ceil(HIGHLIGHT_SHARE * total_curated), MIN_HIGHLIGHTS)
    return min(wanted, MAX_HIGHLIGHTS, available)


@dataclass
class AlbumCurator:
    """Builds best-of album suggestions from analyzed photos."""

    photo_repository: PhotoRepository
    album_repository: AlbumRepository
    narrative_service: NarrativeService | None = None

    async def curate(self, project_id: UUID) -> list[AlbumSuggestion]:
        """Regenerate and persist every album suggestion of a project."""
        photos = [
            photo
            for photo in self.photo_repository.list_photos(project_id)
            if not photo.discarded
        ]
        groups: dict[Category, list[PhotoRecord]] = {}
        for photo in photos:
            if photo.category is not None:
                groups.setdefault(photo.category, []).append(photo)

        drafts: list[tuple[str, UUID | None, int]] = []
        total_curated = 0
        for category in Category:
            members = groups.get(category)
            if not members:
                continue
            count = curated_count(len(members))
            total_curated += count
            drafts.append((category.value, _cover(members), count))

        scored = [photo for photo in photos if photo.composite_score is not None]
        highlights = highlight_count(total_curated, len(scored))
        if highlights:
            drafts.insert(0, (HIGHLIGHTS_KEY, _cover(scored), highlights))

        names = await self._album_names([key for key, _, _ in drafts])
        albums = [
            AlbumSuggestion(
                project_id=project_id,
                category=key,
                name=names.get(key) or category_label(key),
                cover_photo_id=cover,
                photo_count=count,
            )
            for key, cover, count in drafts
        ]
        self.album_repository.replace_albums(project_id, albums)
        logger.info("Regenerated %d albums for project %s", len(albums), project_id)
        return albums

    def list_albums(self, project_id: UUID) -> list[AlbumSuggestion]:
        """Return the stored suggestions of a project."""
        return self.album_repository.list_albums(project_id)

    def rename_album(
        self, project_id: UUID, category: str, name: str
    ) -> AlbumSuggestion | None:
        """Rename one album until the next regeneration."""
        trimmed = name.strip()
        if not trimmed:
            raise AlbumNameError("Album name must not be empty")
        album = self.album_repository.rename_album(project_id, category, trimmed)
        if album is not None:
            logger.info("Renamed album %s of project %s", category, project_id)
        return album

    def delete_album(self, project_id: UUID, category: str) -> bool:
        deleted = self.album_repository.delete_album(project_id, category)
        if deleted:
            logger.info("Deleted album %s of project %s", category, project_id)
        return deleted

    def album_photo_ids(self, project_id: UUID, category: str) -> list[UUID] | None:
        """Return the photos of one album, best first, or None if it is unknown."""
        album = next(
            (
                album
                for album in self.album_repository.list_albums(project_id)
                if album.category == category
            ),
            None,
        )
        if album is None:
            return None
        photos = [
            photo
            for photo in self.photo_repository.list_photos(project_id)
            if not photo.discarded
        ]
        if category == HIGHLIGHTS_KEY:
            members = [photo for photo in photos if photo.composite_score is not None]
        else:
            members = [photo for photo in photos if photo.category == category]
        ranked = sorted(members, key=_rank_key)
        return [photo.id for photo in ranked[: album.photo_count]]

    async def _album_names(self, keys: list[str]) -> dict[str, str]:
        if not keys or self.narrative_service is None:
            return {}
        try:
            return await self.narrative_service.name_albums(keys)
        except Exception:
            logger.exception("Album name generation failed; using static labels")
            return {}


def _cover(photos: list[PhotoRecord]) -> UUID | None:
    scored = [photo for photo in photos if photo.composite_score is not None]
    if not scored:
        return None
    return min(scored, key=_rank_key).id


def _rank_key(photo: PhotoRecord) -> tuple[int, float, int]:
    if photo.composite_score is None:
        return (1, 0.0, photo.display_order)
    return (0, -photo.composite_score, photo.display_order)
