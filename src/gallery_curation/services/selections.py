"""Client favorite toggling."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from gallery_curation.domain.projects import (
    ProjectRecord,
    ProjectStatus,
    SelectionRecord,
)
from gallery_curation.services.affinity import AffinityService, should_reorder
from gallery_curation.services.analysis import PhotoRepository


class SelectionError(Exception):
    """Base error for rejected selection changes."""


class ProjectNotFoundError(SelectionError):
    """Raised when the project does not exist."""


class PhotoNotFoundError(SelectionError):
    """Raised when the photo is not part of the project."""


class SelectionLockedError(SelectionError):
    """Raised when the project no longer accepts selection changes."""


class ProjectRepository(Protocol):
    """Persistence interface for projects."""

    def get_project(self, project_id: UUID) -> ProjectRecord | None:
        """Return a project by id, if present."""


class SelectionRepository(Protocol):
    """Persistence interface for selections."""

    def get_by_photo(self, photo_id: UUID) -> SelectionRecord | None:
        """Return the selection of a photo, if any."""

    def create_selection(self, project_id: UUID, photo_id: UUID) -> None:
        """Create a selection row."""

    def delete_selection(self, selection_id: UUID) -> None:
        """Delete a selection row."""

    def count_selections(self, project_id: UUID) -> int:
        """Return how many photos of a project are selected."""


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a toggle, with a fresh order when one was due."""

    selected: bool
    total_selected: int
    order: list[UUID] | None = None


@dataclass
class SelectionService:
    """Service that toggles favorites and triggers reordering."""

    project_repository: ProjectRepository
    photo_repository: PhotoRepository
    selection_repository: SelectionRepository
    affinity_service: AffinityService

    def toggle(self, project_id: UUID, photo_id: UUID) -> ToggleResult:
        """Flip the favorite mark of a photo."""
        project = self.project_repository.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project {project_id} not found")
        if project.status in {ProjectStatus.LOCKED, ProjectStatus.ARCHIVED}:
            raise SelectionLockedError("Selections are locked")
        if project.selection_deadline and project.selection_deadline < datetime.now(
            tz=UTC
        ):
            raise SelectionLockedError("Selection deadline has passed")
        photo = self.photo_repository.get_photo(photo_id)
        if photo is None or photo.project_id != project_id:
            raise PhotoNotFoundError(f"Photo {photo_id} not found")

        existing = self.selection_repository.get_by_photo(photo_id)
        if existing:
            self.selection_repository.delete_selection(existing.id)
        else:
            self.selection_repository.create_selection(project_id, photo_id)
        total = self.selection_repository.count_selections(project_id)

        order = None
        if should_reorder(total):
            order = self.affinity_service.compute_order(project_id)
        return ToggleResult(selected=existing is None, total_selected=total, order=order)
