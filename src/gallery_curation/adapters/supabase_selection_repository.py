"""Supabase repositories for projects and client selections."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from gallery_curation.domain.projects import (
    ProjectRecord,
    ProjectStatus,
    SelectionRecord,
)
from gallery_curation.services.selections import (
    ProjectRepository,
    SelectionRepository,
)


@dataclass
class SupabaseProjectRepository(ProjectRepository):
    """Supabase implementation for project lookups."""

    client: Client

    def get_project(self, project_id: UUID) -> ProjectRecord | None:
        """Return a project by id, if present."""
        response = (
            self.client.table("projects")
            .select("id, status, selection_deadline")
            .eq("id", str(project_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        deadline = row.get("selection_deadline")
        return ProjectRecord(
            id=UUID(row["id"]),
            status=ProjectStatus(row.get("status") or ProjectStatus.ACTIVE),
            selection_deadline=datetime.fromisoformat(deadline) if deadline else None,
        )


@dataclass
class SupabaseSelectionRepository(SelectionRepository):
    """Supabase implementation for selections."""

    client: Client

    def get_by_photo(self, photo_id: UUID) -> SelectionRecord | None:
        """Return the selection of a photo, if any."""
        response = (
            self.client.table("selections")
            .select("id, project_id, photo_id")
            .eq("photo_id", str(photo_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return SelectionRecord(
            id=UUID(row["id"]),
            project_id=UUID(row["project_id"]),
            photo_id=UUID(row["photo_id"]),
        )

    def create_selection(self, project_id: UUID, photo_id: UUID) -> None:
        """Create a selection row."""
        response = (
            self.client.table("selections")
            .insert({"project_id": str(project_id), "photo_id": str(photo_id)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create selection")

    def delete_selection(self, selection_id: UUID) -> None:
        """Delete a selection row."""
        self.client.table("selections").delete().eq("id", str(selection_id)).execute()

    def count_selections(self, project_id: UUID) -> int:
        """Return how many photos of a project are selected."""
        response = (
            self.client.table("selections")
            .select("id", count="exact")
            .eq("project_id", str(project_id))
            .execute()
        )
        if response.count is not None:
            return response.count
        return len(response.data or [])
