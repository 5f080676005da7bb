"""Domain models for projects and client selections."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class ProjectStatus(StrEnum):
    """Lifecycle of a delivery project."""

    ACTIVE = "ACTIVE"
    LOCKED = "LOCKED"
    ARCHIVED = "ARCHIVED"


@dataclass(frozen=True)
class ProjectRecord:
    """Minimal project view needed to guard selections."""

    id: UUID
    status: ProjectStatus
    selection_deadline: datetime | None


@dataclass(frozen=True)
class SelectionRecord:
    """A client's favorite mark on one photo."""

    id: UUID
    project_id: UUID
    photo_id: UUID
