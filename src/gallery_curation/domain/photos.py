"""Domain models for photos and their analysis lifecycle."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from gallery_curation.domain.categories import Category


class AnalysisStatus(StrEnum):
    """Analysis state machine for a single photo."""

    PENDING = "PENDING"
    QUEUED = "QUEUED"
    DONE = "DONE"
    FAILED = "FAILED"


DISPATCHABLE_STATUSES = frozenset({AnalysisStatus.PENDING, AnalysisStatus.FAILED})


@dataclass(frozen=True)
class PhotoRef:
    """Storage references needed to dispatch a photo for analysis."""

    id: UUID
    object_key: str
    thumbnail_key: str | None = None

    @property
    def read_key(self) -> str:
        """Key used for analysis reads; thumbnails are preferred."""
        return self.thumbnail_key or self.object_key


@dataclass(frozen=True)
class PhotoRecord:
    """Photo row with raw metrics, derived score and narrative fields."""

    id: UUID
    project_id: UUID
    display_order: int
    status: AnalysisStatus
    blur_score: float | None = None
    quality_score: float | None = None
    aesthetic_score: float | None = None
    emotion_label: str | None = None
    emotion_valence: float | None = None
    composite_score: float | None = None
    overall_score: float | None = None
    summary: str | None = None
    discard_reason: str | None = None
    best_in_group: bool | None = None
    composition: str | None = None
    pose_quality: str | None = None
    background_quality: str | None = None
    highlights: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    category: Category | None = None
    tags: list[str] = field(default_factory=list)
    processed_at: datetime | None = None
    analyzed_at: datetime | None = None
    narrative_model: str | None = None
    tokens_used: int | None = None
    selected: bool = False

    @property
    def discarded(self) -> bool:
        """Whether the narrative backend recommended discarding the photo."""
        return bool(self.discard_reason)


@dataclass(frozen=True)
class NarrativeFields:
    """Narrative judgments ready for persistence."""

    overall_score: float
    summary: str
    discard_reason: str | None
    best_in_group: bool
    composition: str
    pose_quality: str | None
    background_quality: str
    highlights: list[str]
    issues: list[str]
    category: Category
    tags: list[str]
    model: str | None = None
    tokens_used: int | None = None  # billed for the whole narrative call


@dataclass(frozen=True)
class PhotoAnalysisResult:
    """Successful analysis outcome for one photo."""

    blur_score: float
    quality_score: float
    aesthetic_score: float
    composite_score: float
    emotion_label: str | None
    emotion_valence: float | None
    narrative: NarrativeFields | None = None


@dataclass(frozen=True)
class StatusCounts:
    """Photo counts partitioned by analysis status."""

    pending: int = 0
    queued: int = 0
    done: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.queued + self.done + self.failed

    @property
    def analyzed(self) -> int:
        return self.done + self.failed

    @property
    def complete(self) -> bool:
        """True once no photo is waiting on a running analysis."""
        return self.queued == 0

    def as_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "pending": self.pending,
            "queued": self.queued,
            "done": self.done,
            "failed": self.failed,
            "analyzed": self.analyzed,
            "complete": self.complete,
        }
