"""Trigger, restart and retry actions for project analysis."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from gallery_curation.domain.photos import (
    DISPATCHABLE_STATUSES,
    AnalysisStatus,
    StatusCounts,
)
from gallery_curation.services.analysis import PhotoRepository
from gallery_curation.services.jobs import JobScheduler
from gallery_curation.services.progress import ProgressState, ProgressTracker

logger = logging.getLogger(__name__)


class AnalysisInProgressError(Exception):
    """Raised when an action needs a drained queue but work is still queued."""


@dataclass
class AnalysisControlService:
    """Service behind the analyze, restart and retry actions."""

    photo_repository: PhotoRepository
    scheduler: JobScheduler
    progress_tracker: ProgressTracker = field(default_factory=ProgressTracker)

    def get_status(self, project_id: UUID) -> StatusCounts:
        """Return status counts for progress polling."""
        return self.photo_repository.count_by_status(project_id)

    def count_analyzed_since(self, project_id: UUID, since: datetime) -> int:
        """Return how many photos got a narrative judgment since ``since``."""
        return self.photo_repository.count_analyzed_since(project_id, since)

    def get_progress(self, project_id: UUID) -> tuple[ProgressState, StatusCounts]:
        """Return status counts with the inferred run state."""
        counts = self.photo_repository.count_by_status(project_id)
        return self.progress_tracker.observe(project_id, counts), counts

    def analyze_pending(self, project_id: UUID) -> int:
        """Dispatch every PENDING or FAILED photo; return how many."""
        photos = self.photo_repository.list_by_status(
            project_id, sorted(DISPATCHABLE_STATUSES)
        )
        self.scheduler.submit(photos)
        self.progress_tracker.reset(project_id)
        logger.info("Analysis requested for %d photos in %s", len(photos), project_id)
        return len(photos)

    def restart_stalled(self, project_id: UUID) -> int:
        """Release photos stuck in QUEUED and dispatch everything pending."""
        released = self.photo_repository.reset_queued(project_id)
        if released:
            logger.warning(
                "Released %d stalled photos in project %s", released, project_id
            )
        return self.analyze_pending(project_id)

    def retry_failed(self, project_id: UUID) -> int:
        """Re-dispatch only FAILED photos once the previous run has drained."""
        counts = self.photo_repository.count_by_status(project_id)
        if counts.queued:
            raise AnalysisInProgressError(
                f"{counts.queued} photos are still queued for analysis"
            )
        photos = self.photo_repository.list_by_status(
            project_id, [AnalysisStatus.FAILED]
        )
        self.scheduler.submit(photos)
        self.progress_tracker.reset(project_id)
        return len(photos)
