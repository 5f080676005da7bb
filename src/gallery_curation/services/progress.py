"""Progress tracking and stall detection for running analyses."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID

from gallery_curation.domain.photos import StatusCounts

logger = logging.getLogger(__name__)

DEFAULT_STALL_CYCLES = 6
DEFAULT_POLL_INTERVAL_SECONDS = 3.0


class ProgressState(StrEnum):
    """What a poller should show for a project."""

    IDLE = "IDLE"
    RUNNING = "RUNNING"
    STALLED = "STALLED"
    COMPLETE = "COMPLETE"
    COMPLETE_WITH_FAILURES = "COMPLETE_WITH_FAILURES"


TERMINAL_STATES = frozenset(
    {
        ProgressState.STALLED,
        ProgressState.COMPLETE,
        ProgressState.COMPLETE_WITH_FAILURES,
    }
)


@dataclass
class StallDetector:
    """Infers a dead background run from a lack of progress across polls.

    A run is stalled when photos are queued and the analyzed count
    (done + failed) has not grown for ``threshold_cycles`` observations.
    """

    threshold_cycles: int = DEFAULT_STALL_CYCLES
    idle_cycles: int = field(default=0, init=False)
    last_analyzed: int | None = field(default=None, init=False)

    def observe(self, counts: StatusCounts) -> ProgressState:
        """Record one poll result and classify it."""
        analyzed = counts.analyzed
        if self.last_analyzed is not None and analyzed > self.last_analyzed:
            self.idle_cycles = 0
        elif self.last_analyzed is not None and counts.queued > 0:
            self.idle_cycles += 1
        self.last_analyzed = analyzed

        if counts.queued == 0:
            self.idle_cycles = 0
            if counts.total == 0 or counts.analyzed == 0:
                return ProgressState.IDLE
            if counts.failed:
                return ProgressState.COMPLETE_WITH_FAILURES
            return ProgressState.COMPLETE
        if self.idle_cycles >= self.threshold_cycles:
            return ProgressState.STALLED
        return ProgressState.RUNNING

    def reset(self) -> None:
        """Forget history, e.g. after a restart."""
        self.idle_cycles = 0
        self.last_analyzed = None


@dataclass
class ProgressTracker:
    """Keeps one stall detector per project across status polls."""

    threshold_cycles: int = DEFAULT_STALL_CYCLES
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    _detectors: dict[UUID, StallDetector] = field(default_factory=dict, init=False)

    def observe(self, project_id: UUID, counts: StatusCounts) -> ProgressState:
        detector = self._detectors.get(project_id)
        if detector is None:
            detector = StallDetector(threshold_cycles=self.threshold_cycles)
            self._detectors[project_id] = detector
        state = detector.observe(counts)
        if state == ProgressState.STALLED:
            logger.warning(
                "Analysis for project %s stalled at %d/%d",
                project_id,
                counts.analyzed,
                counts.total,
            )
        return state

    def reset(self, project_id: UUID) -> None:
        """Start a fresh observation window for a new run."""
        self._detectors.pop(project_id, None)


def can_restart(state: ProgressState) -> bool:
    """Whether the stalled-run restart action should be offered."""
    return state == ProgressState.STALLED


def can_retry(counts: StatusCounts) -> bool:
    """Whether a drained run left failures worth retrying."""
    return counts.queued == 0 and counts.failed > 0


async def monitor_analysis(
    fetch_status: Callable[[], Awaitable[StatusCounts]],
    detector: StallDetector,
    interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> tuple[ProgressState, StatusCounts]:
    """Poll until the run completes or stalls; return the final state.

    A run that never starts is reported as IDLE after the same number of
    polls that would mark a started run as stalled.
    """
    idle_polls = 0
    while True:
        counts = await fetch_status()
        state = detector.observe(counts)
        logger.debug(
            "Analysis progress %d/%d (%s)", counts.analyzed, counts.total, state
        )
        if state in TERMINAL_STATES:
            return state, counts
        if state == ProgressState.IDLE:
            idle_polls += 1
            if idle_polls >= detector.threshold_cycles:
                return state, counts
        else:
            idle_polls = 0
        await sleep(interval_seconds)
