"""Background execution of analysis dispatch runs."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from gallery_curation.domain.photos import PhotoRef

logger = logging.getLogger(__name__)


class Dispatcher(Protocol):
    """Anything that can run an analysis dispatch."""

    async def dispatch(self, photos: list[PhotoRef]) -> None:
        """Analyze the given photos."""


class JobScheduler(Protocol):
    """Interface used by trigger actions to hand work off."""

    def submit(self, photos: list[PhotoRef]) -> None:
        """Schedule a dispatch run for the photos."""


@dataclass
class AnalysisJob:
    """One dispatch run waiting for the worker."""

    photos: list[PhotoRef]
    attempt: int = 1


@dataclass
class AnalysisJobQueue(JobScheduler):
    """In-process queue drained by a single worker task.

    Runs are handed over here instead of being fired as loose coroutines so
    that a run that raises is retried and every run is logged. If the whole
    process dies, photos stay QUEUED and are recovered by a restart.
    """

    dispatcher: Dispatcher
    max_attempts: int = 3
    _queue: asyncio.Queue[AnalysisJob] | None = field(default=None, init=False)
    _worker: asyncio.Task[None] | None = field(default=None, init=False)

    def start(self) -> None:
        """Start the worker on the running event loop."""
        if self._worker is not None and not self._worker.done():
            return
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(
            self._run(self._queue), name="analysis-worker"
        )

    async def stop(self) -> None:
        """Cancel the worker; queued jobs are dropped."""
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

    def submit(self, photos: list[PhotoRef]) -> None:
        """Queue a dispatch run for the photos."""
        if not photos:
            return
        if self._queue is None:
            raise RuntimeError("Analysis job queue is not started")
        self._queue.put_nowait(AnalysisJob(photos=list(photos)))
        logger.info("Queued analysis job for %d photos", len(photos))

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def _run(self, queue: asyncio.Queue[AnalysisJob]) -> None:
        while True:
            job = await queue.get()
            try:
                await self.dispatcher.dispatch(job.photos)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(
                    "Analysis job failed (attempt %d/%d)",
                    job.attempt,
                    self.max_attempts,
                )
                if job.attempt < self.max_attempts:
                    queue.put_nowait(
                        AnalysisJob(photos=job.photos, attempt=job.attempt + 1)
                    )
            finally:
                queue.task_done()
