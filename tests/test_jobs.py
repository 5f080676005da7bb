"""Tests for the background analysis job queue."""

import asyncio
from dataclasses import dataclass, field
from uuid import uuid4

import pytest

from gallery_curation.domain.photos import PhotoRef
from gallery_curation.services.jobs import AnalysisJobQueue


@dataclass
class FlakyDispatcher:
    failures: int = 0
    runs: list[list[PhotoRef]] = field(default_factory=list)

    async def dispatch(self, photos: list[PhotoRef]) -> None:
        self.runs.append(photos)
        if self.failures:
            self.failures -= 1
            raise RuntimeError("boom")


def _refs(count: int) -> list[PhotoRef]:
    return [PhotoRef(id=uuid4(), object_key=f"o/{i}.jpg") for i in range(count)]


def test_job_queue_runs_submitted_jobs_in_order() -> None:
    dispatcher = FlakyDispatcher()
    first, second = _refs(2), _refs(1)

    async def run() -> None:
        job_queue = AnalysisJobQueue(dispatcher=dispatcher)
        job_queue.start()
        job_queue.submit(first)
        job_queue.submit(second)
        await job_queue.join()
        await job_queue.stop()

    asyncio.run(run())

    assert dispatcher.runs == [first, second]


def test_job_queue_retries_failed_runs_up_to_max_attempts() -> None:
    dispatcher = FlakyDispatcher(failures=5)

    async def run() -> None:
        job_queue = AnalysisJobQueue(dispatcher=dispatcher, max_attempts=3)
        job_queue.start()
        job_queue.submit(_refs(1))
        await job_queue.join()
        await job_queue.stop()

    asyncio.run(run())

    assert len(dispatcher.runs) == 3


def test_job_queue_recovers_after_transient_failure() -> None:
    dispatcher = FlakyDispatcher(failures=1)
    photos = _refs(2)

    async def run() -> None:
        job_queue = AnalysisJobQueue(dispatcher=dispatcher)
        job_queue.start()
        job_queue.submit(photos)
        await job_queue.join()
        await job_queue.stop()

    asyncio.run(run())

    assert dispatcher.runs == [photos, photos]


def test_job_queue_ignores_empty_submissions() -> None:
    dispatcher = FlakyDispatcher()

    async def run() -> None:
        job_queue = AnalysisJobQueue(dispatcher=dispatcher)
        job_queue.start()
        job_queue.submit([])
        await job_queue.join()
        await job_queue.stop()

    asyncio.run(run())

    assert dispatcher.runs == []


def test_job_queue_requires_start() -> None:
    job_queue = AnalysisJobQueue(dispatcher=FlakyDispatcher())

    with pytest.raises(RuntimeError):
        job_queue.submit(_refs(1))
