"""Tests for container wiring."""

import asyncio

from gallery_curation.config import Settings
from gallery_curation.containers import build_container


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert container.analysis_control.scheduler is container.job_queue
    assert container.dispatcher.narrative_service is not None
    assert container.dispatcher.metrics_batch_size == 20
    assert container.dispatcher.flags.run_embedding is False
    asyncio.run(container.close_resources())


def test_build_container_can_disable_narrative(settings: Settings) -> None:
    container = build_container(
        settings.model_copy(update={"narrative_enabled": False, "run_emotion": False})
    )

    assert container.dispatcher.narrative_service is None
    assert container.dispatcher.flags.run_emotion is False
    assert container.album_curator.narrative_service is not None
    asyncio.run(container.close_resources())
