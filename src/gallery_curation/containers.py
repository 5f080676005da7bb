"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from gallery_curation.adapters.openai_narrative_client import OpenAINarrativeClient
from gallery_curation.adapters.supabase_album_repository import (
    SupabaseAlbumRepository,
)
from gallery_curation.adapters.supabase_photo_repository import (
    SupabasePhotoRepository,
)
from gallery_curation.adapters.supabase_selection_repository import (
    SupabaseProjectRepository,
    SupabaseSelectionRepository,
)
from gallery_curation.adapters.supabase_storage import SupabaseObjectStorage
from gallery_curation.adapters.vision_api_client import HttpxVisionApiClient
from gallery_curation.config import Settings
from gallery_curation.domain.vision import AnalysisFlags
from gallery_curation.services.affinity import AffinityService
from gallery_curation.services.albums import AlbumCurator
from gallery_curation.services.analysis import AnalysisDispatcher
from gallery_curation.services.analysis_control import AnalysisControlService
from gallery_curation.services.jobs import AnalysisJobQueue
from gallery_curation.services.narrative import NarrativeService
from gallery_curation.services.progress import ProgressTracker
from gallery_curation.services.selections import SelectionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    dispatcher: AnalysisDispatcher
    job_queue: AnalysisJobQueue
    analysis_control: AnalysisControlService
    album_curator: AlbumCurator
    affinity_service: AffinityService
    selection_service: SelectionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    photo_repository = SupabasePhotoRepository(supabase_client)
    album_repository = SupabaseAlbumRepository(supabase_client)
    project_repository = SupabaseProjectRepository(supabase_client)
    selection_repository = SupabaseSelectionRepository(supabase_client)
    storage = SupabaseObjectStorage(supabase_client, resolved_settings.storage_bucket)

    metrics_client = HttpxVisionApiClient.create(
        base_url=resolved_settings.vision_api_url,
        api_key=resolved_settings.vision_api_key,
        timeout_seconds=resolved_settings.vision_api_timeout_seconds,
    )
    openai_client = OpenAINarrativeClient.create(resolved_settings.openai_api_key)
    narrative_service = NarrativeService(
        client=openai_client,
        model=resolved_settings.openai_model,
        store=resolved_settings.openai_store,
    )
    dispatcher = AnalysisDispatcher(
        photo_repository=photo_repository,
        storage=storage,
        metrics_client=metrics_client,
        narrative_service=(
            narrative_service if resolved_settings.narrative_enabled else None
        ),
        flags=AnalysisFlags(
            run_blur=True,
            run_quality=True,
            run_emotion=resolved_settings.run_emotion,
            run_embedding=resolved_settings.run_embedding,
        ),
        metrics_batch_size=resolved_settings.metrics_batch_size,
        narrative_batch_size=resolved_settings.narrative_batch_size,
        signed_url_ttl_seconds=resolved_settings.signed_url_ttl_seconds,
    )
    job_queue = AnalysisJobQueue(
        dispatcher=dispatcher,
        max_attempts=resolved_settings.analysis_job_max_attempts,
    )
    affinity_service = AffinityService(photo_repository)

    async def close_resources() -> None:
        await metrics_client.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        dispatcher=dispatcher,
        job_queue=job_queue,
        analysis_control=AnalysisControlService(
            photo_repository=photo_repository,
            scheduler=job_queue,
            progress_tracker=ProgressTracker(
                threshold_cycles=resolved_settings.stall_threshold_cycles,
                poll_interval_seconds=resolved_settings.stall_poll_interval_seconds,
            ),
        ),
        album_curator=AlbumCurator(
            photo_repository=photo_repository,
            album_repository=album_repository,
            narrative_service=narrative_service,
        ),
        affinity_service=affinity_service,
        selection_service=SelectionService(
            project_repository=project_repository,
            photo_repository=photo_repository,
            selection_repository=selection_repository,
            affinity_service=affinity_service,
        ),
        close_resources=close_resources,
    )
