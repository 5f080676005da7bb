"""Photo analysis dispatch across the metrics and narrative backends."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from pydantic import ValidationError

from gallery_curation.adapters.vision_api_client import MetricsClient, VisionApiError
from gallery_curation.domain.photos import (
    AnalysisStatus,
    NarrativeFields,
    PhotoAnalysisResult,
    PhotoRecord,
    PhotoRef,
    StatusCounts,
)
from gallery_curation.domain.vision import (
    AnalysisFlags,
    BatchAnalyzeResponse,
    ImageAnalysisResult,
    NarrativePhotoAnalysis,
)
from gallery_curation.services.categories import normalize_category
from gallery_curation.services.narrative import (
    NarrativeBatchResult,
    NarrativePhotoInput,
    NarrativeService,
)
from gallery_curation.services.scoring import composite_score, emotion_from_faces

logger = logging.getLogger(__name__)

DEFAULT_METRICS_BATCH_SIZE = 20
DEFAULT_NARRATIVE_BATCH_SIZE = 5

_Judgment = tuple[NarrativePhotoAnalysis, NarrativeBatchResult]


class PhotoRepository(Protocol):
    """Persistence interface for photos and their analysis state."""

    def mark_queued(self, photo_ids: list[UUID]) -> list[UUID]:
        """Flip PENDING or FAILED photos to QUEUED in one bulk update.

        Photos in any other status are left alone. Returns the ids that
        actually flipped.
        """

    def mark_failed(self, photo_ids: list[UUID], processed_at: datetime) -> None:
        """Flip photos to FAILED in one bulk update."""

    def save_result(
        self, photo_id: UUID, result: PhotoAnalysisResult, processed_at: datetime
    ) -> None:
        """Persist a successful analysis and flip the photo to DONE."""

    def list_by_status(
        self, project_id: UUID, statuses: list[AnalysisStatus]
    ) -> list[PhotoRef]:
        """Return dispatch references for photos in the given statuses."""

    def count_by_status(self, project_id: UUID) -> StatusCounts:
        """Return photo counts partitioned by analysis status."""

    def reset_queued(self, project_id: UUID) -> int:
        """Flip every QUEUED photo of a project to FAILED; return how many.

        The composite score of released photos is cleared.
        """

    def count_analyzed_since(self, project_id: UUID, since: datetime) -> int:
        """Count photos whose narrative judgment landed at or after ``since``."""

    def list_photos(self, project_id: UUID) -> list[PhotoRecord]:
        """Return all photos of a project in manual display order."""

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a photo by id, if present."""


class ObjectStorage(Protocol):
    """Interface for short-lived read access to stored objects."""

    def create_signed_url(self, key: str, expires_in: int) -> str:
        """Return a signed URL valid for ``expires_in`` seconds."""


@dataclass
class AnalysisDispatcher:
    """Sends photos to the inference backends in sequential batches.

    Every photo handed to ``dispatch`` ends in DONE or FAILED unless the
    process dies mid-run, in which case it stays QUEUED until a restart.
    Batches never run concurrently and each one is persisted before the
    next starts, so pollers see steady progress.
    """

    photo_repository: PhotoRepository
    storage: ObjectStorage
    metrics_client: MetricsClient
    narrative_service: NarrativeService | None = None
    flags: AnalysisFlags = field(default_factory=AnalysisFlags)
    metrics_batch_size: int = DEFAULT_METRICS_BATCH_SIZE
    narrative_batch_size: int = DEFAULT_NARRATIVE_BATCH_SIZE
    signed_url_ttl_seconds: int = 3600

    async def dispatch(self, photos: list[PhotoRef]) -> None:
        """Analyze photos; progress is observable only through their status."""
        if not photos:
            return
        try:
            claimed = set(
                self.photo_repository.mark_queued([photo.id for photo in photos])
            )
        except Exception:
            logger.exception("Failed to queue %d photos for analysis", len(photos))
            return

        skipped = len(photos) - len(claimed)
        if skipped:
            logger.info("Skipping %d photos already queued or analyzed", skipped)
        photos = [photo for photo in photos if photo.id in claimed]
        for batch in _chunks(photos, self.metrics_batch_size):
            settled: set[UUID] = set()
            try:
                await self._process_batch(batch, settled)
            except Exception:
                logger.exception("Unexpected error in analysis batch")
                self._fail([p.id for p in batch if p.id not in settled], settled)

    async def _process_batch(self, batch: list[PhotoRef], settled: set[UUID]) -> None:
        batch_ids = [photo.id for photo in batch]
        try:
            urls = {
                photo.id: self.storage.create_signed_url(
                    photo.read_key, self.signed_url_ttl_seconds
                )
                for photo in batch
            }
        except Exception:
            logger.exception("Failed to sign read URLs for %d photos", len(batch))
            self._fail(batch_ids, settled)
            return

        try:
            raw = await self.metrics_client.analyze_batch(
                [{"url": urls[photo.id], "image_id": str(photo.id)} for photo in batch],
                self.flags,
            )
            response = BatchAnalyzeResponse.model_validate(raw)
        except VisionApiError as exc:
            logger.error("Metrics batch call failed: %s", exc)
            self._fail(batch_ids, settled)
            return
        except Exception:
            logger.exception("Metrics batch call failed")
            self._fail(batch_ids, settled)
            return

        metrics = _parse_metrics(response)
        narratives: dict[str, _Judgment] = {}
        if self.narrative_service is not None:
            eligible = [
                photo for photo in batch if _usable(metrics.get(str(photo.id)))
            ]
            narratives = await self._run_narrative(
                self.narrative_service, eligible, urls
            )

        processed_at = datetime.now(tz=UTC)
        for photo in batch:
            self._settle(photo.id, metrics, narratives, processed_at, settled)

    async def _run_narrative(
        self,
        narrative_service: NarrativeService,
        photos: list[PhotoRef],
        urls: dict[UUID, str],
    ) -> dict[str, _Judgment]:
        results: dict[str, _Judgment] = {}
        for chunk in _chunks(photos, self.narrative_batch_size):
            inputs = [
                NarrativePhotoInput(photo_id=str(photo.id), image_url=urls[photo.id])
                for photo in chunk
            ]
            try:
                batch = await narrative_service.analyze_batch(inputs)
            except Exception:
                logger.exception(
                    "Narrative batch call failed for %d photos", len(chunk)
                )
                continue
            requested = {item.photo_id for item in inputs}
            for analysis in batch.photos:
                if analysis.photo_id in requested:
                    results[analysis.photo_id] = (analysis, batch)
        return results

    def _settle(
        self,
        photo_id: UUID,
        metrics: dict[str, ImageAnalysisResult],
        narratives: dict[str, _Judgment],
        processed_at: datetime,
        settled: set[UUID],
    ) -> None:
        key = str(photo_id)
        item = metrics.get(key)
        if item is None:
            logger.warning("Photo %s missing from metrics response", key)
            self._fail([photo_id], settled, processed_at)
            return
        if item.error:
            logger.warning("Metrics analysis error for photo %s: %s", key, item.error)
            self._fail([photo_id], settled, processed_at)
            return
        if not _usable(item):
            logger.warning("Metrics response for photo %s is incomplete", key)
            self._fail([photo_id], settled, processed_at)
            return
        judgment = narratives.get(key)
        if self.narrative_service is not None and judgment is None:
            logger.warning("Photo %s missing from narrative response", key)
            self._fail([photo_id], settled, processed_at)
            return

        result = _build_result(
            item,
            blur=item.blur.laplacian_variance,
            quality=item.quality.brisque_score,
            aesthetic=item.aesthetic.nima_aesthetic_score,
            judgment=judgment,
        )
        try:
            self.photo_repository.save_result(photo_id, result, processed_at)
        except Exception:
            logger.exception("Failed to persist analysis for photo %s", key)
            self._fail([photo_id], settled, processed_at)
            return
        settled.add(photo_id)

    def _fail(
        self,
        photo_ids: list[UUID],
        settled: set[UUID],
        processed_at: datetime | None = None,
    ) -> None:
        if not photo_ids:
            return
        try:
            self.photo_repository.mark_failed(
                photo_ids, processed_at or datetime.now(tz=UTC)
            )
        except Exception:
            logger.exception("Failed to mark %d photos as failed", len(photo_ids))
            return
        settled.update(photo_ids)


def _parse_metrics(response: BatchAnalyzeResponse) -> dict[str, ImageAnalysisResult]:
    metrics: dict[str, ImageAnalysisResult] = {}
    for raw_item in response.results:
        try:
            item = ImageAnalysisResult.model_validate(raw_item)
        except ValidationError as exc:
            logger.warning(
                "Malformed metrics item for photo %s (%d validation errors)",
                raw_item.get("image_id"),
                exc.error_count(),
            )
            continue
        if item.image_id:
            metrics[item.image_id] = item
    return metrics


def _usable(item: ImageAnalysisResult | None) -> bool:
    return (
        item is not None
        and not item.error
        and item.blur is not None
        and item.quality is not None
        and item.aesthetic is not None
    )


def _build_result(
    item: ImageAnalysisResult,
    *,
    blur: float,
    quality: float,
    aesthetic: float,
    judgment: _Judgment | None,
) -> PhotoAnalysisResult:
    narrative = judgment[0] if judgment else None
    if narrative is not None and narrative.emotion is not None:
        emotion_label: str | None = narrative.emotion.label
        emotion_valence: float | None = narrative.emotion.valence
    else:
        faces = item.emotion.faces if item.emotion else []
        emotion_label, emotion_valence = emotion_from_faces(
            [face.dominant_emotion for face in faces]
        )
    return PhotoAnalysisResult(
        blur_score=blur,
        quality_score=quality,
        aesthetic_score=aesthetic,
        composite_score=composite_score(blur, aesthetic, quality, emotion_valence),
        emotion_label=emotion_label,
        emotion_valence=emotion_valence,
        narrative=_narrative_fields(*judgment) if judgment else None,
    )


def _narrative_fields(
    narrative: NarrativePhotoAnalysis, batch: NarrativeBatchResult
) -> NarrativeFields:
    return NarrativeFields(
        overall_score=narrative.overall_score,
        summary=narrative.summary,
        discard_reason=narrative.discard_reason or None,
        best_in_group=narrative.best_in_group,
        composition=narrative.composition,
        pose_quality=narrative.pose_quality,
        background_quality=narrative.background_quality,
        highlights=list(narrative.highlights),
        issues=list(narrative.issues),
        category=normalize_category(narrative.category),
        tags=[tag.strip().lower() for tag in narrative.tags if tag.strip()],
        model=batch.model,
        tokens_used=batch.tokens_used,
    )


def _chunks(photos: list[PhotoRef], size: int) -> Iterator[list[PhotoRef]]:
    step = max(1, size)
    for start in range(0, len(photos), step):
        yield photos[start : start + step]
