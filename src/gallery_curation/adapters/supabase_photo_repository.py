"""Supabase-backed photo repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from gallery_curation.domain.photos import (
    DISPATCHABLE_STATUSES,
    AnalysisStatus,
    PhotoAnalysisResult,
    PhotoRecord,
    PhotoRef,
    StatusCounts,
)
from gallery_curation.services.analysis import PhotoRepository
from gallery_curation.services.categories import normalize_category

_PHOTO_COLUMNS = (
    "id, project_id, display_order, ai_status, blur_score, brisque_score, "
    "nima_score, emotion_label, emotion_valence, composite_score, llm_score, "
    "llm_summary, llm_discard_reason, llm_best_in_group, llm_composition, "
    "llm_pose_quality, llm_background_quality, llm_highlights, llm_issues, "
    "llm_category, llm_tags, llm_model, llm_tokens_used, ai_processed_at, "
    "llm_analyzed_at"
)


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo analysis state."""

    client: Client

    def mark_queued(self, photo_ids: list[UUID]) -> list[UUID]:
        """Flip PENDING or FAILED photos to QUEUED; return the ids that flipped."""
        if not photo_ids:
            return []
        response = (
            self.client.table("photos")
            .update({"ai_status": AnalysisStatus.QUEUED.value})
            .in_(
                "ai_status",
                sorted(status.value for status in DISPATCHABLE_STATUSES),
            )
            .in_("id", [str(photo_id) for photo_id in photo_ids])
            .execute()
        )
        return [UUID(str(row["id"])) for row in response.data or []]

    def mark_failed(self, photo_ids: list[UUID], processed_at: datetime) -> None:
        """Flip photos to FAILED and clear any derived score."""
        if not photo_ids:
            return
        self.client.table("photos").update(
            {
                "ai_status": AnalysisStatus.FAILED.value,
                "ai_processed_at": processed_at.isoformat(),
                "composite_score": None,
            }
        ).in_("id", [str(photo_id) for photo_id in photo_ids]).execute()

    def save_result(
        self, photo_id: UUID, result: PhotoAnalysisResult, processed_at: datetime
    ) -> None:
        """Persist metrics, composite score and narrative fields."""
        payload: dict[str, object] = {
            "ai_status": AnalysisStatus.DONE.value,
            "ai_processed_at": processed_at.isoformat(),
            "blur_score": result.blur_score,
            "brisque_score": result.quality_score,
            "nima_score": result.aesthetic_score,
            "composite_score": result.composite_score,
            "emotion_label": result.emotion_label,
            "emotion_valence": result.emotion_valence,
        }
        narrative = result.narrative
        if narrative is not None:
            payload.update(
                {
                    "llm_score": narrative.overall_score,
                    "llm_summary": narrative.summary,
                    "llm_discard_reason": narrative.discard_reason,
                    "llm_best_in_group": narrative.best_in_group,
                    "llm_composition": narrative.composition,
                    "llm_pose_quality": narrative.pose_quality,
                    "llm_background_quality": narrative.background_quality,
                    "llm_highlights": narrative.highlights,
                    "llm_issues": narrative.issues,
                    "llm_category": narrative.category.value,
                    "llm_tags": narrative.tags,
                    "llm_model": narrative.model,
                    "llm_tokens_used": narrative.tokens_used,
                    "llm_analyzed_at": processed_at.isoformat(),
                }
            )
        response = (
            self.client.table("photos")
            .update(payload)
            .eq("id", str(photo_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to save analysis for photo {photo_id}")

    def list_by_status(
        self, project_id: UUID, statuses: list[AnalysisStatus]
    ) -> list[PhotoRef]:
        """Return dispatch references for photos in the given statuses."""
        response = (
            self.client.table("photos")
            .select("id, object_key, thumbnail_key")
            .eq("project_id", str(project_id))
            .in_("ai_status", [status.value for status in statuses])
            .order("display_order", desc=False)
            .execute()
        )
        return [
            PhotoRef(
                id=UUID(row["id"]),
                object_key=row["object_key"],
                thumbnail_key=row.get("thumbnail_key"),
            )
            for row in response.data or []
        ]

    def count_by_status(self, project_id: UUID) -> StatusCounts:
        """Return photo counts partitioned by analysis status."""
        response = (
            self.client.table("photos")
            .select("ai_status")
            .eq("project_id", str(project_id))
            .execute()
        )
        counts = dict.fromkeys(AnalysisStatus, 0)
        for row in response.data or []:
            status = AnalysisStatus(row["ai_status"])
            counts[status] += 1
        return StatusCounts(
            pending=counts[AnalysisStatus.PENDING],
            queued=counts[AnalysisStatus.QUEUED],
            done=counts[AnalysisStatus.DONE],
            failed=counts[AnalysisStatus.FAILED],
        )

    def reset_queued(self, project_id: UUID) -> int:
        """Flip QUEUED photos of a project to FAILED and clear their score."""
        response = (
            self.client.table("photos")
            .update(
                {"ai_status": AnalysisStatus.FAILED.value, "composite_score": None}
            )
            .eq("project_id", str(project_id))
            .eq("ai_status", AnalysisStatus.QUEUED.value)
            .execute()
        )
        return len(response.data or [])

    def count_analyzed_since(self, project_id: UUID, since: datetime) -> int:
        """Count photos whose narrative judgment landed at or after ``since``."""
        response = (
            self.client.table("photos")
            .select("id", count="exact")
            .eq("project_id", str(project_id))
            .gte("llm_analyzed_at", since.isoformat())
            .execute()
        )
        if response.count is not None:
            return response.count
        return len(response.data or [])

    def list_photos(self, project_id: UUID) -> list[PhotoRecord]:
        """Return all photos of a project in display order."""
        response = (
            self.client.table("photos")
            .select(f"{_PHOTO_COLUMNS}, selections(id)")
            .eq("project_id", str(project_id))
            .order("display_order", desc=False)
            .execute()
        )
        return [_parse_photo(row) for row in response.data or []]

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a photo by id, if present."""
        response = (
            self.client.table("photos")
            .select(f"{_PHOTO_COLUMNS}, selections(id)")
            .eq("id", str(photo_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_photo(response.data[0])


def _parse_photo(row: dict[str, object]) -> PhotoRecord:
    category = row.get("llm_category")
    return PhotoRecord(
        id=UUID(str(row["id"])),
        project_id=UUID(str(row["project_id"])),
        display_order=int(row.get("display_order") or 0),
        status=AnalysisStatus(row.get("ai_status") or AnalysisStatus.PENDING),
        blur_score=_optional_float(row.get("blur_score")),
        quality_score=_optional_float(row.get("brisque_score")),
        aesthetic_score=_optional_float(row.get("nima_score")),
        emotion_label=row.get("emotion_label"),
        emotion_valence=_optional_float(row.get("emotion_valence")),
        composite_score=_optional_float(row.get("composite_score")),
        overall_score=_optional_float(row.get("llm_score")),
        summary=row.get("llm_summary"),
        discard_reason=row.get("llm_discard_reason"),
        best_in_group=row.get("llm_best_in_group"),
        composition=row.get("llm_composition"),
        pose_quality=row.get("llm_pose_quality"),
        background_quality=row.get("llm_background_quality"),
        highlights=list(row.get("llm_highlights") or []),
        issues=list(row.get("llm_issues") or []),
        category=normalize_category(category) if category else None,
        tags=list(row.get("llm_tags") or []),
        processed_at=_optional_datetime(row.get("ai_processed_at")),
        analyzed_at=_optional_datetime(row.get("llm_analyzed_at")),
        narrative_model=row.get("llm_model"),
        tokens_used=_optional_int(row.get("llm_tokens_used")),
        selected=bool(row.get("selections")),
    )


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)


def _optional_datetime(value: object) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def _optional_int(value: object) -> int | None:
    if value is None:
        return None
    return int(value)
