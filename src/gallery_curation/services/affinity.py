"""Reordering of unseen photos toward a client's favorites."""

from collections import Counter
from dataclasses import dataclass
from uuid import UUID

from gallery_curation.domain.categories import Category
from gallery_curation.domain.photos import PhotoRecord
from gallery_curation.services.analysis import PhotoRepository

MIN_FAVORITES = 5
REORDER_EVERY = 3
TAG_WEIGHT = 2.0
CATEGORY_WEIGHT = 3.0
VALENCE_BONUS = 1.0
VALENCE_TOLERANCE = 0.3
SCORE_WEIGHT = 0.1
DISCARD_PENALTY = 5.0
DEFAULT_MEAN_SCORE = 50.0


@dataclass(frozen=True)
class TasteProfile:
    """Aggregate of what a client has favorited so far."""

    tag_counts: Counter[str]
    category_counts: Counter[Category]
    top_category: Category | None
    mean_valence: float | None
    mean_score: float


def should_reorder(favorite_count: int) -> bool:
    """Recompute on the 5th favorite and on every 3rd one after it."""
    if favorite_count < MIN_FAVORITES:
        return False
    return (favorite_count - MIN_FAVORITES) % REORDER_EVERY == 0


def build_profile(favorites: list[PhotoRecord]) -> TasteProfile:
    tag_counts: Counter[str] = Counter()
    category_counts: Counter[Category] = Counter()
    for photo in favorites:
        tag_counts.update(set(photo.tags))
        if photo.category is not None:
            category_counts[photo.category] += 1
    # Counter.most_common keeps first-seen order on ties.
    top = category_counts.most_common(1)
    valences = [p.emotion_valence for p in favorites if p.emotion_valence is not None]
    scores = [p.composite_score for p in favorites if p.composite_score is not None]
    return TasteProfile(
        tag_counts=tag_counts,
        category_counts=category_counts,
        top_category=top[0][0] if top else None,
        mean_valence=sum(valences) / len(valences) if valences else None,
        mean_score=sum(scores) / len(scores) if scores else DEFAULT_MEAN_SCORE,
    )


def affinity_score(photo: PhotoRecord, profile: TasteProfile) -> float:
    """Heuristic similarity of one photo to the taste profile."""
    score = 0.0
    for tag in set(photo.tags):
        score += TAG_WEIGHT * profile.tag_counts.get(tag, 0)
    if photo.category is not None and photo.category == profile.top_category:
        score += CATEGORY_WEIGHT * profile.category_counts[photo.category]
    if (
        photo.emotion_valence is not None
        and profile.mean_valence is not None
        and abs(photo.emotion_valence - profile.mean_valence) <= VALENCE_TOLERANCE
    ):
        score += VALENCE_BONUS
    quality = (
        photo.composite_score
        if photo.composite_score is not None
        else profile.mean_score
    )
    score += SCORE_WEIGHT * quality
    if photo.discarded:
        score -= DISCARD_PENALTY
    return score


def compute_order(photos: list[PhotoRecord]) -> list[UUID]:
    """Favorites first as they are, then the rest by descending affinity.

    ``photos`` must be in manual display order; ties keep that order.
    """
    favorites = [photo for photo in photos if photo.selected]
    if len(favorites) < MIN_FAVORITES:
        return [photo.id for photo in photos]
    profile = build_profile(favorites)
    others = [photo for photo in photos if not photo.selected]
    ranked = sorted(others, key=lambda photo: -affinity_score(photo, profile))
    return [photo.id for photo in favorites] + [photo.id for photo in ranked]


@dataclass
class AffinityService:
    """Repository-backed entry point for the reorder engine."""

    photo_repository: PhotoRepository

    def compute_order(self, project_id: UUID) -> list[UUID]:
        """Return the client-facing photo order for a project."""
        return compute_order(self.photo_repository.list_photos(project_id))
