"""Tests for the affinity reorder engine."""

from uuid import UUID

import pytest

from gallery_curation.domain.categories import Category
from gallery_curation.domain.photos import PhotoRecord
from gallery_curation.services.affinity import (
    AffinityService,
    affinity_score,
    build_profile,
    compute_order,
    should_reorder,
)
from tests.conftest import InMemoryPhotoRepository, make_photo


@pytest.mark.parametrize(
    ("count", "expected"),
    [(0, False), (4, False), (5, True), (6, False), (7, False), (8, True), (11, True)],
)
def test_should_reorder(count: int, expected: bool) -> None:
    assert should_reorder(count) is expected


def _favorites(project_id: UUID, count: int, start: int = 0) -> list[PhotoRecord]:
    return [
        make_photo(
            project_id,
            start + index,
            selected=True,
            category=Category.PARTY,
            tags=["dance"],
            composite_score=70.0,
        )
        for index in range(count)
    ]


def test_order_unchanged_below_five_favorites(project_id: UUID) -> None:
    photos = [make_photo(project_id, 0, composite_score=10.0)]
    photos += _favorites(project_id, 4, start=1)
    photos.append(make_photo(project_id, 5, category=Category.PARTY, tags=["dance"]))

    assert compute_order(photos) == [photo.id for photo in photos]


def test_favorites_first_then_by_affinity(project_id: UUID) -> None:
    unrelated = make_photo(project_id, 0, category=Category.FOOD, composite_score=50.0)
    favorites = _favorites(project_id, 5, start=1)
    similar = make_photo(
        project_id, 6, category=Category.PARTY, tags=["dance"], composite_score=50.0
    )
    discarded = make_photo(
        project_id,
        7,
        category=Category.PARTY,
        tags=["dance"],
        composite_score=50.0,
        discard_reason="motion blur",
    )
    photos = [unrelated, favorites[0], favorites[1], similar, favorites[2],
              favorites[3], discarded, favorites[4]]

    order = compute_order(photos)

    assert order[:5] == [photo.id for photo in favorites]
    assert order[5:] == [similar.id, discarded.id, unrelated.id]


def test_ties_keep_display_order(project_id: UUID) -> None:
    favorites = _favorites(project_id, 5)
    first = make_photo(project_id, 10, category=Category.FOOD)
    second = make_photo(project_id, 11, category=Category.FOOD)

    order = compute_order(favorites + [first, second])

    assert order[5:] == [first.id, second.id]


def test_profile_counts_and_first_seen_top_category(project_id: UUID) -> None:
    favorites = [
        make_photo(project_id, 0, category=Category.FOOD, tags=["cake", "cake"]),
        make_photo(project_id, 1, category=Category.PARTY, tags=["cake"]),
        make_photo(project_id, 2, category=Category.PARTY, emotion_valence=0.4),
        make_photo(project_id, 3, category=Category.FOOD, emotion_valence=0.8),
    ]

    profile = build_profile(favorites)

    assert profile.tag_counts["cake"] == 2
    assert profile.top_category == Category.FOOD
    assert profile.mean_valence == pytest.approx(0.6)
    assert profile.mean_score == 50.0


def test_affinity_score_components(project_id: UUID) -> None:
    profile = build_profile(
        [
            make_photo(
                project_id,
                i,
                category=Category.PARTY,
                tags=["dance"],
                emotion_valence=0.5,
                composite_score=80.0,
            )
            for i in range(5)
        ]
    )
    candidate = make_photo(
        project_id,
        9,
        category=Category.PARTY,
        tags=["dance", "night"],
        emotion_valence=0.7,
    )

    # tag 2*5 + category 3*5 + valence bonus 1 + 0.1 * mean score 80
    assert affinity_score(candidate, profile) == pytest.approx(34.0)


def test_affinity_service_reads_repository_order(
    photo_repository: InMemoryPhotoRepository, project_id: UUID
) -> None:
    photos = photo_repository.add_many(project_id, 3)

    order = AffinityService(photo_repository).compute_order(project_id)

    assert order == [photo.id for photo in photos]
