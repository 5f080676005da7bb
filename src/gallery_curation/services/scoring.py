"""Composite quality score."""

BLUR_FLOOR = 30.0
AESTHETIC_WEIGHT = 0.60
QUALITY_WEIGHT = 0.30
EMOTION_WEIGHT = 0.10
AESTHETIC_MIN = 1.0
AESTHETIC_MAX = 10.0
QUALITY_SCALE = 100.0
NEUTRAL_EMOTION = 0.5

# Negative valence for unhappy faces, positive for happy ones.
EMOTION_VALENCE: dict[str, float] = {
    "happy": 0.8,
    "surprise": 0.3,
    "neutral": 0.0,
    "sad": -0.6,
    "fear": -0.6,
    "angry": -0.7,
    "disgust": -0.7,
}


def composite_score(
    blur: float,
    aesthetic: float,
    technical_quality: float,
    emotion_valence: float | None = None,
) -> float:
    """Combine raw metrics into a single 0-100 score.

    Blur only matters below ``BLUR_FLOOR``, where it scales the whole score
    down proportionally. Shallow depth-of-field shots usually measure well
    above the floor and are left untouched.
    """
    blur_gate = blur / BLUR_FLOOR if blur < BLUR_FLOOR else 1.0
    blur_gate = _clamp(blur_gate)
    aesthetic_norm = _clamp(
        (aesthetic - AESTHETIC_MIN) / (AESTHETIC_MAX - AESTHETIC_MIN)
    )
    quality_norm = _clamp(1 - technical_quality / QUALITY_SCALE)
    if emotion_valence is None:
        emotion_norm = NEUTRAL_EMOTION
    else:
        emotion_norm = _clamp((emotion_valence + 1) / 2)
    weighted = (
        aesthetic_norm * AESTHETIC_WEIGHT
        + quality_norm * QUALITY_WEIGHT
        + emotion_norm * EMOTION_WEIGHT
    )
    return round(blur_gate * weighted * 100, 1)


def emotion_from_faces(dominant_emotions: list[str]) -> tuple[str | None, float | None]:
    """Return the most frequent label and mean valence for detected faces."""
    labels = [label.strip().lower() for label in dominant_emotions if label]
    if not labels:
        return None, None
    counts: dict[str, int] = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    dominant = max(counts, key=lambda label: counts[label])
    valences = [EMOTION_VALENCE.get(label, 0.0) for label in labels]
    return dominant, round(sum(valences) / len(valences), 2)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))
