"""Models for inference backend payloads."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class BlurResult(BaseModel):
    """Sharpness measurement from the metrics backend."""

    laplacian_variance: float
    is_blurry: bool | None = None
    blur_threshold: float | None = None


class QualityResult(BaseModel):
    """Technical defect measurement; lower BRISQUE is better."""

    brisque_score: float
    nima_technical_score: float | None = None
    overall_quality: str | None = None


class AestheticResult(BaseModel):
    """Aesthetic prediction on a 1-10 scale."""

    nima_aesthetic_score: float
    aesthetic_label: str | None = None


class FaceEmotion(BaseModel):
    """Dominant emotion detected on one face."""

    dominant_emotion: str
    scores: dict[str, float] = Field(default_factory=dict)
    face_confidence: float | None = None


class EmotionResult(BaseModel):
    """Faces found in the image with their emotions."""

    faces_detected: int = 0
    faces: list[FaceEmotion] = Field(default_factory=list)


class ImageAnalysisResult(BaseModel):
    """Per-image entry of a metrics batch response."""

    image_id: str | None = None
    source_url: str | None = None
    blur: BlurResult | None = None
    quality: QualityResult | None = None
    aesthetic: AestheticResult | None = None
    emotion: EmotionResult | None = None
    processing_time_ms: float | None = None
    error: str | None = None


class BatchAnalyzeResponse(BaseModel):
    """Top-level metrics batch response.

    Items stay raw so each one can be validated, and fail, on its own.
    """

    api_version: str | None = None
    total: int | None = None
    succeeded: int | None = None
    failed: int | None = None
    results: list[dict[str, Any]]


class AnalysisFlags(BaseModel):
    """Sub-analyses requested from the metrics backend."""

    run_blur: bool = True
    run_quality: bool = True
    run_emotion: bool = True
    run_embedding: bool = False


class NarrativeEmotion(BaseModel):
    """Emotion read by the language model."""

    label: str
    valence: float = Field(ge=-1.0, le=1.0)


class NarrativePhotoAnalysis(BaseModel):
    """Structured judgment for one photo from the narrative backend."""

    photo_id: str
    overall_score: float = Field(ge=1.0, le=10.0)
    emotion: NarrativeEmotion | None = None
    composition: str
    pose_quality: str | None = None
    background_quality: str
    discard_reason: str | None = None
    best_in_group: bool = False
    highlights: list[str] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)
    summary: str
    category: str
    tags: list[str] = Field(default_factory=list)

    @field_validator("overall_score")
    @classmethod
    def _one_decimal(cls, value: float) -> float:
        return round(value, 1)


class NarrativeBatch(BaseModel):
    """Structured output of one narrative batch call."""

    photos: list[NarrativePhotoAnalysis]


class AlbumName(BaseModel):
    """Display name proposed for one album key."""

    category: str
    name: str


class AlbumNames(BaseModel):
    """Structured output of the album naming call."""

    albums: list[AlbumName]
