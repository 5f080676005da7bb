"""Narrative photo judgments and album naming using LLMs."""

from dataclasses import dataclass
from typing import Protocol

from gallery_curation.domain.vision import (
    AlbumNames,
    NarrativeBatch,
    NarrativePhotoAnalysis,
)

_NULLABLE_STRING = {"anyOf": [{"type": "string"}, {"type": "null"}]}
_STRING_LIST = {"type": "array", "items": {"type": "string"}}

NARRATIVE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "photos": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "photo_id": {"type": "string"},
                    "overall_score": {
                        "type": "number",
                        "minimum": 1.0,
                        "maximum": 10.0,
                    },
                    "emotion": {
                        "anyOf": [
                            {
                                "type": "object",
                                "properties": {
                                    "label": {"type": "string"},
                                    "valence": {
                                        "type": "number",
                                        "minimum": -1.0,
                                        "maximum": 1.0,
                                    },
                                },
                                "required": ["label", "valence"],
                                "additionalProperties": False,
                            },
                            {"type": "null"},
                        ]
                    },
                    "composition": {"type": "string"},
                    "pose_quality": _NULLABLE_STRING,
                    "background_quality": {"type": "string"},
                    "discard_reason": _NULLABLE_STRING,
                    "best_in_group": {"type": "boolean"},
                    "highlights": _STRING_LIST,
                    "issues": _STRING_LIST,
                    "summary": {"type": "string"},
                    "category": {"type": "string"},
                    "tags": _STRING_LIST,
                },
                "required": [
                    "photo_id",
                    "overall_score",
                    "emotion",
                    "composition",
                    "pose_quality",
                    "background_quality",
                    "discard_reason",
                    "best_in_group",
                    "highlights",
                    "issues",
                    "summary",
                    "category",
                    "tags",
                ],
                "additionalProperties": False,
            },
        }
    },
    "required": ["photos"],
    "additionalProperties": False,
}

ALBUM_NAMES_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "albums": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "category": {"type": "string"},
                    "name": {"type": "string"},
                },
                "required": ["category", "name"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["albums"],
    "additionalProperties": False,
}

PHOTO_ANALYSIS_INSTRUCTIONS = (
    "You are an expert in professional event photography (weddings, "
    "quinceañeras, graduations, portraits). Evaluate each photo so the "
    "photographer can pick the best ones to deliver to the client.\n"
    "Rules:\n"
    "- overall_score uses exactly one decimal (7.4, never 7). 7.0+ means "
    "worth delivering.\n"
    "- Flag technical problems: unintended blur, closed eyes, stiff poses, "
    "distracting backgrounds. Intentional bokeh is not a defect.\n"
    "- Genuine emotion is worth more than a perfect pose. Use null emotion "
    "when no people are visible.\n"
    "- discard_reason is null unless the photo should not be delivered.\n"
    "- category names the moment of the event the photo shows, e.g. "
    "preparation, ceremony, portraits, couple, group, family, children, pets, "
    "reception, party, food, decor, details, outdoor, architecture, product, "
    "sports or other.\n"
    "- tags are short lowercase descriptors such as bride, rings, first-dance."
)

ALBUM_NAMING_INSTRUCTIONS = (
    "You name photo albums for a client gallery. For every category key "
    "given, return one short, warm album title (at most four words). "
    "The key _highlights is the best-of reel for the whole event. "
    "Return the key unchanged in the category field."
)


@dataclass(frozen=True)
class StructuredOutput:
    """Parsed model output and the tokens the call consumed."""

    data: dict[str, object]
    tokens_used: int | None = None


class NarrativeClient(Protocol):
    """Interface for structured multimodal LLM calls."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        content: list[dict[str, object]],
        schema: dict[str, object],
        schema_name: str,
    ) -> StructuredOutput:
        """Return structured output matching ``schema`` with token usage."""


@dataclass(frozen=True)
class NarrativePhotoInput:
    """Photo id and a readable image URL for the model."""

    photo_id: str
    image_url: str


@dataclass(frozen=True)
class NarrativeBatchResult:
    """Judgments from one model call with the model name and token usage."""

    photos: list[NarrativePhotoAnalysis]
    model: str
    tokens_used: int | None = None


@dataclass
class NarrativeService:
    """Service that prepares narrative prompts and validates results."""

    client: NarrativeClient
    model: str
    store: bool

    async def analyze_batch(
        self, photos: list[NarrativePhotoInput]
    ) -> NarrativeBatchResult:
        """Judge a batch of photos in a single model call."""
        if not photos:
            return NarrativeBatchResult(photos=[], model=self.model)
        photo_ids = ", ".join(photo.photo_id for photo in photos)
        content: list[dict[str, object]] = [
            {
                "type": "input_text",
                "text": (
                    f"Analyze each of the following {len(photos)} photos. "
                    "Use exactly the photo_id given for each one.\n"
                    f"Photos: {photo_ids}"
                ),
            }
        ]
        for photo in photos:
            content.append({"type": "input_text", "text": f"Photo {photo.photo_id}:"})
            content.append({"type": "input_image", "image_url": photo.image_url})
        output = await self.client.generate(
            model=self.model,
            store=self.store,
            instructions=PHOTO_ANALYSIS_INSTRUCTIONS,
            content=content,
            schema=NARRATIVE_SCHEMA,
            schema_name="photo_analysis",
        )
        return NarrativeBatchResult(
            photos=NarrativeBatch.model_validate(output.data).photos,
            model=self.model,
            tokens_used=output.tokens_used,
        )

    async def name_albums(self, categories: list[str]) -> dict[str, str]:
        """Return display names keyed by album category."""
        if not categories:
            return {}
        content: list[dict[str, object]] = [
            {
                "type": "input_text",
                "text": "Album keys: " + ", ".join(categories),
            }
        ]
        output = await self.client.generate(
            model=self.model,
            store=self.store,
            instructions=ALBUM_NAMING_INSTRUCTIONS,
            content=content,
            schema=ALBUM_NAMES_SCHEMA,
            schema_name="album_names",
        )
        names = AlbumNames.model_validate(output.data)
        wanted = set(categories)
        return {
            album.category: album.name.strip()
            for album in names.albums
            if album.category in wanted and album.name.strip()
        }
