"""Nutrition analysis through an external LLM provider."""

import base64
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from nutritrack.domain.food_log import FoodLogEntry
from nutritrack.errors import AnalysisError
from nutritrack.services.food_analysis import normalize_food_record

_logger = logging.getLogger(__name__)

FOOD_ANALYSIS_PROMPT = (
    "You are a nutritional analysis assistant that helps users track their "
    "food intake. Analyze the provided food description or image and reply "
    "with JSON only, shaped as: "
    '{"name": string, "calories": number, "protein": number, "carbs": number, '
    '"fat": number, "fiber": number, "sugar": number, '
    '"mealType": "breakfast|lunch|dinner|snack"}. '
    "Macro and fiber/sugar amounts are grams. Make your best estimate."
)

TEXT_ANALYSIS_PROMPT = (
    f"{FOOD_ANALYSIS_PROMPT} Account for portion sizes and cooking methods "
    "mentioned in the text; if the description is vague, assume a typical "
    "single serving."
)

IMAGE_ANALYSIS_PROMPT = (
    f"{FOOD_ANALYSIS_PROMPT} Identify the food items in the image, estimate "
    "portion sizes and consider visible preparation methods."
)


class AnalysisClient(Protocol):
    """Interface for the LLM that estimates nutrition."""

    async def analyze(
        self,
        *,
        model: str,
        system_prompt: str,
        text: str | None = None,
        image_data_url: str | None = None,
    ) -> object:
        """Return the provider's decoded JSON answer."""


@dataclass
class NutritionAnalysisService:
    """Service that calls the analysis provider and sanitizes its answer."""

    client: AnalysisClient
    model: str

    async def analyze_text(
        self, text: str, now: datetime | None = None
    ) -> FoodLogEntry:
        """Estimate nutrition for a free-text food description."""
        cleaned = text.strip()
        if not cleaned:
            raise AnalysisError("Food description is empty")
        raw = await self._call(system_prompt=TEXT_ANALYSIS_PROMPT, text=cleaned)
        return _to_entry(raw, now)

    async def analyze_image(
        self, image_bytes: bytes, now: datetime | None = None
    ) -> FoodLogEntry:
        """Estimate nutrition for a food photo."""
        if not image_bytes:
            raise AnalysisError("Image is empty")
        raw = await self._call(
            system_prompt=IMAGE_ANALYSIS_PROMPT,
            text="Analyze this food image and provide nutritional information.",
            image_data_url=_to_data_url(image_bytes),
        )
        return _to_entry(raw, now)

    async def _call(self, **kwargs: str) -> object:
        try:
            return await self.client.analyze(model=self.model, **kwargs)
        except AnalysisError:
            raise
        except Exception as exc:
            _logger.warning("Nutrition analysis failed: %s", exc)
            raise AnalysisError("Nutrition analysis failed") from exc


def _to_entry(raw: object, now: datetime | None) -> FoodLogEntry:
    if not isinstance(raw, Mapping):
        raise AnalysisError("Nutrition analysis returned a non-object result")
    # Provider-chosen ids and timestamps are never trusted.
    record = {
        key: value for key, value in raw.items() if key not in {"id", "timestamp"}
    }
    try:
        return normalize_food_record(record, now=now or datetime.now(tz=UTC))
    except PydanticValidationError as exc:
        raise AnalysisError("Nutrition analysis returned an unusable record") from exc


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
