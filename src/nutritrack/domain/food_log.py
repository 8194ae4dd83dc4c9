"""Domain models for food log entries."""

import math
import re
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

_LEADING_NUMBER = re.compile(r"\s*(\d+(?:\.\d+)?)")


class MealType(StrEnum):
    """Meal slot an entry belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


def coerce_amount(value: object) -> float:
    """Coerce a loosely-typed nutrient amount into a non-negative float."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match is None:
            return 0.0
        value = match.group(1)
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    return datetime.fromisoformat(value.strip())


class FoodLogEntry(BaseModel):
    """A single logged food item."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(min_length=1)
    timestamp: str
    name: str = ""
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    meal_type: MealType = Field(default=MealType.SNACK, alias="mealType")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int | str) and not isinstance(value, bool):
            return str(value).strip()
        return value

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator(
        "calories", "protein", "carbs", "fat", "fiber", "sugar", mode="before"
    )
    @classmethod
    def _coerce_amounts(cls, value: object) -> float:
        return coerce_amount(value)

    @field_validator("meal_type", mode="before")
    @classmethod
    def _coerce_meal_type(cls, value: object) -> MealType:
        if isinstance(value, str):
            try:
                return MealType(value.strip().lower())
            except ValueError:
                pass
        return MealType.SNACK

    @field_validator("timestamp")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        cleaned = value.strip()
        parse_timestamp(cleaned)
        return cleaned

    @property
    def log_date(self) -> str:
        """Return the YYYY-MM-DD partition key for this entry."""
        return parse_timestamp(self.timestamp).date().isoformat()

    def to_record(self) -> dict[str, object]:
        """Return the JSON-ready record used for persistence."""
        return self.model_dump(mode="json", by_alias=True)
