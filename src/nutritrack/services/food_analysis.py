"""Helpers for interpreting loosely-typed nutrition records."""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from nutritrack.domain.aggregates import MacroPercentages
from nutritrack.domain.food_log import FoodLogEntry, MealType, coerce_amount
from nutritrack.services.aggregator import macro_percentages
from nutritrack.services.calculator import (
    KCAL_PER_GRAM_CARBS,
    KCAL_PER_GRAM_FAT,
    KCAL_PER_GRAM_PROTEIN,
)

_logger = logging.getLogger(__name__)

# Share of calories assumed for each macro when a record lists only calories.
ESTIMATE_PROTEIN_SHARE = 0.25
ESTIMATE_CARBS_SHARE = 0.45
ESTIMATE_FAT_SHARE = 0.30

HIGH_PROTEIN_PERCENT = 40
HIGH_CARB_PERCENT = 60
HIGH_FAT_PERCENT = 40

SMALL_PORTION_KCAL = 150
MEDIUM_PORTION_KCAL = 350
LARGE_PORTION_KCAL = 600

_MEAL_WINDOWS: tuple[tuple[int, int, MealType], ...] = (
    (5, 10, MealType.BREAKFAST),
    (10, 14, MealType.LUNCH),
    (14, 18, MealType.SNACK),
    (18, 22, MealType.DINNER),
)


class FoodClass(StrEnum):
    """Dominant-macro classification of a food."""

    HIGH_PROTEIN = "high-protein"
    HIGH_CARB = "high-carb"
    HIGH_FAT = "high-fat"
    BALANCED = "balanced"


def calories_from_macros(protein: float = 0, carbs: float = 0, fat: float = 0) -> float:
    """Return calories implied by macro grams."""
    return (
        protein * KCAL_PER_GRAM_PROTEIN
        + carbs * KCAL_PER_GRAM_CARBS
        + fat * KCAL_PER_GRAM_FAT
    )


def balanced_macro_percentages(
    protein: float = 0, carbs: float = 0, fat: float = 0
) -> MacroPercentages:
    """Return macro shares adjusted so that non-zero results sum to 100.

    The rounding remainder goes to the largest share.
    """
    shares = macro_percentages(protein, carbs, fat)
    total = shares.protein + shares.carbs + shares.fat
    if total in {0, 100}:
        return shares
    difference = 100 - total
    if shares.protein >= shares.carbs and shares.protein >= shares.fat:
        return MacroPercentages(
            protein=shares.protein + difference, carbs=shares.carbs, fat=shares.fat
        )
    if shares.carbs >= shares.fat:
        return MacroPercentages(
            protein=shares.protein, carbs=shares.carbs + difference, fat=shares.fat
        )
    return MacroPercentages(
        protein=shares.protein, carbs=shares.carbs, fat=shares.fat + difference
    )


def suggest_meal_type(moment: datetime | None = None) -> MealType:
    """Suggest a meal slot from the hour of day."""
    hour = (moment or datetime.now()).hour  # noqa: DTZ005
    for start, end, meal_type in _MEAL_WINDOWS:
        if start <= hour < end:
            return meal_type
    return MealType.SNACK


def classify_food(protein: float = 0, carbs: float = 0, fat: float = 0) -> FoodClass:
    """Classify a food by its dominant macro."""
    shares = balanced_macro_percentages(protein, carbs, fat)
    if shares.protein >= HIGH_PROTEIN_PERCENT:
        return FoodClass.HIGH_PROTEIN
    if shares.carbs >= HIGH_CARB_PERCENT:
        return FoodClass.HIGH_CARB
    if shares.fat >= HIGH_FAT_PERCENT:
        return FoodClass.HIGH_FAT
    return FoodClass.BALANCED


def estimate_portion_size(calories: float) -> str:
    """Describe a portion by its calories."""
    if calories < SMALL_PORTION_KCAL:
        return "small"
    if calories < MEDIUM_PORTION_KCAL:
        return "medium"
    if calories < LARGE_PORTION_KCAL:
        return "large"
    return "extra large"


def normalize_food_record(
    record: Mapping[str, object], now: datetime | None = None
) -> FoodLogEntry:
    """Turn a provider or manual record into a complete FoodLogEntry.

    Macros absent from the record are estimated from calories, and absent
    or zero calories are derived from macros. Explicit zeros are kept. Id,
    timestamp and meal type are filled in when absent.
    """
    moment = now or datetime.now(tz=UTC)
    calories = coerce_amount(record.get("calories"))
    protein = coerce_amount(record.get("protein"))
    carbs = coerce_amount(record.get("carbs"))
    fat = coerce_amount(record.get("fat"))
    absent = {name for name in ("protein", "carbs", "fat") if record.get(name) is None}

    if calories and absent:
        if "protein" in absent:
            protein = round(calories * ESTIMATE_PROTEIN_SHARE / KCAL_PER_GRAM_PROTEIN)
        if "carbs" in absent:
            carbs = round(calories * ESTIMATE_CARBS_SHARE / KCAL_PER_GRAM_CARBS)
        if "fat" in absent:
            fat = round(calories * ESTIMATE_FAT_SHARE / KCAL_PER_GRAM_FAT)
        _logger.debug("Estimated missing macros from %s kcal", calories)
    elif not calories and (protein or carbs or fat):
        calories = calories_from_macros(protein, carbs, fat)

    meal_type = record.get("mealType") or record.get("meal_type")
    if not meal_type:
        meal_type = suggest_meal_type(moment)

    return FoodLogEntry.model_validate(
        {
            "id": record.get("id") or uuid4().hex,
            "timestamp": record.get("timestamp") or moment.isoformat(),
            "name": record.get("name") or "Unknown food",
            "calories": calories,
            "protein": protein,
            "carbs": carbs,
            "fat": fat,
            "fiber": record.get("fiber"),
            "sugar": record.get("sugar"),
            "mealType": meal_type,
        }
    )
