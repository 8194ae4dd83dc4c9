"""Daily intake aggregation against goals."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from nutritrack.domain.aggregates import (
    DailyAggregate,
    MacroPercentages,
    MacroRemaining,
    MacroTotals,
    NutritionGoals,
    RangeSummary,
)
from nutritrack.domain.food_log import FoodLogEntry, coerce_amount
from nutritrack.services.calculator import (
    KCAL_PER_GRAM_CARBS,
    KCAL_PER_GRAM_FAT,
    KCAL_PER_GRAM_PROTEIN,
)
from nutritrack.services.food_log import FoodLogService
from nutritrack.services.profiles import ProfileService

_logger = logging.getLogger(__name__)


def aggregate(
    entries: Iterable[FoodLogEntry],
    goals: NutritionGoals,
    day: str | None = None,
) -> DailyAggregate:
    """Fold a day's entries into consumed, remaining and percentage figures."""
    count = 0
    calories = protein = carbs = fat = fiber = sugar = 0.0
    for entry in entries:
        count += 1
        calories += entry.calories
        protein += entry.protein
        carbs += entry.carbs
        fat += entry.fat
        fiber += entry.fiber
        sugar += entry.sugar

    calorie_goal = coerce_amount(goals.calorie_goal)
    return DailyAggregate(
        date=day,
        entry_count=count,
        calories_consumed=calories,
        calorie_goal=calorie_goal,
        calories_remaining=max(0.0, calorie_goal - calories),
        calorie_progress=_progress(calories, calorie_goal),
        macro_totals=MacroTotals(
            protein=protein, carbs=carbs, fat=fat, fiber=fiber, sugar=sugar
        ),
        macro_percentage=macro_percentages(protein, carbs, fat),
        macros_remaining=MacroRemaining(
            protein=max(0.0, coerce_amount(goals.protein) - protein),
            carbs=max(0.0, coerce_amount(goals.carbs) - carbs),
            fat=max(0.0, coerce_amount(goals.fat) - fat),
        ),
    )


def macro_percentages(protein: float, carbs: float, fat: float) -> MacroPercentages:
    """Return each macro's rounded share of total macro calories."""
    protein_kcal = protein * KCAL_PER_GRAM_PROTEIN
    carbs_kcal = carbs * KCAL_PER_GRAM_CARBS
    fat_kcal = fat * KCAL_PER_GRAM_FAT
    total = protein_kcal + carbs_kcal + fat_kcal
    if total <= 0:
        return MacroPercentages()
    return MacroPercentages(
        protein=round(protein_kcal / total * 100),
        carbs=round(carbs_kcal / total * 100),
        fat=round(fat_kcal / total * 100),
    )


def _progress(consumed: float, goal: float) -> int:
    if goal <= 0:
        return 0
    return min(100, round(consumed / goal * 100))


@dataclass
class DailySummaryService:
    """Combines stored entries with the stored profile's goals."""

    food_log: FoodLogService
    profiles: ProfileService

    async def get_daily_summary(self, day: str | date) -> DailyAggregate:
        """Return the aggregate for a single day."""
        key = day.isoformat() if isinstance(day, date) else day
        goals = await self.profiles.get_goals()
        entries = await self.food_log.get_entries_for_date(key)
        return aggregate(entries, goals, day=key)

    async def get_range_summary(
        self, start_date: str | date, end_date: str | date
    ) -> RangeSummary:
        """Return aggregates for logged days in a range and their averages."""
        start = start_date.isoformat() if isinstance(start_date, date) else start_date
        end = end_date.isoformat() if isinstance(end_date, date) else end_date
        goals = await self.profiles.get_goals()
        by_day = await self.food_log.get_entries_for_range(start, end)
        daily = [aggregate(entries, goals, day=key) for key, entries in by_day.items()]
        if not daily:
            return RangeSummary(start_date=start, end_date=end)

        days = len(daily)
        _logger.debug("Range summary %s..%s over %s logged days", start, end, days)
        return RangeSummary(
            start_date=start,
            end_date=end,
            daily=daily,
            avg_calories=sum(item.calories_consumed for item in daily) / days,
            avg_protein=sum(item.macro_totals.protein for item in daily) / days,
            avg_carbs=sum(item.macro_totals.carbs for item in daily) / days,
            avg_fat=sum(item.macro_totals.fat for item in daily) / days,
        )
