"""Domain models for daily aggregation."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NutritionGoals:
    """Daily targets the aggregator compares intake against."""

    calorie_goal: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


@dataclass(frozen=True)
class MacroTotals:
    """Summed nutrients for a set of entries."""

    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0


@dataclass(frozen=True)
class MacroPercentages:
    """Share of macro calories contributed by each macro."""

    protein: int = 0
    carbs: int = 0
    fat: int = 0


@dataclass(frozen=True)
class MacroRemaining:
    """Grams left to reach each macro goal."""

    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


@dataclass(frozen=True)
class DailyAggregate:
    """Consumed and remaining figures for one day."""

    date: str | None
    entry_count: int
    calories_consumed: float
    calorie_goal: float
    calories_remaining: float
    calorie_progress: int
    macro_totals: MacroTotals
    macro_percentage: MacroPercentages
    macros_remaining: MacroRemaining


@dataclass(frozen=True)
class RangeSummary:
    """Aggregates for every logged day in a range plus averages."""

    start_date: str
    end_date: str
    daily: list[DailyAggregate] = field(default_factory=list)
    avg_calories: float = 0.0
    avg_protein: float = 0.0
    avg_carbs: float = 0.0
    avg_fat: float = 0.0
