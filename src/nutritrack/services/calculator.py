"""Metabolic and nutrition calculations.

Every function here is pure and total: invalid input (missing, non-numeric,
non-finite or non-positive values) yields ``0`` or a zeroed structure and a
warning on this module's logger, never an exception.
"""

import logging
import math
from dataclasses import dataclass

from nutritrack.domain.profile import (
    ActivityLevel,
    BMICategory,
    FitnessGoal,
    Gender,
    MacroGoals,
    ProfileMetrics,
    UserProfile,
)

_logger = logging.getLogger(__name__)

KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_CARBS = 4
KCAL_PER_GRAM_FAT = 9

MALE_BMR_OFFSET = 5
FEMALE_BMR_OFFSET = -161

ACTIVITY_FACTORS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

MIN_CALORIE_GOAL = 1200
LOSE_FACTOR = 0.8
GAIN_FACTOR = 1.1
MAX_SURPLUS = 1000

FAT_FLOOR_G_PER_KG = 0.6

DEFAULT_WEIGHT_KG = 70
DEFAULT_HEIGHT_CM = 170
KCAL_PER_STEP_AT_DEFAULT_WEIGHT = 0.04
STRIDE_HEIGHT_RATIO = 0.42

WATER_L_PER_KG = 0.033
WATER_ACTIVITY_STEP = 0.1
MIN_WATER_ACTIVITY = 1
MAX_WATER_ACTIVITY = 5

UNDERWEIGHT_BMI = 18.5
OVERWEIGHT_BMI = 25
OBESE_BMI = 30


@dataclass(frozen=True)
class _MacroSplit:
    protein_g_per_kg: float
    fat_fraction: float


_MACRO_SPLITS: dict[FitnessGoal, _MacroSplit] = {
    FitnessGoal.LOSE: _MacroSplit(protein_g_per_kg=2.2, fat_fraction=0.30),
    FitnessGoal.MAINTAIN: _MacroSplit(protein_g_per_kg=1.8, fat_fraction=0.30),
    FitnessGoal.GAIN: _MacroSplit(protein_g_per_kg=2.0, fat_fraction=0.25),
}


def calculate_bmi(weight_kg: float | None, height_cm: float | None) -> float:
    """Return body mass index rounded to one decimal."""
    weight = _positive(weight_kg)
    height = _positive(height_cm)
    if weight is None or height is None:
        _logger.warning(
            "BMI needs positive weight and height: weight_kg=%r height_cm=%r",
            weight_kg,
            height_cm,
        )
        return 0
    height_m = height / 100
    return round(weight / (height_m * height_m), 1)


def get_bmi_category(bmi: float) -> BMICategory:
    """Return the coarse band a BMI value falls in."""
    if bmi < UNDERWEIGHT_BMI:
        return BMICategory.UNDERWEIGHT
    if bmi < OVERWEIGHT_BMI:
        return BMICategory.HEALTHY
    if bmi < OBESE_BMI:
        return BMICategory.OVERWEIGHT
    return BMICategory.OBESE


def calculate_bmr(
    weight_kg: float | None,
    height_cm: float | None,
    age: int | None,
    gender: Gender | str | None,
) -> int:
    """Return basal metabolic rate using the Mifflin-St Jeor equation.

    Users who select ``other`` (or an unrecognised value) get the female
    offset, the lower of the two estimates.
    """
    weight = _positive(weight_kg)
    height = _positive(height_cm)
    years = _positive(age)
    if weight is None or height is None or years is None:
        _logger.warning(
            "BMR needs positive weight, height and age: "
            "weight_kg=%r height_cm=%r age=%r",
            weight_kg,
            height_cm,
            age,
        )
        return 0
    bmr = 10 * weight + 6.25 * height - 5 * years
    resolved = _resolve_gender(gender)
    if resolved is Gender.MALE:
        bmr += MALE_BMR_OFFSET
    else:
        if resolved is not Gender.FEMALE:
            _logger.debug("BMR using female offset for gender=%r", gender)
        bmr += FEMALE_BMR_OFFSET
    return max(0, round(bmr))


def calculate_tdee(
    bmr: float | None, activity_level: ActivityLevel | str | None
) -> int:
    """Return total daily energy expenditure for a BMR and activity level."""
    base = _positive(bmr)
    if base is None:
        _logger.warning("TDEE needs a positive BMR: bmr=%r", bmr)
        return 0
    level = _resolve_activity_level(activity_level)
    if level is None:
        _logger.warning(
            "Unknown activity level %r, falling back to sedentary", activity_level
        )
        level = ActivityLevel.SEDENTARY
    return round(base * ACTIVITY_FACTORS[level])


def calculate_calorie_goal(
    tdee: float | None, fitness_goal: FitnessGoal | str | None
) -> int:
    """Return the daily calorie goal for a TDEE and fitness goal."""
    base = _positive(tdee)
    if base is None:
        _logger.warning("Calorie goal needs a positive TDEE: tdee=%r", tdee)
        return 0
    goal = _resolve_fitness_goal(fitness_goal)
    if goal is FitnessGoal.LOSE:
        return max(MIN_CALORIE_GOAL, round(base * LOSE_FACTOR))
    if goal is FitnessGoal.GAIN:
        return min(round(base * GAIN_FACTOR), round(base) + MAX_SURPLUS)
    if goal is None:
        _logger.warning("Unknown fitness goal %r, keeping maintenance", fitness_goal)
    return round(base)


def calculate_macro_goals(
    calorie_goal: float | None,
    fitness_goal: FitnessGoal | str | None,
    weight_kg: float | None,
) -> MacroGoals:
    """Split a calorie goal into protein, carbs and fat grams.

    Protein and fat are whole grams sized from body weight and goal, each
    clipped so it fits in what is left of the budget; carbs take the rest.
    ``4p + 4c + 9f`` therefore stays within 2 kcal of ``calorie_goal``.
    """
    budget = _positive(calorie_goal)
    weight = _positive(weight_kg)
    if budget is None or weight is None:
        _logger.warning(
            "Macro goals need positive calories and weight: "
            "calorie_goal=%r weight_kg=%r",
            calorie_goal,
            weight_kg,
        )
        return MacroGoals()
    goal = _resolve_fitness_goal(fitness_goal)
    if goal is None:
        _logger.warning(
            "Unknown fitness goal %r, using maintenance split", fitness_goal
        )
        goal = FitnessGoal.MAINTAIN
    split = _MACRO_SPLITS[goal]

    protein = min(
        round(weight * split.protein_g_per_kg),
        math.floor(budget / KCAL_PER_GRAM_PROTEIN),
    )
    after_protein = budget - protein * KCAL_PER_GRAM_PROTEIN
    fat_target = max(
        weight * FAT_FLOOR_G_PER_KG, budget * split.fat_fraction / KCAL_PER_GRAM_FAT
    )
    fat = min(round(fat_target), math.floor(after_protein / KCAL_PER_GRAM_FAT))
    remaining = after_protein - fat * KCAL_PER_GRAM_FAT
    carbs = max(0, round(remaining / KCAL_PER_GRAM_CARBS))
    return MacroGoals(protein=protein, carbs=carbs, fat=fat)


def calculate_calories_burned(
    steps: int | None, weight_kg: float | None = DEFAULT_WEIGHT_KG
) -> int:
    """Estimate calories burned walking a number of steps."""
    count = _positive(steps)
    weight = _positive(weight_kg)
    if count is None or weight is None:
        _logger.warning(
            "Calories burned needs positive steps and weight: steps=%r weight_kg=%r",
            steps,
            weight_kg,
        )
        return 0
    per_step = KCAL_PER_STEP_AT_DEFAULT_WEIGHT * (weight / DEFAULT_WEIGHT_KG)
    return round(count * per_step)


def steps_to_distance(
    steps: int | None, height_cm: float | None = DEFAULT_HEIGHT_CM
) -> float:
    """Convert steps to kilometres using a height-based stride length."""
    count = _positive(steps)
    height = _positive(height_cm)
    if count is None or height is None:
        _logger.warning(
            "Distance needs positive steps and height: steps=%r height_cm=%r",
            steps,
            height_cm,
        )
        return 0
    stride_m = height * STRIDE_HEIGHT_RATIO / 100
    return round(count * stride_m / 1000, 2)


def calculate_water_intake(
    weight_kg: float | None, activity_level: int | ActivityLevel | None = 1
) -> float:
    """Return recommended daily water intake in litres.

    ``activity_level`` is 1 (sedentary) to 5 (very active); an
    ``ActivityLevel`` maps onto the same scale.
    """
    weight = _positive(weight_kg)
    if weight is None:
        _logger.warning("Water intake needs a positive weight: weight_kg=%r", weight_kg)
        return 0
    level = _water_activity_step(activity_level)
    multiplier = 1 + WATER_ACTIVITY_STEP * (level - MIN_WATER_ACTIVITY)
    return round(weight * WATER_L_PER_KG * multiplier, 2)


def calculate_profile_metrics(profile: UserProfile) -> ProfileMetrics:
    """Derive BMI, BMR, TDEE and goals for a profile."""
    bmi = calculate_bmi(profile.weight_kg, profile.height_cm)
    bmr = calculate_bmr(
        profile.weight_kg, profile.height_cm, profile.age, profile.gender
    )
    tdee = calculate_tdee(bmr, profile.activity_level)
    calorie_goal = calculate_calorie_goal(tdee, profile.fitness_goal)
    macro_goals = calculate_macro_goals(
        calorie_goal, profile.fitness_goal, profile.weight_kg
    )
    return ProfileMetrics(
        bmi=bmi,
        bmi_category=get_bmi_category(bmi) if bmi else None,
        bmr=bmr,
        tdee=tdee,
        calorie_goal=calorie_goal,
        macro_goals=macro_goals,
    )


def _positive(value: object) -> float | None:
    """Return value as a positive finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def _resolve_gender(value: Gender | str | None) -> Gender | None:
    if isinstance(value, Gender):
        return value
    if isinstance(value, str):
        try:
            return Gender(value.strip().lower())
        except ValueError:
            return None
    return None


def _resolve_activity_level(value: ActivityLevel | str | None) -> ActivityLevel | None:
    if isinstance(value, ActivityLevel):
        return value
    if not isinstance(value, str):
        return None
    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    if key == "veryactive":
        key = ActivityLevel.VERY_ACTIVE.value
    try:
        return ActivityLevel(key)
    except ValueError:
        return None


def _resolve_fitness_goal(value: FitnessGoal | str | None) -> FitnessGoal | None:
    if isinstance(value, FitnessGoal):
        return value
    if isinstance(value, str):
        try:
            return FitnessGoal(value.strip().lower())
        except ValueError:
            return None
    return None


def _water_activity_step(value: int | ActivityLevel | None) -> int:
    if isinstance(value, ActivityLevel):
        return list(ACTIVITY_FACTORS).index(value) + 1
    number = _positive(value)
    if number is None:
        return MIN_WATER_ACTIVITY
    return min(MAX_WATER_ACTIVITY, max(MIN_WATER_ACTIVITY, round(number)))
