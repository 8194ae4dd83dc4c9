"""Tests for the metabolic calculator."""

import logging

import pytest

from nutritrack.domain.profile import (
    ActivityLevel,
    BMICategory,
    FitnessGoal,
    Gender,
    MacroGoals,
)
from nutritrack.services.calculator import (
    calculate_bmi,
    calculate_bmr,
    calculate_calorie_goal,
    calculate_calories_burned,
    calculate_macro_goals,
    calculate_profile_metrics,
    calculate_tdee,
    calculate_water_intake,
    get_bmi_category,
    steps_to_distance,
)
from tests.conftest import make_profile


@pytest.fixture
def propagate_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(logging.getLogger("nutritrack"), "propagate", True)


def test_calculate_bmi_rounds_to_one_decimal() -> None:
    assert calculate_bmi(70, 175) == 22.9


@pytest.mark.parametrize(
    ("weight", "height"), [(0, 175), (70, 0), (None, 175), (-70, 175), (70, "tall")]
)
def test_calculate_bmi_invalid_input_returns_zero(
    weight: object, height: object
) -> None:
    assert calculate_bmi(weight, height) == 0


def test_bmi_categories() -> None:
    assert get_bmi_category(17.0) is BMICategory.UNDERWEIGHT
    assert get_bmi_category(18.5) is BMICategory.HEALTHY
    assert get_bmi_category(27.3) is BMICategory.OVERWEIGHT
    assert get_bmi_category(30.0) is BMICategory.OBESE


def test_calculate_bmr_by_gender() -> None:
    assert calculate_bmr(70, 175, 30, Gender.MALE) == 1649
    assert calculate_bmr(70, 175, 30, "female") == 1483


def test_calculate_bmr_other_gender_uses_female_offset() -> None:
    assert calculate_bmr(70, 175, 30, Gender.OTHER) == calculate_bmr(
        70, 175, 30, Gender.FEMALE
    )


def test_calculate_bmr_missing_age_warns(
    caplog: pytest.LogCaptureFixture, propagate_logs: None
) -> None:
    with caplog.at_level(logging.WARNING):
        assert calculate_bmr(70, 175, None, Gender.MALE) == 0

    assert "BMR needs positive" in caplog.text


def test_calculate_tdee_uses_activity_factor() -> None:
    assert calculate_tdee(1649, ActivityLevel.MODERATE) == 2556
    assert calculate_tdee(1000, "very_active") == 1900
    assert calculate_tdee(1000, "veryActive") == 1900


def test_calculate_tdee_is_monotonic_in_activity() -> None:
    values = [calculate_tdee(1650, level) for level in ActivityLevel]

    assert values == sorted(values)


def test_calculate_tdee_unknown_level_falls_back_to_sedentary(
    caplog: pytest.LogCaptureFixture, propagate_logs: None
) -> None:
    with caplog.at_level(logging.WARNING):
        assert calculate_tdee(1000, "couch") == 1200

    assert "falling back to sedentary" in caplog.text


def test_calculate_calorie_goal_by_fitness_goal() -> None:
    assert calculate_calorie_goal(2556, FitnessGoal.LOSE) == 2045
    assert calculate_calorie_goal(2556, FitnessGoal.MAINTAIN) == 2556
    assert calculate_calorie_goal(2556, "gain") == 2812
    assert calculate_calorie_goal(2556, "bulk") == 2556


def test_calculate_calorie_goal_floor_and_cap() -> None:
    assert calculate_calorie_goal(1400, FitnessGoal.LOSE) == 1200
    assert calculate_calorie_goal(12000, FitnessGoal.GAIN) == 13000
    assert calculate_calorie_goal(0, FitnessGoal.LOSE) == 0


@pytest.mark.parametrize("calorie_goal", [800, 1200, 1500, 2045, 2556, 3200, 5000])
@pytest.mark.parametrize("fitness_goal", list(FitnessGoal))
@pytest.mark.parametrize("weight_kg", [45, 70, 120, 150])
def test_macro_goals_match_calorie_goal(
    calorie_goal: int, fitness_goal: FitnessGoal, weight_kg: float
) -> None:
    macros = calculate_macro_goals(calorie_goal, fitness_goal, weight_kg)
    total = macros.protein * 4 + macros.carbs * 4 + macros.fat * 9

    assert abs(total - calorie_goal) <= 5
    assert macros.carbs >= 0
    assert macros.fat >= 0


def test_macro_goals_scale_protein_with_weight() -> None:
    macros = calculate_macro_goals(2556, FitnessGoal.MAINTAIN, 70)

    assert macros.protein == 126
    assert macros.fat == 85
    assert macros.carbs == 322


def test_macro_goals_invalid_input_is_zeroed() -> None:
    assert calculate_macro_goals(0, FitnessGoal.LOSE, 70) == MacroGoals()
    assert calculate_macro_goals(2000, FitnessGoal.LOSE, None) == MacroGoals()


def test_steps_helpers() -> None:
    assert calculate_calories_burned(10000) == 400
    assert calculate_calories_burned(10000, 140) == 800
    assert steps_to_distance(10000, 170) == pytest.approx(7.14)
    assert calculate_calories_burned(0) == 0
    assert steps_to_distance(None) == 0


def test_calculate_water_intake() -> None:
    assert calculate_water_intake(70) == pytest.approx(2.31)
    assert calculate_water_intake(70, 5) == pytest.approx(3.23)
    assert calculate_water_intake(70, 9) == calculate_water_intake(70, 5)
    assert calculate_water_intake(70, ActivityLevel.LIGHT) == pytest.approx(2.54)
    assert calculate_water_intake(0) == 0


def test_calculate_profile_metrics_chains_formulas() -> None:
    metrics = calculate_profile_metrics(make_profile())

    assert metrics.bmi == 22.9
    assert metrics.bmi_category is BMICategory.HEALTHY
    assert metrics.bmr == 1649
    assert metrics.tdee == 2556
    assert metrics.calorie_goal == 2556
    assert metrics.macro_goals.protein == 126
