"""Domain models for user profiles and derived goals."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Gender(StrEnum):
    """Gender options collected at onboarding."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(StrEnum):
    """Self-reported activity level."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class FitnessGoal(StrEnum):
    """Weight direction the user is aiming for."""

    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


class BMICategory(StrEnum):
    """Coarse BMI bands."""

    UNDERWEIGHT = "underweight"
    HEALTHY = "healthy"
    OVERWEIGHT = "overweight"
    OBESE = "obese"


class MacroGoals(BaseModel):
    """Daily macronutrient targets in grams."""

    model_config = ConfigDict(frozen=True)

    protein: int = 0
    carbs: int = 0
    fat: int = 0


class UserProfile(BaseModel):
    """Profile attributes entered by the user."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    age: int = Field(gt=0)
    gender: Gender
    weight_kg: float = Field(gt=0, alias="weightKg")
    height_cm: float = Field(gt=0, alias="heightCm")
    activity_level: ActivityLevel = Field(
        default=ActivityLevel.SEDENTARY, alias="activityLevel"
    )
    fitness_goal: FitnessGoal = Field(default=FitnessGoal.MAINTAIN, alias="fitnessGoal")
    dietary_restrictions: set[str] = Field(
        default_factory=set, alias="dietaryRestrictions"
    )


class ProfileMetrics(BaseModel):
    """Values derived from a profile by the metabolic calculator."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bmi: float = 0.0
    bmi_category: BMICategory | None = Field(default=None, alias="bmiCategory")
    bmr: int = 0
    tdee: int = 0
    calorie_goal: int = Field(default=0, alias="calorieGoal")
    macro_goals: MacroGoals = Field(default_factory=MacroGoals, alias="macroGoals")


class StoredProfile(BaseModel):
    """Persisted profile with its derived metrics."""

    model_config = ConfigDict(populate_by_name=True)

    profile: UserProfile
    metrics: ProfileMetrics
