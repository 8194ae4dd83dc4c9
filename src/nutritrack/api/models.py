"""Request models for the HTTP API."""

from pydantic import BaseModel, Field


class TextAnalysisRequest(BaseModel):
    """Free-text food description to analyze."""

    text: str = Field(min_length=1)
    save: bool = False


class ProfileUpdate(BaseModel):
    """Partial profile edit."""

    name: str | None = None
    age: int | None = None
    gender: str | None = None
    weight_kg: float | None = None
    height_cm: float | None = None
    activity_level: str | None = None
    fitness_goal: str | None = None
    dietary_restrictions: set[str] | None = None

    def changes(self) -> dict[str, object]:
        """Return only the fields that were provided."""
        return self.model_dump(exclude_unset=True)
