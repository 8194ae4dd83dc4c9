"""User profile persistence and goal derivation."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError

from nutritrack.domain.aggregates import NutritionGoals
from nutritrack.domain.profile import StoredProfile, UserProfile
from nutritrack.errors import ValidationError
from nutritrack.services.calculator import calculate_profile_metrics
from nutritrack.services.storage import BlobStore, load_json, save_json

_logger = logging.getLogger(__name__)

PROFILE_KEY = "profile"


@dataclass
class ProfileService:
    """Service for the single user profile and its derived goals."""

    store: BlobStore

    async def save_profile(self, profile: UserProfile) -> StoredProfile:
        """Recompute metrics for a profile and persist both."""
        metrics = calculate_profile_metrics(profile)
        stored = StoredProfile(profile=profile, metrics=metrics)
        await save_json(
            self.store, PROFILE_KEY, stored.model_dump(mode="json", by_alias=True)
        )
        _logger.info("Saved profile: calorie_goal=%s", metrics.calorie_goal)
        return stored

    async def get_profile(self) -> StoredProfile | None:
        """Return the stored profile, or None when absent or unreadable."""
        raw = await load_json(self.store, PROFILE_KEY)
        if raw is None:
            return None
        try:
            return StoredProfile.model_validate(raw)
        except PydanticValidationError:
            _logger.warning("Stored profile is malformed, ignoring it")
            return None

    async def update_profile(self, **changes: object) -> StoredProfile:
        """Apply field changes to the stored profile and save it."""
        current = await self.get_profile()
        if current is None:
            raise ValidationError("No profile to update")
        merged = current.profile.model_dump(by_alias=False) | changes
        try:
            profile = UserProfile.model_validate(merged)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid profile update: {exc}") from exc
        return await self.save_profile(profile)

    async def reset_profile(self) -> None:
        """Remove the stored profile."""
        await self.store.remove(PROFILE_KEY)
        _logger.info("Profile reset")

    async def get_goals(self) -> NutritionGoals:
        """Return the stored profile's goals, zeroed when there is no profile."""
        stored = await self.get_profile()
        if stored is None:
            return NutritionGoals()
        metrics = stored.metrics
        return NutritionGoals(
            calorie_goal=metrics.calorie_goal,
            protein=metrics.macro_goals.protein,
            carbs=metrics.macro_goals.carbs,
            fat=metrics.macro_goals.fat,
        )
