"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from nutritrack.config import Settings
from nutritrack.containers import AppContainer
from nutritrack.domain.profile import (
    ActivityLevel,
    FitnessGoal,
    Gender,
    UserProfile,
)
from nutritrack.errors import StorageError
from nutritrack.services.aggregator import DailySummaryService
from nutritrack.services.analysis import AnalysisClient, NutritionAnalysisService
from nutritrack.services.food_log import FoodLogService
from nutritrack.services.profiles import ProfileService
from nutritrack.services.storage import BlobStore, InMemoryBlobStore


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake analysis client returning a fixed payload."""

    payload: object = field(
        default_factory=lambda: {
            "name": "Grilled Chicken Salad",
            "calories": 350,
            "protein": 30,
            "carbs": 15,
            "fat": 18,
            "fiber": 5,
            "sugar": "3g",
            "mealType": "lunch",
            "healthScore": 8,
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)

    async def analyze(
        self,
        *,
        model: str,
        system_prompt: str,
        text: str | None = None,
        image_data_url: str | None = None,
    ) -> object:
        self.calls.append(
            {"model": model, "text": text, "image_data_url": image_data_url}
        )
        return self.payload


@dataclass
class FailingAnalysisClient(AnalysisClient):
    """Analysis client whose provider call always fails."""

    async def analyze(
        self,
        *,
        model: str,
        system_prompt: str,
        text: str | None = None,
        image_data_url: str | None = None,
    ) -> object:
        raise TimeoutError("provider timed out")


@dataclass
class FailingBlobStore(BlobStore):
    """Blob store that fails every write."""

    inner: InMemoryBlobStore = field(default_factory=InMemoryBlobStore)

    async def get(self, key: str) -> str | None:
        return await self.inner.get(key)

    async def set(self, key: str, value: str) -> None:
        raise StorageError(f"disk full writing {key}")

    async def remove(self, key: str) -> None:
        raise StorageError(f"disk full removing {key}")


def make_profile(**overrides: object) -> UserProfile:
    values: dict[str, object] = {
        "name": "Sam",
        "age": 30,
        "gender": Gender.MALE,
        "weight_kg": 70,
        "height_cm": 175,
        "activity_level": ActivityLevel.MODERATE,
        "fitness_goal": FitnessGoal.MAINTAIN,
    }
    values.update(overrides)
    return UserProfile.model_validate(values)


def make_entry(entry_id: str, timestamp: str, **fields: object) -> dict[str, object]:
    return {"id": entry_id, "timestamp": timestamp, "name": entry_id, **fields}


@pytest.fixture
def settings() -> Settings:
    return Settings(storage_backend="memory", openai_api_key="openai-key")


@pytest.fixture
def store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryBlobStore,
    analysis_client: FakeAnalysisClient,
) -> AppContainer:
    food_log_service = FoodLogService(store)
    profile_service = ProfileService(store)
    summary_service = DailySummaryService(
        food_log=food_log_service,
        profiles=profile_service,
    )
    analysis_service = NutritionAnalysisService(
        client=analysis_client,
        model=settings.openai_model,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        food_log_service=food_log_service,
        profile_service=profile_service,
        summary_service=summary_service,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
