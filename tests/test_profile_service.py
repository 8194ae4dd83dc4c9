"""Tests for profile persistence."""

import asyncio
import json

import pytest

from nutritrack.domain.profile import FitnessGoal
from nutritrack.errors import ValidationError
from nutritrack.services.profiles import PROFILE_KEY, ProfileService
from nutritrack.services.storage import InMemoryBlobStore
from tests.conftest import make_profile


def test_save_profile_persists_metrics() -> None:
    store = InMemoryBlobStore()
    service = ProfileService(store)

    stored = asyncio.run(service.save_profile(make_profile()))

    assert stored.metrics.calorie_goal == 2556
    persisted = json.loads(store.values[PROFILE_KEY])
    assert persisted["profile"]["weightKg"] == 70
    assert persisted["metrics"]["calorieGoal"] == 2556
    fetched = asyncio.run(service.get_profile())
    assert fetched == stored


def test_update_profile_recomputes_goals() -> None:
    service = ProfileService(InMemoryBlobStore())

    async def scenario() -> None:
        await service.save_profile(make_profile())
        updated = await service.update_profile(fitness_goal="lose", weight_kg=80)
        assert updated.profile.fitness_goal is FitnessGoal.LOSE
        assert updated.profile.weight_kg == 80
        assert updated.metrics.calorie_goal < updated.metrics.tdee
        goals = await service.get_goals()
        assert goals.calorie_goal == updated.metrics.calorie_goal
        assert goals.protein == updated.metrics.macro_goals.protein

    asyncio.run(scenario())


def test_update_profile_rejects_invalid_values() -> None:
    service = ProfileService(InMemoryBlobStore())

    asyncio.run(service.save_profile(make_profile()))

    with pytest.raises(ValidationError):
        asyncio.run(service.update_profile(age=-3))


def test_update_without_profile_fails() -> None:
    service = ProfileService(InMemoryBlobStore())

    with pytest.raises(ValidationError):
        asyncio.run(service.update_profile(age=31))


def test_reset_and_corrupt_profile_read_as_missing() -> None:
    store = InMemoryBlobStore()
    service = ProfileService(store)

    asyncio.run(service.save_profile(make_profile()))
    asyncio.run(service.reset_profile())
    assert asyncio.run(service.get_profile()) is None

    store.values[PROFILE_KEY] = json.dumps({"profile": {"age": "old"}})
    assert asyncio.run(service.get_profile()) is None
    assert asyncio.run(service.get_goals()).calorie_goal == 0
