"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from nutritrack.api.models import ProfileUpdate, TextAnalysisRequest
from nutritrack.app_logging import configure_logging
from nutritrack.containers import AppContainer
from nutritrack.domain.profile import UserProfile
from nutritrack.errors import AnalysisError, StorageError, ValidationError
from nutritrack.services.calculator import (
    calculate_calories_burned,
    steps_to_distance,
)


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ValidationError)
    async def validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.exception_handler(StorageError)
    async def storage_error(_request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Storage unavailable"},
        )

    @app.exception_handler(AnalysisError)
    async def analysis_error(_request: Request, exc: AnalysisError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        """Return the stored profile with derived metrics."""
        state_container: AppContainer = request.app.state.container
        stored = await state_container.profile_service.get_profile()
        if stored is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return stored.model_dump(mode="json", by_alias=True)

    @app.put("/profile")
    async def put_profile(profile: UserProfile, request: Request) -> dict[str, object]:
        """Create or replace the profile."""
        state_container: AppContainer = request.app.state.container
        stored = await state_container.profile_service.save_profile(profile)
        return stored.model_dump(mode="json", by_alias=True)

    @app.patch("/profile")
    async def patch_profile(
        update: ProfileUpdate, request: Request
    ) -> dict[str, object]:
        """Edit some profile fields and recompute goals."""
        state_container: AppContainer = request.app.state.container
        stored = await state_container.profile_service.update_profile(
            **update.changes()
        )
        return stored.model_dump(mode="json", by_alias=True)

    @app.delete("/profile")
    async def delete_profile(request: Request) -> dict[str, str]:
        """Reset the profile."""
        state_container: AppContainer = request.app.state.container
        await state_container.profile_service.reset_profile()
        return {"status": "ok"}

    @app.delete("/data")
    async def clear_data(request: Request) -> dict[str, object]:
        """Remove the profile and every food log entry."""
        state_container: AppContainer = request.app.state.container
        cleared_days = await state_container.food_log_service.clear()
        await state_container.profile_service.reset_profile()
        return {"status": "ok", "cleared_days": cleared_days}

    @app.get("/profile/goals")
    async def get_goals(request: Request) -> dict[str, object]:
        """Return calorie and macro goals."""
        state_container: AppContainer = request.app.state.container
        goals = await state_container.profile_service.get_goals()
        return asdict(goals)

    @app.post("/food-logs")
    async def save_food_log(
        payload: dict[str, object], request: Request
    ) -> dict[str, object]:
        """Insert or replace a food log entry."""
        state_container: AppContainer = request.app.state.container
        entry = await state_container.food_log_service.save_entry(payload)
        return entry.to_record()

    @app.get("/food-logs")
    async def food_logs_for_range(
        start: str, end: str, request: Request
    ) -> dict[str, list[dict[str, object]]]:
        """Return entries per day for a date range."""
        state_container: AppContainer = request.app.state.container
        by_day = await state_container.food_log_service.get_entries_for_range(
            start, end
        )
        return {
            day: [entry.to_record() for entry in entries]
            for day, entries in by_day.items()
        }

    @app.get("/food-logs/dates")
    async def food_log_dates(request: Request) -> dict[str, list[str]]:
        """Return days that hold at least one entry."""
        state_container: AppContainer = request.app.state.container
        return {"dates": await state_container.food_log_service.get_log_dates()}

    @app.get("/food-logs/{day}")
    async def food_logs_for_date(day: str, request: Request) -> dict[str, object]:
        """Return a day's entries."""
        state_container: AppContainer = request.app.state.container
        entries = await state_container.food_log_service.get_entries_for_date(day)
        return {"date": day, "entries": [entry.to_record() for entry in entries]}

    @app.delete("/food-logs/entries/{entry_id}")
    async def delete_food_log(entry_id: str, request: Request) -> dict[str, bool]:
        """Delete an entry by id; unknown ids succeed."""
        state_container: AppContainer = request.app.state.container
        deleted = await state_container.food_log_service.delete_entry(entry_id)
        return {"deleted": deleted}

    @app.get("/summary")
    async def range_summary(
        start: str, end: str, request: Request
    ) -> dict[str, object]:
        """Return per-day aggregates and averages for a range."""
        state_container: AppContainer = request.app.state.container
        summary = await state_container.summary_service.get_range_summary(start, end)
        return asdict(summary)

    @app.get("/summary/{day}")
    async def daily_summary(day: str, request: Request) -> dict[str, object]:
        """Return consumed and remaining figures for a day."""
        state_container: AppContainer = request.app.state.container
        summary = await state_container.summary_service.get_daily_summary(day)
        return asdict(summary)

    @app.post("/analysis/text")
    async def analyze_text(
        body: TextAnalysisRequest, request: Request
    ) -> dict[str, object]:
        """Estimate nutrition for a description, optionally logging it."""
        state_container: AppContainer = request.app.state.container
        if state_container.analysis_service is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Nutrition analysis is not configured",
            )
        entry = await state_container.analysis_service.analyze_text(body.text)
        if body.save:
            entry = await state_container.food_log_service.save_entry(entry)
        return entry.to_record()

    @app.get("/calculator/activity")
    async def activity(
        steps: int, weight_kg: float = 70, height_cm: float = 170
    ) -> dict[str, float]:
        """Return calories burned and distance for a step count."""
        return {
            "calories_burned": calculate_calories_burned(steps, weight_kg),
            "distance_km": steps_to_distance(steps, height_cm),
        }

    return app
