"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutritrack.adapters.file_blob_store import FileBlobStore
from nutritrack.adapters.openai_analysis_client import OpenAIAnalysisClient
from nutritrack.adapters.supabase_blob_store import SupabaseBlobStore
from nutritrack.config import Settings, resolve_storage_backend
from nutritrack.services.aggregator import DailySummaryService
from nutritrack.services.analysis import NutritionAnalysisService
from nutritrack.services.food_log import FoodLogService
from nutritrack.services.profiles import ProfileService
from nutritrack.services.storage import BlobStore, InMemoryBlobStore, PrefixedBlobStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: BlobStore
    food_log_service: FoodLogService
    profile_service: ProfileService
    summary_service: DailySummaryService
    analysis_service: NutritionAnalysisService | None
    close_resources: Callable[[], Awaitable[None]]


def build_blob_store(settings: Settings) -> BlobStore:
    """Create the blob store selected by settings."""
    backend = resolve_storage_backend(settings.storage_backend)
    store: BlobStore
    if backend == "memory":
        store = InMemoryBlobStore()
    elif backend == "file":
        store = FileBlobStore(settings.storage_dir)
    else:
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage needs supabase_url and service key")
        store = SupabaseBlobStore(
            create_client(settings.supabase_url, settings.supabase_service_key),
            table=settings.supabase_table,
        )
    if settings.storage_key_prefix:
        return PrefixedBlobStore(store, settings.storage_key_prefix)
    return store


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = build_blob_store(resolved_settings)
    food_log_service = FoodLogService(store)
    profile_service = ProfileService(store)
    summary_service = DailySummaryService(
        food_log=food_log_service,
        profiles=profile_service,
    )

    openai_client: OpenAIAnalysisClient | None = None
    analysis_service: NutritionAnalysisService | None = None
    if resolved_settings.openai_api_key:
        openai_client = OpenAIAnalysisClient.create(resolved_settings.openai_api_key)
        analysis_service = NutritionAnalysisService(
            client=openai_client,
            model=resolved_settings.openai_model,
        )

    async def close_resources() -> None:
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        food_log_service=food_log_service,
        profile_service=profile_service,
        summary_service=summary_service,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
