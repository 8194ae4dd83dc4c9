"""Tests for container wiring."""

import asyncio
from pathlib import Path

import pytest

from nutritrack.adapters.file_blob_store import FileBlobStore
from nutritrack.config import Settings, resolve_storage_backend
from nutritrack.containers import build_blob_store, build_container
from nutritrack.services.storage import InMemoryBlobStore, PrefixedBlobStore


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert isinstance(container.store, InMemoryBlobStore)
    assert container.food_log_service.store is container.store
    assert container.analysis_service is not None
    asyncio.run(container.close_resources())


def test_build_container_without_openai_key_has_no_analysis() -> None:
    container = build_container(Settings(storage_backend="memory", openai_api_key=None))

    assert container.analysis_service is None
    asyncio.run(container.close_resources())


def test_build_blob_store_file_backend_with_prefix(tmp_path: Path) -> None:
    store = build_blob_store(
        Settings(
            storage_backend="file",
            storage_dir=tmp_path,
            storage_key_prefix="nutritrack_",
        )
    )

    assert isinstance(store, PrefixedBlobStore)
    assert isinstance(store.store, FileBlobStore)


def test_supabase_backend_requires_credentials() -> None:
    with pytest.raises(ValueError, match="Supabase"):
        build_blob_store(
            Settings(
                storage_backend="supabase",
                supabase_url=None,
                supabase_service_key=None,
            )
        )


def test_resolve_storage_backend() -> None:
    assert resolve_storage_backend(" Memory ") == "memory"
    with pytest.raises(ValueError, match="Unknown storage backend"):
        resolve_storage_backend("redis")
