"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

STORAGE_BACKENDS = frozenset({"memory", "file", "supabase"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_backend: str = "file"
    storage_dir: Path = Path(".nutritrack")
    storage_key_prefix: str = ""
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table: str = "kv_store"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="NUTRITRACK_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_storage_backend(raw: str) -> str:
    """Normalize and validate the configured storage backend name."""
    backend = raw.strip().lower()
    if backend not in STORAGE_BACKENDS:
        allowed = ", ".join(sorted(STORAGE_BACKENDS))
        raise ValueError(f"Unknown storage backend {raw!r}; expected one of {allowed}")
    return backend
