"""Application configuration."""

import os

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from setlist_board.domain.catalog import SessionListing

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

STORAGE_BACKENDS = {"memory", "supabase", "supabase_documents"}
SONG_SOURCES = {"static", "supabase"}


class PresetSession(BaseModel):
    """Preset session entry loaded from configuration."""

    id: str
    title: str


_DEFAULT_PRESETS = [
    PresetSession(
        id="2025-12-19-port-chester-ny-capitol-1",
        title="Dec 19, 2025 - The Capitol Theatre (Port Chester, NY)",
    ),
    PresetSession(
        id="2025-12-20-port-chester-ny-capitol-2",
        title="Dec 20, 2025 - The Capitol Theatre (Port Chester, NY)",
    ),
    PresetSession(
        id="2025-12-30-denver-co-ogden-1",
        title="Dec 30, 2025 - Ogden Theatre (Denver, CO)",
    ),
    PresetSession(
        id="2025-12-31",
        title="Dec 31, 2025 - Ogden Theatre (Denver, CO)",
    ),
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_backend: str = "memory"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    storage_timeout_seconds: float = 5.0
    admin_token: str | None = None
    slot_names: str | None = None
    song_source: str = "static"
    song_cache_ttl_seconds: int = 300
    preset_sessions: list[PresetSession] = list(_DEFAULT_PRESETS)
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_storage_backend(raw: str) -> str:
    """Normalize and validate the configured storage backend name."""
    cleaned = raw.strip().lower().replace("-", "_")
    if cleaned not in STORAGE_BACKENDS:
        allowed = ", ".join(sorted(STORAGE_BACKENDS))
        raise ValueError(f"Unknown storage backend {raw!r}; expected one of {allowed}")
    return cleaned


def parse_song_source(raw: str) -> str:
    """Normalize and validate the configured song catalog source."""
    cleaned = raw.strip().lower()
    if cleaned not in SONG_SOURCES:
        allowed = ", ".join(sorted(SONG_SOURCES))
        raise ValueError(f"Unknown song source {raw!r}; expected one of {allowed}")
    return cleaned


def preset_listings(settings: Settings) -> list[SessionListing]:
    """Return the preset sessions as domain listings."""
    return [
        SessionListing(id=item.id, title=item.title)
        for item in settings.preset_sessions
    ]
