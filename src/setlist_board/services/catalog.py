"""Song catalog lookups used by the board UI."""

import logging
import time
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from setlist_board.domain.catalog import DEFAULT_SONGS
from setlist_board.domain.errors import UnsupportedOperationError

_logger = logging.getLogger(__name__)


class SongCatalog(Protocol):
    """Read-only source of song names."""

    async def list_songs(self) -> list[str]:
        """Return every song name in the catalog."""


@runtime_checkable
class SeedableSongCatalog(SongCatalog, Protocol):
    """Song catalog that can be populated from a list of names."""

    async def seed_songs(self, names: list[str]) -> int:
        """Store the given song names and return how many were written."""


@dataclass
class StaticSongCatalog(SongCatalog):
    """Catalog backed by a fixed list of names."""

    songs: tuple[str, ...] = DEFAULT_SONGS

    async def list_songs(self) -> list[str]:
        """Return the configured song names."""
        return list(self.songs)


@dataclass
class SongCatalogService:
    """Caches catalog reads and normalizes the returned names."""

    catalog: SongCatalog
    ttl_seconds: int = 300
    _cached: list[str] | None = field(default=None, init=False)
    _expires_at: float = field(default=0.0, init=False)

    async def list_songs(self) -> list[str]:
        """Return unique song names sorted case-insensitively."""
        now = time.monotonic()
        if self._cached is not None and now < self._expires_at:
            return list(self._cached)
        songs = normalize_song_names(await self.catalog.list_songs())
        self._cached = songs
        self._expires_at = now + self.ttl_seconds
        _logger.info("Loaded %s songs into the catalog cache", len(songs))
        return list(songs)

    def invalidate(self) -> None:
        """Drop the cached song list."""
        self._cached = None
        self._expires_at = 0.0

    async def seed_defaults(self) -> int:
        """Seed the default song list when the catalog supports it."""
        if not isinstance(self.catalog, SeedableSongCatalog):
            raise UnsupportedOperationError("Song catalog does not support seeding")
        count = await self.catalog.seed_songs(list(DEFAULT_SONGS))
        self.invalidate()
        return count


def normalize_song_names(names: list[str]) -> list[str]:
    """Trim, drop blanks and duplicates, and sort case-insensitively."""
    unique: dict[str, str] = {}
    for raw in names:
        name = str(raw).strip()
        if name and name.casefold() not in unique:
            unique[name.casefold()] = name
    return sorted(unique.values(), key=lambda name: (name.casefold(), name))


def song_slug(name: str) -> str:
    """Build the catalog document id for a song name."""
    lowered = "-".join(name.strip().lower().split())
    return "".join(
        char for char in lowered if char.isascii() and (char.isalnum() or char == "-")
    )
