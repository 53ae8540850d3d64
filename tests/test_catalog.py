"""Tests for slot and song catalogs."""

import asyncio
from dataclasses import dataclass, field

import pytest

from setlist_board.adapters.supabase_song_catalog import SupabaseSongCatalog
from setlist_board.domain.catalog import DEFAULT_SLOTS, DEFAULT_SONGS, SlotCatalog
from setlist_board.domain.errors import UnsupportedOperationError
from setlist_board.services.catalog import (
    SongCatalog,
    SongCatalogService,
    StaticSongCatalog,
    normalize_song_names,
    song_slug,
)
from tests.conftest import FakeSupabaseClient


@dataclass
class CountingCatalog(SongCatalog):
    songs: list[str] = field(default_factory=lambda: ["b", "A", " a ", "", "C"])
    calls: int = 0

    async def list_songs(self) -> list[str]:
        self.calls += 1
        return list(self.songs)


def test_slot_catalog_accepts_only_configured_slots() -> None:
    catalog = SlotCatalog()

    assert catalog.slots == DEFAULT_SLOTS
    assert catalog.is_valid_slot("Opener")
    assert catalog.is_valid_slot("Encore")
    assert not catalog.is_valid_slot("opener")
    assert not catalog.is_valid_slot("Song 9")
    assert not catalog.is_valid_slot(None)


def test_slot_catalog_from_names_dedupes_and_falls_back() -> None:
    catalog = SlotCatalog.from_names(" Opener, Closer ,,Opener ")

    assert catalog.slots == ("Opener", "Closer")
    assert catalog.position("Closer") == 1
    assert catalog.position("Missing") == 2
    assert SlotCatalog.from_names(None).slots == DEFAULT_SLOTS
    assert SlotCatalog.from_names(" , ").slots == DEFAULT_SLOTS


def test_normalize_song_names_dedupes_case_insensitively() -> None:
    assert normalize_song_names(["b", "A", " a ", "", "C"]) == ["A", "b", "C"]


def test_song_slug_matches_document_ids() -> None:
    assert song_slug("Funk E Zekial") == "funk-e-zekial"
    assert song_slug("Somethin' for Ya") == "somethin-for-ya"
    assert song_slug("Where Are We Going?") == "where-are-we-going"


def test_song_catalog_service_caches_until_invalidated() -> None:
    source = CountingCatalog()
    service = SongCatalogService(catalog=source, ttl_seconds=60)

    first = asyncio.run(service.list_songs())
    second = asyncio.run(service.list_songs())
    service.invalidate()
    asyncio.run(service.list_songs())

    assert first == ["A", "b", "C"]
    assert second == first
    assert source.calls == 2


def test_static_catalog_cannot_be_seeded() -> None:
    service = SongCatalogService(catalog=StaticSongCatalog())

    songs = asyncio.run(service.list_songs())

    assert "Horizon" in songs
    with pytest.raises(UnsupportedOperationError, match="does not support seeding"):
        asyncio.run(service.seed_defaults())


def test_supabase_song_catalog_seeds_and_lists() -> None:
    client = FakeSupabaseClient()
    catalog = SupabaseSongCatalog(client=client)
    service = SongCatalogService(catalog=catalog)

    count = asyncio.run(service.seed_defaults())
    asyncio.run(catalog.seed_songs(["Horizon", "  "]))
    songs = asyncio.run(service.list_songs())

    assert count == len(DEFAULT_SONGS)
    assert len(client.rows["songs"]) == len(DEFAULT_SONGS)
    assert {"id": "horizon", "name": "Horizon"}.items() <= next(
        row for row in client.rows["songs"] if row["id"] == "horizon"
    ).items()
    assert songs == normalize_song_names(list(DEFAULT_SONGS))
    assert client.calls.count(("songs", "upsert")) == 2
