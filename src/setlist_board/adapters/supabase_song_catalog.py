"""Supabase-backed song catalog."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from setlist_board.services.catalog import SeedableSongCatalog, song_slug
from setlist_board.services.storage import run_blocking

_SONGS = "songs"
_BATCH_SIZE = 400


@dataclass
class SupabaseSongCatalog(SeedableSongCatalog):
    """Reads and seeds the songs table."""

    client: Client
    timeout_seconds: float = 5.0

    async def list_songs(self) -> list[str]:
        """Return every song name stored in the table."""
        response = await run_blocking(
            lambda: self.client.table(_SONGS).select("name").execute(),
            action="list_songs",
            timeout_seconds=self.timeout_seconds,
        )
        return [str(row["name"]) for row in response.data or [] if row.get("name")]

    async def seed_songs(self, names: list[str]) -> int:
        """Upsert song rows keyed by slug in batches."""
        rows: list[dict[str, object]] = []
        created_at = datetime.now(tz=UTC).isoformat()
        for raw in names:
            name = str(raw).strip()
            if not name:
                continue
            rows.append(
                {"id": song_slug(name) or name, "name": name, "created_at": created_at}
            )
        for start in range(0, len(rows), _BATCH_SIZE):
            batch = rows[start : start + _BATCH_SIZE]
            await run_blocking(
                lambda batch=batch: self.client.table(_SONGS)
                .upsert(batch, on_conflict="id")
                .execute(),
                action="seed_songs",
                timeout_seconds=self.timeout_seconds,
            )
        return len(rows)
