"""Supabase-backed relational storage for session boards."""

from dataclasses import dataclass

from supabase import Client

from setlist_board.domain.catalog import SlotCatalog
from setlist_board.domain.sessions import SessionSnapshot
from setlist_board.services.storage import StoragePort, run_blocking, validate_pick

_SESSIONS = "sessions"
_SESSION_USERS = "session_users"
_USER_PICKS = "user_picks"


@dataclass
class SupabaseStorage(StoragePort):
    """Relational backend using the sessions, session_users and user_picks tables.

    Idempotent inserts rely on ``ON CONFLICT DO NOTHING`` upserts and owner
    assignment is a conditional update on ``owner IS NULL`` so that the
    database, not this process, decides the winner of concurrent joins.
    """

    client: Client
    catalog: SlotCatalog
    timeout_seconds: float = 5.0

    async def ensure_session(self, session_id: str) -> None:
        """Insert the session row if absent."""
        await run_blocking(
            lambda: self.client.table(_SESSIONS)
            .upsert({"id": session_id}, on_conflict="id", ignore_duplicates=True)
            .execute(),
            action="ensure_session",
            timeout_seconds=self.timeout_seconds,
        )

    async def ensure_participant(self, session_id: str, name: str) -> None:
        """Insert the membership row if absent."""
        await run_blocking(
            lambda: self.client.table(_SESSION_USERS)
            .upsert(
                {"session_id": session_id, "username": name},
                on_conflict="session_id,username",
                ignore_duplicates=True,
            )
            .execute(),
            action="ensure_participant",
            timeout_seconds=self.timeout_seconds,
        )

    async def assign_owner_if_absent(self, session_id: str, name: str) -> None:
        """Set the owner with a compare-and-set on a null owner."""
        await self.ensure_session(session_id)
        await run_blocking(
            lambda: self.client.table(_SESSIONS)
            .update({"owner": name})
            .eq("id", session_id)
            .is_("owner", "null")
            .execute(),
            action="assign_owner",
            timeout_seconds=self.timeout_seconds,
        )

    async def upsert_pick(
        self, session_id: str, participant: str, slot: str, value: str
    ) -> None:
        """Insert or overwrite a pick row."""
        validate_pick(self.catalog, slot, value)
        await run_blocking(
            lambda: self.client.table(_USER_PICKS)
            .upsert(
                {
                    "session_id": session_id,
                    "username": participant,
                    "slot": slot,
                    "value": value,
                },
                on_conflict="session_id,username,slot",
            )
            .execute(),
            action="upsert_pick",
            timeout_seconds=self.timeout_seconds,
        )

    async def delete_pick(self, session_id: str, participant: str, slot: str) -> None:
        """Delete a pick row if present."""
        await run_blocking(
            lambda: self.client.table(_USER_PICKS)
            .delete()
            .eq("session_id", session_id)
            .eq("username", participant)
            .eq("slot", slot)
            .execute(),
            action="delete_pick",
            timeout_seconds=self.timeout_seconds,
        )

    async def clear_board(self, session_id: str, participant: str) -> None:
        """Delete all pick rows of one participant."""
        await run_blocking(
            lambda: self.client.table(_USER_PICKS)
            .delete()
            .eq("session_id", session_id)
            .eq("username", participant)
            .execute(),
            action="clear_board",
            timeout_seconds=self.timeout_seconds,
        )

    async def clear_session(self, session_id: str) -> None:
        """Delete all pick rows of the session."""
        await run_blocking(
            lambda: self.client.table(_USER_PICKS)
            .delete()
            .eq("session_id", session_id)
            .execute(),
            action="clear_session",
            timeout_seconds=self.timeout_seconds,
        )

    async def remove_participant(self, session_id: str, participant: str) -> None:
        """Delete a participant's picks, then their membership row."""
        await self.clear_board(session_id, participant)
        await run_blocking(
            lambda: self.client.table(_SESSION_USERS)
            .delete()
            .eq("session_id", session_id)
            .eq("username", participant)
            .execute(),
            action="remove_participant",
            timeout_seconds=self.timeout_seconds,
        )

    async def read_state(self, session_id: str) -> SessionSnapshot:
        """Assemble the snapshot from the three tables."""
        return await run_blocking(
            lambda: self._read_state(session_id),
            action="read_state",
            timeout_seconds=self.timeout_seconds,
        )

    async def ping(self) -> None:
        """Run a trivial query against the sessions table."""
        await run_blocking(
            lambda: self.client.table(_SESSIONS).select("id").limit(1).execute(),
            action="ping",
            timeout_seconds=self.timeout_seconds,
        )

    def _read_state(self, session_id: str) -> SessionSnapshot:
        session_response = (
            self.client.table(_SESSIONS)
            .select("owner")
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        owner = None
        if session_response.data:
            owner = session_response.data[0].get("owner")

        users_response = (
            self.client.table(_SESSION_USERS)
            .select("username")
            .eq("session_id", session_id)
            .execute()
        )
        picks_response = (
            self.client.table(_USER_PICKS)
            .select("username, slot, value")
            .eq("session_id", session_id)
            .execute()
        )
        return SessionSnapshot.build(
            owner=owner,
            participants=[str(row["username"]) for row in users_response.data or []],
            picks=[
                (str(row["username"]), str(row["slot"]), str(row["value"]))
                for row in picks_response.data or []
            ],
            slot_order=self.catalog.slots,
        )
