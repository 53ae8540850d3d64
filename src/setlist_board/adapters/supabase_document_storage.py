"""Supabase-backed document storage: one JSON document per session."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from supabase import Client

from setlist_board.domain.catalog import SlotCatalog
from setlist_board.domain.errors import StorageError
from setlist_board.domain.sessions import SessionSnapshot
from setlist_board.services.storage import StoragePort, run_blocking, validate_pick

_DOCUMENTS = "session_documents"
_COLUMNS = "id, owner, participants, boards, version"

T = TypeVar("T")


@dataclass
class _Document:
    owner: str | None
    participants: set[str]
    boards: dict[str, dict[str, str]]
    version: int

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "_Document":
        boards = row.get("boards") or {}
        return cls(
            owner=row.get("owner") or None,
            participants={str(name) for name in row.get("participants") or []},
            boards={
                str(name): {str(slot): str(value) for slot, value in board.items()}
                for name, board in boards.items()
            },
            version=int(row.get("version") or 0),
        )


@dataclass
class SupabaseDocumentStorage(StoragePort):
    """Document backend storing each session as a single versioned row.

    Writes are read-modify-write cycles guarded by the ``version`` column; a
    writer that loses the race re-reads and re-applies its change.
    """

    client: Client
    catalog: SlotCatalog
    timeout_seconds: float = 5.0
    max_attempts: int = 5

    async def ensure_session(self, session_id: str) -> None:
        """Create an empty session document if absent."""
        await self._run(lambda: self._insert_if_absent(session_id), "ensure_session")

    async def ensure_participant(self, session_id: str, name: str) -> None:
        """Add the participant to the document if absent."""

        def change(document: _Document) -> bool:
            if name in document.participants:
                return False
            document.participants.add(name)
            return True

        await self._mutate(session_id, change, "ensure_participant", create=True)

    async def assign_owner_if_absent(self, session_id: str, name: str) -> None:
        """Set the owner with a compare-and-set on a null owner."""

        def assign() -> None:
            self._insert_if_absent(session_id)
            (
                self.client.table(_DOCUMENTS)
                .update({"owner": name})
                .eq("id", session_id)
                .is_("owner", "null")
                .execute()
            )

        await self._run(assign, "assign_owner")

    async def upsert_pick(
        self, session_id: str, participant: str, slot: str, value: str
    ) -> None:
        """Write a pick into the participant's board."""
        validate_pick(self.catalog, slot, value)

        def change(document: _Document) -> bool:
            board = document.boards.setdefault(participant, {})
            if board.get(slot) == value:
                return False
            board[slot] = value
            return True

        await self._mutate(session_id, change, "upsert_pick", create=True)

    async def delete_pick(self, session_id: str, participant: str, slot: str) -> None:
        """Remove a pick from the participant's board if present."""

        def change(document: _Document) -> bool:
            board = document.boards.get(participant)
            if not board or slot not in board:
                return False
            del board[slot]
            return True

        await self._mutate(session_id, change, "delete_pick")

    async def clear_board(self, session_id: str, participant: str) -> None:
        """Empty one participant's board."""

        def change(document: _Document) -> bool:
            if not document.boards.get(participant):
                return False
            document.boards[participant] = {}
            return True

        await self._mutate(session_id, change, "clear_board")

    async def clear_session(self, session_id: str) -> None:
        """Empty every board in the session."""

        def change(document: _Document) -> bool:
            if not any(document.boards.values()):
                return False
            document.boards = {name: {} for name in document.boards}
            return True

        await self._mutate(session_id, change, "clear_session")

    async def remove_participant(self, session_id: str, participant: str) -> None:
        """Drop the participant and their board from the document."""

        def change(document: _Document) -> bool:
            if (
                participant not in document.participants
                and participant not in document.boards
            ):
                return False
            document.participants.discard(participant)
            document.boards.pop(participant, None)
            return True

        await self._mutate(session_id, change, "remove_participant")

    async def read_state(self, session_id: str) -> SessionSnapshot:
        """Return the snapshot held in the session document."""

        def read() -> SessionSnapshot:
            document = self._fetch(session_id)
            if document is None:
                return SessionSnapshot.empty()
            return SessionSnapshot.build(
                owner=document.owner,
                participants=document.participants,
                picks=[
                    (name, slot, value)
                    for name, board in document.boards.items()
                    for slot, value in board.items()
                ],
                slot_order=self.catalog.slots,
            )

        return await self._run(read, "read_state")

    async def ping(self) -> None:
        """Run a trivial query against the documents table."""
        await self._run(
            lambda: self.client.table(_DOCUMENTS).select("id").limit(1).execute(),
            "ping",
        )

    async def _run(self, func: Callable[[], T], action: str) -> T:
        return await run_blocking(
            func, action=action, timeout_seconds=self.timeout_seconds
        )

    async def _mutate(
        self,
        session_id: str,
        change: Callable[[_Document], bool],
        action: str,
        *,
        create: bool = False,
    ) -> None:
        await self._run(
            lambda: self._apply(session_id, change, action, create=create), action
        )

    def _apply(
        self,
        session_id: str,
        change: Callable[[_Document], bool],
        action: str,
        *,
        create: bool,
    ) -> None:
        for _attempt in range(self.max_attempts):
            document = self._fetch(session_id)
            if document is None:
                if not create:
                    return
                self._insert_if_absent(session_id)
                continue
            expected_version = document.version
            if not change(document):
                return
            response = (
                self.client.table(_DOCUMENTS)
                .update(
                    {
                        "participants": sorted(document.participants),
                        "boards": document.boards,
                        "version": expected_version + 1,
                    }
                )
                .eq("id", session_id)
                .eq("version", expected_version)
                .execute()
            )
            if response.data:
                return
        raise StorageError(
            f"Storage could not commit {action} after {self.max_attempts} attempts"
        )

    def _fetch(self, session_id: str) -> _Document | None:
        response = (
            self.client.table(_DOCUMENTS)
            .select(_COLUMNS)
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _Document.from_row(response.data[0])

    def _insert_if_absent(self, session_id: str) -> None:
        self.client.table(_DOCUMENTS).upsert(
            {
                "id": session_id,
                "owner": None,
                "participants": [],
                "boards": {},
                "version": 0,
            },
            on_conflict="id",
            ignore_duplicates=True,
        ).execute()
