"""Volatile in-memory storage backend."""

from dataclasses import dataclass, field

from setlist_board.domain.catalog import SlotCatalog
from setlist_board.domain.sessions import SessionSnapshot
from setlist_board.services.storage import StoragePort, validate_pick


@dataclass
class _SessionRecord:
    owner: str | None = None
    participants: set[str] = field(default_factory=set)
    picks: dict[tuple[str, str], str] = field(default_factory=dict)


@dataclass
class InMemoryStorage(StoragePort):
    """Process-local storage; state is lost when the process exits."""

    catalog: SlotCatalog = field(default_factory=SlotCatalog)
    sessions: dict[str, _SessionRecord] = field(default_factory=dict)

    def _session(self, session_id: str) -> _SessionRecord:
        return self.sessions.setdefault(session_id, _SessionRecord())

    async def ensure_session(self, session_id: str) -> None:
        """Create the session record if absent."""
        self._session(session_id)

    async def ensure_participant(self, session_id: str, name: str) -> None:
        """Register a participant if absent."""
        self._session(session_id).participants.add(name)

    async def assign_owner_if_absent(self, session_id: str, name: str) -> None:
        """Set the owner when none is recorded."""
        record = self._session(session_id)
        if record.owner is None:
            record.owner = name

    async def upsert_pick(
        self, session_id: str, participant: str, slot: str, value: str
    ) -> None:
        """Create or overwrite a pick."""
        validate_pick(self.catalog, slot, value)
        self._session(session_id).picks[(participant, slot)] = value

    async def delete_pick(self, session_id: str, participant: str, slot: str) -> None:
        """Remove a pick if present."""
        record = self.sessions.get(session_id)
        if record is not None:
            record.picks.pop((participant, slot), None)

    async def clear_board(self, session_id: str, participant: str) -> None:
        """Remove every pick of one participant."""
        record = self.sessions.get(session_id)
        if record is None:
            return
        for key in [key for key in record.picks if key[0] == participant]:
            del record.picks[key]

    async def clear_session(self, session_id: str) -> None:
        """Remove every pick in the session."""
        record = self.sessions.get(session_id)
        if record is not None:
            record.picks.clear()

    async def remove_participant(self, session_id: str, participant: str) -> None:
        """Remove a participant and their board."""
        await self.clear_board(session_id, participant)
        record = self.sessions.get(session_id)
        if record is not None:
            record.participants.discard(participant)

    async def read_state(self, session_id: str) -> SessionSnapshot:
        """Return the current snapshot of a session."""
        record = self.sessions.get(session_id)
        if record is None:
            return SessionSnapshot.empty()
        return SessionSnapshot.build(
            owner=record.owner,
            participants=record.participants,
            picks=[
                (participant, slot, value)
                for (participant, slot), value in record.picks.items()
            ],
            slot_order=self.catalog.slots,
        )

    async def ping(self) -> None:
        """Memory is always reachable."""
