"""Registry of live session aggregates."""

from dataclasses import dataclass, field

from setlist_board.domain.catalog import SlotCatalog
from setlist_board.services.sessions import SessionAggregate
from setlist_board.services.storage import StoragePort


@dataclass
class SessionRegistry:
    """Owns every SessionAggregate for the lifetime of the process.

    Lookup and insert happen without an await in between, so concurrent
    callers on the event loop always share one aggregate per identifier.
    Sessions are never evicted.
    """

    storage: StoragePort
    catalog: SlotCatalog
    _sessions: dict[str, SessionAggregate] = field(default_factory=dict, init=False)

    def get_or_create(self, session_id: str) -> SessionAggregate:
        """Return the aggregate for a session, creating it on first reference."""
        aggregate = self._sessions.get(session_id)
        if aggregate is None:
            aggregate = SessionAggregate(
                session_id=session_id, storage=self.storage, catalog=self.catalog
            )
            self._sessions[session_id] = aggregate
        return aggregate

    def get(self, session_id: str) -> SessionAggregate | None:
        """Return the aggregate for a session if it has been referenced."""
        return self._sessions.get(session_id)

    def session_ids(self) -> list[str]:
        """Return the identifiers of every live session."""
        return sorted(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)
