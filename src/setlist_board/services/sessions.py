"""Session aggregate: authorization and state for one session board."""

import logging
from dataclasses import dataclass, field

from setlist_board.domain.catalog import SlotCatalog
from setlist_board.domain.errors import AuthorizationError, ValidationError
from setlist_board.domain.sessions import SessionSnapshot
from setlist_board.services.storage import StoragePort

_logger = logging.getLogger(__name__)

_NOBODY_JOINED = "Nobody has joined this session yet"


@dataclass
class SessionAggregate:
    """State machine for one session.

    The aggregate holds no lock and treats its snapshot as a cache: every
    successful write is followed by an authoritative ``read_state`` so the
    cached view converges with whatever the storage backend committed last.
    A session is Unowned until the first join commits, and Owned forever
    after.
    """

    session_id: str
    storage: StoragePort
    catalog: SlotCatalog
    _snapshot: SessionSnapshot = field(
        default_factory=SessionSnapshot.empty, init=False
    )

    @property
    def snapshot(self) -> SessionSnapshot:
        """Return the last snapshot read from storage."""
        return self._snapshot

    @property
    def is_owned(self) -> bool:
        """Return True once an owner has been assigned."""
        return self._snapshot.owner is not None

    async def refresh(self) -> SessionSnapshot:
        """Rebuild the cached snapshot from storage."""
        self._snapshot = await self.storage.read_state(self.session_id)
        return self._snapshot

    async def join(self, name: str) -> SessionSnapshot:
        """Register a participant; the first committed join becomes owner."""
        if not name:
            raise ValidationError("Username is required")
        await self.storage.ensure_session(self.session_id)
        await self.storage.ensure_participant(self.session_id, name)
        await self.storage.assign_owner_if_absent(self.session_id, name)
        snapshot = await self.refresh()
        _logger.info(
            "Joined session=%s username=%s owner=%s",
            self.session_id,
            name,
            snapshot.owner,
        )
        return snapshot

    async def set_pick(
        self, caller: str, target: str, slot: str, value: str
    ) -> SessionSnapshot:
        """Write a pick on the caller's own board; blank values delete it."""
        if caller != target:
            raise AuthorizationError("You can only edit your own board")
        self._require_slot(slot)
        await self._require_participant(caller)
        cleaned = value.strip() if value else ""
        if cleaned:
            await self.storage.upsert_pick(self.session_id, target, slot, cleaned)
        else:
            await self.storage.delete_pick(self.session_id, target, slot)
        return await self.refresh()

    async def delete_pick(self, caller: str, target: str, slot: str) -> SessionSnapshot:
        """Delete one pick; the owner may delete picks on any board."""
        self._require_slot(slot)
        if caller != await self._owner():
            await self._require_participant(caller)
            if caller != target:
                raise AuthorizationError("Only the session owner can edit other boards")
        await self.storage.delete_pick(self.session_id, target, slot)
        return await self.refresh()

    async def delete_participant_board(
        self, caller: str, target: str
    ) -> SessionSnapshot:
        """Remove a participant and their board; owner only."""
        if not target:
            raise ValidationError("Target username is required")
        owner = await self._owner()
        if owner is None:
            raise ValidationError(_NOBODY_JOINED)
        if caller != owner:
            raise AuthorizationError("Only the session owner can delete boards")
        await self.storage.remove_participant(self.session_id, target)
        _logger.info(
            "Removed board session=%s target=%s by=%s", self.session_id, target, caller
        )
        return await self.refresh()

    async def clear_all(self, caller: str) -> SessionSnapshot:
        """Clear every participant's picks, keeping membership."""
        await self._require_participant(caller)
        await self.storage.clear_session(self.session_id)
        _logger.info("Cleared session=%s by=%s", self.session_id, caller)
        return await self.refresh()

    def _require_slot(self, slot: str) -> None:
        if not self.catalog.is_valid_slot(slot):
            raise ValidationError(f"Unknown slot: {slot}")

    async def _require_participant(self, caller: str) -> SessionSnapshot:
        snapshot = self._snapshot
        if not snapshot.has_participant(caller):
            snapshot = await self.refresh()
        if snapshot.owner is None:
            raise ValidationError(_NOBODY_JOINED)
        if not snapshot.has_participant(caller):
            raise AuthorizationError("Join the session before editing it")
        return snapshot

    async def _owner(self) -> str | None:
        # Owner is never reassigned, so a cached owner is authoritative.
        if self._snapshot.owner is None:
            await self.refresh()
        return self._snapshot.owner
