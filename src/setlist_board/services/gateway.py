"""Mutation gateway: validates requests, applies them and broadcasts results."""

import logging
import re
from dataclasses import dataclass, field
from urllib.parse import unquote

from setlist_board.domain.catalog import SlotCatalog
from setlist_board.domain.errors import (
    AuthorizationError,
    BoardError,
    StorageError,
    ValidationError,
)
from setlist_board.domain.requests import (
    BoardRequest,
    ClearAllRequest,
    DeleteParticipantBoardRequest,
    DeleteSlotRequest,
    JoinRequest,
    SetSlotRequest,
)
from setlist_board.domain.sessions import SessionSnapshot
from setlist_board.services.broadcast import BroadcastRouter, error_event, joined_event
from setlist_board.services.registry import SessionRegistry

_logger = logging.getLogger(__name__)

_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9._~-]+$")
MAX_SESSION_ID_LENGTH = 128
MAX_USERNAME_LENGTH = 64
MAX_VALUE_LENGTH = 200

_FAILURE_LABELS = {
    JoinRequest: "Join",
    SetSlotRequest: "Save",
    DeleteSlotRequest: "Delete",
    DeleteParticipantBoardRequest: "Delete board",
    ClearAllRequest: "Clear",
}


@dataclass
class MutationGateway:
    """Entry point for every inbound mutation.

    Validation and authorization failures, as well as storage failures, are
    reported to the requesting observer only. A snapshot is published only
    after the aggregate re-read the session from storage.
    """

    registry: SessionRegistry
    router: BroadcastRouter
    catalog: SlotCatalog
    _identities: dict[str, dict[str, str]] = field(default_factory=dict, init=False)

    async def handle(self, observer_id: str, request: BoardRequest) -> None:
        """Apply a request on behalf of an observer."""
        label = _FAILURE_LABELS.get(type(request), "Request")
        try:
            session_id, snapshot = await self._dispatch(observer_id, request)
        except StorageError as exc:
            _logger.warning("%s failed for observer=%s: %s", label, observer_id, exc)
            await self.router.send(
                observer_id, error_event(f"{label} failed: {exc.message}")
            )
            return
        except BoardError as exc:
            _logger.info("%s rejected for observer=%s: %s", label, observer_id, exc)
            await self.router.send(observer_id, error_event(exc.message))
            return
        except Exception:
            _logger.exception("%s crashed for observer=%s", label, observer_id)
            await self.router.send(observer_id, error_event(f"{label} failed"))
            return
        await self.router.publish(session_id, snapshot)

    def identity(self, observer_id: str, session_id: str) -> str | None:
        """Return the name an observer joined a session with."""
        return self._identities.get(observer_id, {}).get(session_id)

    def forget(self, observer_id: str) -> None:
        """Drop an observer's identities; session state is untouched."""
        self._identities.pop(observer_id, None)
        self.router.unsubscribe(observer_id)

    async def _dispatch(
        self, observer_id: str, request: BoardRequest
    ) -> tuple[str, SessionSnapshot]:
        session_id = normalize_session_id(request.session_id)
        aggregate = self.registry.get_or_create(session_id)

        if isinstance(request, JoinRequest):
            username = normalize_username(request.username)
            snapshot = await aggregate.join(username)
            self._identities.setdefault(observer_id, {})[session_id] = username
            self.router.subscribe(session_id, observer_id)
            await self.router.send(observer_id, joined_event(session_id))
            return session_id, snapshot

        caller = self._caller(observer_id, session_id)
        if isinstance(request, SetSlotRequest):
            username = normalize_username(request.username)
            slot = self._slot(request.slot)
            value = normalize_value(request.value)
            snapshot = await aggregate.set_pick(caller, username, slot, value)
        elif isinstance(request, DeleteSlotRequest):
            username = normalize_username(request.username)
            slot = self._slot(request.slot)
            snapshot = await aggregate.delete_pick(caller, username, slot)
        elif isinstance(request, DeleteParticipantBoardRequest):
            target = normalize_username(request.target_username)
            snapshot = await aggregate.delete_participant_board(caller, target)
        elif isinstance(request, ClearAllRequest):
            snapshot = await aggregate.clear_all(caller)
        else:
            raise ValidationError("Unsupported request")
        return session_id, snapshot

    def _caller(self, observer_id: str, session_id: str) -> str:
        caller = self.identity(observer_id, session_id)
        if caller is None:
            raise AuthorizationError("Join the session before editing it")
        return caller

    def _slot(self, slot: str) -> str:
        if not self.catalog.is_valid_slot(slot):
            raise ValidationError(f"Unknown slot: {slot}")
        return slot


def normalize_session_id(raw: str | None) -> str:
    """Percent-decode and trim a session id, rejecting malformed ones."""
    cleaned = unquote(raw or "").strip()
    if not cleaned:
        raise ValidationError("Invalid session or username")
    if len(cleaned) > MAX_SESSION_ID_LENGTH or not _SESSION_ID_PATTERN.match(cleaned):
        raise ValidationError("Invalid session id")
    return cleaned


def normalize_username(raw: str | None) -> str:
    """Trim a display name, rejecting empty or oversized ones."""
    cleaned = (raw or "").strip()
    if not cleaned:
        raise ValidationError("Invalid session or username")
    if len(cleaned) > MAX_USERNAME_LENGTH:
        raise ValidationError("Username is too long")
    return cleaned


def normalize_value(raw: str | None) -> str:
    """Trim a pick value; an empty result means delete."""
    cleaned = (raw or "").strip()
    if len(cleaned) > MAX_VALUE_LENGTH:
        raise ValidationError("Pick value is too long")
    return cleaned
