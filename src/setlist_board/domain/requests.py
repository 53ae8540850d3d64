"""Inbound mutation requests, one type per request kind."""

from dataclasses import dataclass


@dataclass(frozen=True)
class JoinRequest:
    """Join a session under a display name."""

    session_id: str
    username: str


@dataclass(frozen=True)
class SetSlotRequest:
    """Set (or, with a blank value, clear) one slot on a board."""

    session_id: str
    slot: str
    value: str
    username: str


@dataclass(frozen=True)
class DeleteSlotRequest:
    """Delete one slot on a board."""

    session_id: str
    slot: str
    username: str


@dataclass(frozen=True)
class DeleteParticipantBoardRequest:
    """Remove a participant and their board from a session."""

    session_id: str
    target_username: str


@dataclass(frozen=True)
class ClearAllRequest:
    """Clear every pick in a session."""

    session_id: str


BoardRequest = (
    JoinRequest
    | SetSlotRequest
    | DeleteSlotRequest
    | DeleteParticipantBoardRequest
    | ClearAllRequest
)
