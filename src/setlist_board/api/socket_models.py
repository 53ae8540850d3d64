"""Pydantic models for WebSocket request payloads."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from setlist_board.domain.requests import (
    BoardRequest,
    ClearAllRequest,
    DeleteParticipantBoardRequest,
    DeleteSlotRequest,
    JoinRequest,
    SetSlotRequest,
)


class _SocketMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    session_id: str = Field(alias="sessionId")


class JoinMessage(_SocketMessage):
    """Join payload."""

    type: Literal["join"]
    username: str = ""

    def to_request(self) -> JoinRequest:
        return JoinRequest(session_id=self.session_id, username=self.username)


class SetSlotMessage(_SocketMessage):
    """Set slot payload."""

    type: Literal["setSlot"]
    slot: str
    value: str = ""
    username: str = ""

    def to_request(self) -> SetSlotRequest:
        return SetSlotRequest(
            session_id=self.session_id,
            slot=self.slot,
            value=self.value,
            username=self.username,
        )


class DeleteSlotMessage(_SocketMessage):
    """Delete slot payload."""

    type: Literal["deleteSlot"]
    slot: str
    username: str = ""

    def to_request(self) -> DeleteSlotRequest:
        return DeleteSlotRequest(
            session_id=self.session_id, slot=self.slot, username=self.username
        )


class DeleteParticipantBoardMessage(_SocketMessage):
    """Owner-only board removal payload."""

    type: Literal["deleteParticipantBoard"]
    target_username: str = Field(default="", alias="targetUsername")

    def to_request(self) -> DeleteParticipantBoardRequest:
        return DeleteParticipantBoardRequest(
            session_id=self.session_id, target_username=self.target_username
        )


class ClearAllMessage(_SocketMessage):
    """Clear-all payload."""

    type: Literal["clearAll"]

    def to_request(self) -> ClearAllRequest:
        return ClearAllRequest(session_id=self.session_id)


SocketMessage = Annotated[
    JoinMessage
    | SetSlotMessage
    | DeleteSlotMessage
    | DeleteParticipantBoardMessage
    | ClearAllMessage,
    Field(discriminator="type"),
]

_MESSAGE_ADAPTER: TypeAdapter[SocketMessage] = TypeAdapter(SocketMessage)


def parse_message(payload: object) -> BoardRequest:
    """Validate a decoded JSON payload into a typed request.

    Raises ``pydantic.ValidationError`` for unknown types or missing fields.
    """
    return _MESSAGE_ADAPTER.validate_python(payload).to_request()
