"""WebSocket endpoint carrying board requests and snapshots."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import uuid4

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PayloadValidationError

from setlist_board.api.socket_models import parse_message
from setlist_board.services.broadcast import error_event

if TYPE_CHECKING:
    from setlist_board.containers import AppContainer

router = APIRouter()
_logger = logging.getLogger(__name__)


@dataclass
class WebSocketChannel:
    """Observer channel writing JSON events to a WebSocket."""

    websocket: WebSocket

    async def send(self, event: dict[str, object]) -> None:
        """Send one event as a JSON text frame."""
        await self.websocket.send_json(event)


@router.websocket("/ws")
async def board_socket(websocket: WebSocket) -> None:
    """Accept a connection and feed its messages to the mutation gateway."""
    container: AppContainer = websocket.app.state.container
    await websocket.accept()
    observer_id = uuid4().hex
    container.broadcast_router.register(observer_id, WebSocketChannel(websocket))
    _logger.info("Observer connected: %s", observer_id)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                _logger.info("Observer disconnected: %s", observer_id)
                break
            raw = message.get("text")
            if raw is None:
                await websocket.send_json(error_event("Invalid request"))
                continue
            try:
                request = parse_message(json.loads(raw))
            except (json.JSONDecodeError, RecursionError, PayloadValidationError):
                await websocket.send_json(error_event("Invalid request"))
                continue
            await container.mutation_gateway.handle(observer_id, request)
    except WebSocketDisconnect:
        _logger.info("Observer disconnected: %s", observer_id)
    finally:
        container.mutation_gateway.forget(observer_id)
