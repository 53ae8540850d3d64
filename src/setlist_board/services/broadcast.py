"""Fan-out of session snapshots to subscribed observers."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from setlist_board.domain.sessions import SessionSnapshot

_logger = logging.getLogger(__name__)


class ObserverChannel(Protocol):
    """Outbound channel to one connected observer."""

    async def send(self, event: dict[str, object]) -> None:
        """Deliver one event to the observer."""


def joined_event(session_id: str) -> dict[str, object]:
    """Event confirming a join to the requester."""
    return {"type": "joined", "sessionId": session_id}


def snapshot_event(snapshot: SessionSnapshot) -> dict[str, object]:
    """Event carrying a full session snapshot."""
    return {"type": "snapshot", **snapshot.to_payload()}


def error_event(message: str) -> dict[str, object]:
    """Event reporting a failed request to the requester."""
    return {"type": "error", "message": message}


@dataclass
class BroadcastRouter:
    """Maps sessions to subscribed observers and publishes full snapshots."""

    _channels: dict[str, ObserverChannel] = field(default_factory=dict)
    _subscribers: dict[str, set[str]] = field(default_factory=dict)

    def register(self, observer_id: str, channel: ObserverChannel) -> None:
        """Attach the outbound channel for an observer."""
        self._channels[observer_id] = channel

    def subscribe(self, session_id: str, observer_id: str) -> None:
        """Subscribe an observer to a session's snapshots."""
        self._subscribers.setdefault(session_id, set()).add(observer_id)

    def unsubscribe(self, observer_id: str) -> None:
        """Drop an observer's channel and every subscription it holds."""
        self._channels.pop(observer_id, None)
        for session_id in list(self._subscribers):
            observers = self._subscribers[session_id]
            observers.discard(observer_id)
            if not observers:
                del self._subscribers[session_id]

    def subscriber_count(self, session_id: str) -> int:
        """Return how many observers follow a session."""
        return len(self._subscribers.get(session_id, ()))

    async def send(self, observer_id: str, event: dict[str, object]) -> None:
        """Send an event to a single observer."""
        channel = self._channels.get(observer_id)
        if channel is None:
            return
        try:
            await channel.send(event)
        except Exception:
            _logger.warning("Dropping observer %s after failed send", observer_id)
            self.unsubscribe(observer_id)

    async def publish(self, session_id: str, snapshot: SessionSnapshot) -> None:
        """Send the full snapshot to every subscriber of the session."""
        observers = sorted(self._subscribers.get(session_id, ()))
        if not observers:
            return
        event = snapshot_event(snapshot)
        await asyncio.gather(
            *(self.send(observer_id, event) for observer_id in observers)
        )
