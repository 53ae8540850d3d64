"""Storage port shared by every session board backend."""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol, TypeVar

from setlist_board.domain.catalog import SlotCatalog
from setlist_board.domain.errors import StorageError, ValidationError
from setlist_board.domain.sessions import SessionSnapshot

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoragePort(Protocol):
    """Durable backend interface for session boards."""

    async def ensure_session(self, session_id: str) -> None:
        """Create the session record if absent, never overwriting fields."""

    async def ensure_participant(self, session_id: str, name: str) -> None:
        """Register a participant if absent."""

    async def assign_owner_if_absent(self, session_id: str, name: str) -> None:
        """Set the owner only when no owner is recorded yet."""

    async def upsert_pick(
        self, session_id: str, participant: str, slot: str, value: str
    ) -> None:
        """Create or overwrite a pick."""

    async def delete_pick(self, session_id: str, participant: str, slot: str) -> None:
        """Remove a pick; removing an absent pick succeeds."""

    async def clear_board(self, session_id: str, participant: str) -> None:
        """Remove every pick of one participant, keeping membership."""

    async def clear_session(self, session_id: str) -> None:
        """Remove every pick in the session, keeping membership."""

    async def remove_participant(self, session_id: str, participant: str) -> None:
        """Remove a participant's board and membership together."""

    async def read_state(self, session_id: str) -> SessionSnapshot:
        """Return the authoritative snapshot of a session."""

    async def ping(self) -> None:
        """Raise StorageError when the backend is unreachable."""


def validate_pick(catalog: SlotCatalog, slot: str, value: str) -> None:
    """Reject picks that must never be written to storage."""
    if not catalog.is_valid_slot(slot):
        raise ValidationError(f"Unknown slot: {slot}")
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Pick value must not be empty")


async def run_blocking(
    func: Callable[[], T], *, action: str, timeout_seconds: float
) -> T:
    """Run a blocking backend call off the event loop with a bounded timeout."""
    try:
        return await asyncio.wait_for(asyncio.to_thread(func), timeout_seconds)
    except TimeoutError as exc:
        _logger.warning("Storage %s timed out after %ss", action, timeout_seconds)
        raise StorageError(f"Storage timed out during {action}", cause=exc) from exc
    except StorageError:
        raise
    except Exception as exc:
        _logger.warning("Storage %s failed: %s", action, exc)
        raise StorageError(f"Storage failed during {action}: {exc}", cause=exc) from exc
