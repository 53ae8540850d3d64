"""Domain models for session board snapshots."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field


def participant_sort_key(name: str) -> tuple[str, str]:
    """Case-insensitive display order, ties broken by the raw name."""
    return (name.casefold(), name)


@dataclass(frozen=True)
class SessionSnapshot:
    """Full state of one session: owner, participants and every board."""

    owner: str | None = None
    participants: tuple[str, ...] = ()
    boards: dict[str, dict[str, str]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "SessionSnapshot":
        """Return the snapshot of a session nobody has joined."""
        return cls()

    @classmethod
    def build(
        cls,
        owner: str | None,
        participants: Iterable[str],
        picks: Iterable[tuple[str, str, str]],
        slot_order: Sequence[str],
    ) -> "SessionSnapshot":
        """Normalize raw backend rows into a canonical snapshot.

        ``picks`` are ``(participant, slot, value)`` rows. Every participant gets
        a board (possibly empty); boards and slots follow display order so two
        backends holding the same data yield equal snapshots.
        """
        ordered = tuple(sorted(set(participants), key=participant_sort_key))
        raw_boards: dict[str, dict[str, str]] = {name: {} for name in ordered}
        for participant, slot, value in picks:
            if not value:
                continue
            raw_boards.setdefault(participant, {})[slot] = value

        def slot_key(slot: str) -> tuple[int, str]:
            try:
                return (list(slot_order).index(slot), slot)
            except ValueError:
                return (len(slot_order), slot)

        boards = {
            name: {
                slot: raw_boards[name][slot]
                for slot in sorted(raw_boards[name], key=slot_key)
            }
            for name in sorted(raw_boards, key=participant_sort_key)
        }
        return cls(owner=owner or None, participants=ordered, boards=boards)

    def has_participant(self, name: str) -> bool:
        """Return True when the name is currently listed in the session."""
        return name in self.participants

    def to_payload(self) -> dict[str, object]:
        """Return the JSON-ready representation broadcast to observers."""
        return {
            "owner": self.owner,
            "participants": list(self.participants),
            "boards": {name: dict(board) for name, board in self.boards.items()},
        }
