"""Tests for session snapshots."""

from setlist_board.domain.catalog import DEFAULT_SLOTS
from setlist_board.domain.sessions import SessionSnapshot


def test_build_orders_participants_case_insensitively() -> None:
    snapshot = SessionSnapshot.build(
        owner="bob",
        participants=["carol", "Bob", "alice", "bob"],
        picks=[],
        slot_order=DEFAULT_SLOTS,
    )

    assert snapshot.participants == ("alice", "Bob", "bob", "carol")
    assert list(snapshot.boards) == ["alice", "Bob", "bob", "carol"]
    assert all(board == {} for board in snapshot.boards.values())


def test_build_orders_slots_and_drops_empty_values() -> None:
    snapshot = SessionSnapshot.build(
        owner="alice",
        participants=["alice"],
        picks=[
            ("alice", "Encore", "Horizon"),
            ("alice", "Opener", "Stay"),
            ("alice", "Cover", ""),
        ],
        slot_order=DEFAULT_SLOTS,
    )

    assert list(snapshot.boards["alice"]) == ["Opener", "Encore"]
    assert snapshot.to_payload() == {
        "owner": "alice",
        "participants": ["alice"],
        "boards": {"alice": {"Opener": "Stay", "Encore": "Horizon"}},
    }


def test_empty_snapshot_is_unowned() -> None:
    snapshot = SessionSnapshot.empty()

    assert snapshot.owner is None
    assert snapshot.to_payload() == {"owner": None, "participants": [], "boards": {}}
    assert not snapshot.has_participant("alice")
