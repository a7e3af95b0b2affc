"""Tests for the in-memory room store."""

from datetime import UTC, datetime, timedelta

import pytest

from game.logic.enums import GameEndReason, RoomState
from game.session.room_store import RoomStore
from game.tests.conftest import create_player, create_room

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class TestPutAndGet:
    def test_put_then_get(self):
        store = RoomStore()
        room = create_room()

        stored = store.put(room, NOW)

        assert store.get("room1") == stored
        assert stored.updated_at == NOW
        assert len(store) == 1

    def test_put_replaces_existing(self):
        store = RoomStore()
        store.put(create_room(), NOW)
        updated = create_room(players=(create_player("alice"), create_player("bob")), state=RoomState.SELECTING)

        store.put(updated, NOW + timedelta(seconds=5))

        assert store.get("room1").state == RoomState.SELECTING
        assert len(store) == 1

    def test_get_missing_returns_none(self):
        assert RoomStore().get("nope") is None

    def test_lookup_by_code_is_case_insensitive(self):
        store = RoomStore()
        store.put(create_room(room_code="XYZ789"))

        assert store.get_by_code("xyz789").id == "room1"
        assert store.is_code_taken("XYZ789")
        assert not store.is_code_taken("AAAAAA")

    def test_lower_case_code_stored_normalized(self):
        store = RoomStore()
        store.put(create_room(room_code="abc123"))

        assert store.is_code_taken("abc123")
        assert store.is_code_taken("ABC123")
        assert store.get_by_code("abc123").id == "room1"

    def test_codes_differing_only_in_case_collide(self):
        store = RoomStore()
        store.put(create_room(room_id="room1", room_code="abc123"))

        with pytest.raises(ValueError, match="already belongs"):
            store.put(create_room(room_id="room2", room_code="ABC123"))

    def test_remove_frees_lower_case_code(self):
        store = RoomStore()
        store.put(create_room(room_code="abc123"))

        store.remove("room1")

        assert not store.is_code_taken("ABC123")

    def test_code_owned_by_other_room_rejected(self):
        store = RoomStore()
        store.put(create_room(room_id="room1", room_code="SAME01"))

        with pytest.raises(ValueError, match="already belongs"):
            store.put(create_room(room_id="room2", room_code="SAME01"))


class TestRemove:
    def test_remove_existing(self):
        store = RoomStore()
        store.put(create_room(room_code="GONE01"))

        assert store.remove("room1") is True
        assert store.get("room1") is None
        assert not store.is_code_taken("GONE01")

    def test_remove_missing(self):
        assert RoomStore().remove("room1") is False


class TestListing:
    def test_list_active_skips_finished(self):
        store = RoomStore()
        store.put(create_room(room_id="open", room_code="OPEN01"))
        store.put(
            create_room(
                room_id="done",
                room_code="DONE01",
                state=RoomState.FINISHED,
                end_reason=GameEndReason.ABANDONED,
            ),
        )

        assert [r.id for r in store.list_active()] == ["open"]

    def test_purge_expired(self):
        store = RoomStore()
        store.put(create_room(room_id="old", room_code="OLD001"), NOW - timedelta(hours=2))
        store.put(create_room(room_id="fresh", room_code="NEW001"), NOW)

        expired = store.purge_expired(3600, NOW)

        assert expired == ["old"]
        assert store.get("old") is None
        assert store.get("fresh") is not None

    def test_list_expired_does_not_remove(self):
        store = RoomStore()
        store.put(create_room(room_id="old", room_code="OLD001"), NOW - timedelta(hours=2))

        assert store.list_expired(3600, NOW) == ["old"]
        assert store.get("old") is not None
