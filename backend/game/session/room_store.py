from datetime import datetime, timedelta

from game.logic.enums import RoomState
from game.logic.state import Room, utcnow


class RoomStore:
    """In-memory store of game rooms keyed by room id.

    Each put is a single-key atomic replace; concurrent writers to the same
    room are last-write-wins, so callers serialize per room (see
    GuessWhoService's per-room locks).
    """

    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}  # room_id -> Room
        self._codes: dict[str, str] = {}  # upper-cased room_code -> room_id

    def __len__(self) -> int:
        return len(self._rooms)

    def get(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def get_by_code(self, room_code: str) -> Room | None:
        room_id = self._codes.get(room_code.upper())
        return self._rooms.get(room_id) if room_id is not None else None

    def is_code_taken(self, room_code: str) -> bool:
        return room_code.upper() in self._codes

    def put(self, room: Room, now: datetime | None = None) -> Room:
        """Insert or replace a room, refreshing updated_at. Return the stored room."""
        code = room.room_code.upper()
        owner = self._codes.get(code)
        if owner is not None and owner != room.id:
            raise ValueError(f"room code {room.room_code} already belongs to room {owner}")
        stored = room.model_copy(update={"updated_at": now or utcnow()})
        previous = self._rooms.get(room.id)
        if previous is not None and previous.room_code.upper() != code:
            self._codes.pop(previous.room_code.upper(), None)
        self._rooms[room.id] = stored
        self._codes[code] = room.id
        return stored

    def remove(self, room_id: str) -> bool:
        """Remove a room. Return False if it was not stored."""
        room = self._rooms.pop(room_id, None)
        if room is None:
            return False
        self._codes.pop(room.room_code.upper(), None)
        return True

    def list_active(self) -> list[Room]:
        """Return every room that has not finished."""
        return [room for room in self._rooms.values() if room.state != RoomState.FINISHED]

    def list_expired(self, ttl_seconds: float, now: datetime | None = None) -> list[str]:
        """Return the ids of rooms not updated within ttl_seconds."""
        cutoff = (now or utcnow()) - timedelta(seconds=ttl_seconds)
        return [room_id for room_id, room in self._rooms.items() if room.updated_at < cutoff]

    def purge_expired(self, ttl_seconds: float, now: datetime | None = None) -> list[str]:
        """Remove rooms not updated within ttl_seconds. Return their ids."""
        expired = self.list_expired(ttl_seconds, now)
        for room_id in expired:
            self.remove(room_id)
        return expired
