"""Shared result type and event helpers for action handler execution.

Lives in a neutral module so action_handlers and the state machine entry
point can both use it without import cycles.
"""

from typing import NamedTuple

from game.logic.events import GameEvent, GameOverEvent, RoomUpdatedEvent, player_target
from game.logic.game import compute_statistics
from game.logic.state import Room, get_room_view


class ActionResult(NamedTuple):
    """
    Result of applying one action to a room.

    room is the new room state the caller should store. rematch_room is set
    only when both players agreed to a rematch; it is a separate room that
    the caller stores alongside the finished one.
    """

    room: Room
    events: list[GameEvent]
    rematch_room: Room | None = None


def create_room_updated_events(room: Room) -> list[GameEvent]:
    """Create one room_updated event per player with their own view."""
    return [RoomUpdatedEvent(room=get_room_view(room, p.id), target=player_target(p.id)) for p in room.players]


def create_game_over_event(room: Room) -> GameOverEvent:
    """Create the game over event for a finished room."""
    if room.end_reason is None:
        raise ValueError(f"room {room.id} has no end reason")
    return GameOverEvent(
        winner_id=room.winner_id,
        reason=room.end_reason,
        statistics=compute_statistics(room),
    )
