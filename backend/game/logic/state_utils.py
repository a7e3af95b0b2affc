"""
Immutable state update utilities using Pydantic model_copy.

Provides helper functions for common immutable updates on frozen room
models. These functions never mutate the input room - they always return
new objects with the requested changes applied.
"""

from datetime import datetime
from uuid import uuid4

from game.logic.enums import GameEndReason, RoomState, TurnKind
from game.logic.state import PlayerSession, Room, TurnRecord

_PLAYER_FIELDS = set(PlayerSession.model_fields)


def update_player(
    room: Room,
    player_id: str,
    **updates: object,
) -> Room:
    """
    Return new room with the given player's fields updated.

    Raises:
        ValueError: If the player is not in the room or update fields are invalid

    """
    invalid_fields = set(updates) - _PLAYER_FIELDS
    if invalid_fields:
        raise ValueError(f"Invalid player fields: {invalid_fields}")
    players = list(room.players)
    for i, player in enumerate(players):
        if player.id == player_id:
            players[i] = player.model_copy(update=updates)
            return room.model_copy(update={"players": tuple(players)})
    raise ValueError(f"Player {player_id} is not in room {room.id}")


def add_eliminated(room: Room, player_id: str, entity_ids: frozenset[str]) -> Room:
    """Return new room with entity_ids added to the player's eliminated set."""
    player = room.get_player(player_id)
    if player is None:
        raise ValueError(f"Player {player_id} is not in room {room.id}")
    if entity_ids <= player.eliminated_ids:
        return room
    return update_player(room, player_id, eliminated_ids=player.eliminated_ids | entity_ids)


def append_turn(
    room: Room,
    player_id: str,
    kind: TurnKind,
    now: datetime,
    *,
    question_id: str | None = None,
    guess_id: str | None = None,
    answer: bool | None = None,
) -> Room:
    """Return new room with a turn record appended to its history."""
    record = TurnRecord(
        id=uuid4().hex,
        player_id=player_id,
        kind=kind,
        question_id=question_id,
        guess_id=guess_id,
        answer=answer,
        timestamp=now,
    )
    return room.model_copy(update={"turn_history": (*room.turn_history, record)})


def pass_turn_to(room: Room, player_id: str) -> Room:
    """Return new room with the turn given to player_id."""
    return room.model_copy(update={"current_turn_player_id": player_id})


def finish_room(
    room: Room,
    winner_id: str | None,
    reason: GameEndReason,
    now: datetime,
) -> Room:
    """Return new room moved to FINISHED; clears turn and pending question."""
    return room.model_copy(
        update={
            "state": RoomState.FINISHED,
            "sub_state": None,
            "current_turn_player_id": None,
            "pending_question": None,
            "winner_id": winner_id,
            "end_reason": reason,
            "ended_at": now,
        },
    )
