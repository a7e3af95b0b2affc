"""
Room creation, rematch construction and end-of-game statistics.
"""

from __future__ import annotations

import secrets
import string
from typing import TYPE_CHECKING
from uuid import uuid4

from game.logic.enums import GameMode, RoomState, TurnKind
from game.logic.settings import GameSettings, validate_settings
from game.logic.state import PlayerSession, Room, utcnow
from game.logic.types import GameStatistics

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

ROOM_CODE_LENGTH = 6
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_ROOM_CODE_ATTEMPTS = 100


def generate_room_code(is_taken: Callable[[str], bool] | None = None) -> str:
    """
    Generate a 6-character upper-case alphanumeric room code.

    When is_taken is given, codes it reports as taken are skipped.
    Raises RuntimeError if no free code is found after MAX_ROOM_CODE_ATTEMPTS.
    """
    for _ in range(MAX_ROOM_CODE_ATTEMPTS):
        code = "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))
        if is_taken is None or not is_taken(code):
            return code
    raise RuntimeError("could not allocate a unique room code")


def new_player_session(
    player_id: str,
    display_name: str,
    settings: GameSettings,
    *,
    is_human: bool = True,
) -> PlayerSession:
    """Create a fresh session with the guess allowance from settings."""
    return PlayerSession(
        id=player_id,
        display_name=display_name,
        is_human=is_human,
        remaining_guesses=settings.max_guesses,
    )


def create_room(  # noqa: PLR0913
    creator_id: str,
    display_name: str,
    mode: GameMode,
    candidate_pool: Sequence[str],
    *,
    settings: GameSettings | None = None,
    room_code: str | None = None,
    room_id: str | None = None,
    now: datetime | None = None,
) -> Room:
    """
    Create a WAITING room with the creator as its only player.

    The creator always takes the first turn once the game starts.
    """
    room_settings = settings or GameSettings()
    validate_settings(room_settings)
    if len(candidate_pool) != len(set(candidate_pool)):
        raise ValueError("candidate pool contains duplicate ids")
    timestamp = now or utcnow()
    return Room(
        id=room_id or uuid4().hex,
        room_code=room_code or generate_room_code(),
        mode=mode,
        state=RoomState.WAITING,
        players=(new_player_session(creator_id, display_name, room_settings),),
        candidate_pool=tuple(candidate_pool),
        settings=room_settings,
        created_at=timestamp,
        updated_at=timestamp,
    )


def create_rematch_room(room: Room, now: datetime, room_code: str | None = None) -> Room:
    """
    Build a new SELECTING room for the same participants.

    Mode, settings and candidate pool carry over; every session starts fresh.
    """
    players = tuple(
        new_player_session(p.id, p.display_name, room.settings, is_human=p.is_human) for p in room.players
    )
    return Room(
        id=uuid4().hex,
        room_code=room_code or generate_room_code(),
        mode=room.mode,
        state=RoomState.SELECTING,
        players=players,
        candidate_pool=room.candidate_pool,
        settings=room.settings,
        created_at=now,
        updated_at=now,
    )


def compute_statistics(room: Room) -> GameStatistics:
    """Summarize a room's turn history."""
    question_count = sum(1 for t in room.turn_history if t.kind == TurnKind.QUESTION_ASKED)
    guess_count = sum(1 for t in room.turn_history if t.kind == TurnKind.GUESS_MADE)
    started = room.started_at or room.created_at
    ended = room.ended_at or room.updated_at
    return GameStatistics(
        total_turns=question_count + guess_count,
        question_count=question_count,
        guess_count=guess_count,
        duration_seconds=max((ended - started).total_seconds(), 0.0),
        winner_id=room.winner_id,
    )
