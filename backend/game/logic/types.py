"""
Pydantic models for data structures that cross component boundaries.

Contains player-facing room views and end-of-game statistics.
"""

from pydantic import BaseModel

from game.logic.enums import GameEndReason, GameMode, RoomState, RoomSubState


class PlayerView(BaseModel):
    """One participant as seen by a specific viewer."""

    id: str
    display_name: str
    is_human: bool
    has_selected: bool
    secret_entity_id: str | None = None  # only the viewer's own, until the game ends
    eliminated_ids: list[str]
    asked_question_ids: list[str]
    remaining_guesses: int | None = None
    wants_rematch: bool = False


class RoomView(BaseModel):
    """Room state filtered for one player."""

    room_id: str
    room_code: str
    mode: GameMode
    state: RoomState
    sub_state: RoomSubState | None = None
    players: list[PlayerView]
    candidate_pool: list[str]
    current_turn_player_id: str | None = None
    pending_question_id: str | None = None
    winner_id: str | None = None
    end_reason: GameEndReason | None = None
    turn_time_limit: int | None = None


class GameStatistics(BaseModel):
    """Summary of a finished room."""

    total_turns: int
    question_count: int
    guess_count: int
    duration_seconds: float
    winner_id: str | None = None
