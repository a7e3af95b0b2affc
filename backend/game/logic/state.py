"""
Immutable room state models for the guess-who game.

All models are frozen; the state machine produces new objects via
model_copy and never mutates its input.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from game.logic.enums import GameEndReason, GameMode, Position, RoomState, RoomSubState, TurnKind
from game.logic.settings import MAX_PLAYERS, GameSettings
from game.logic.types import PlayerView, RoomView

TraitValue = str | int | bool | tuple[str, ...] | None


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class Footballer(BaseModel):
    """A candidate entity on the board."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    club: str = ""
    nation: str = ""
    position: Position
    age_bracket: str = ""
    hair_color: str = ""
    facial_hair: bool = False
    boots_color: str = ""
    former_clubs: tuple[str, ...] = ()
    image_url: str = ""

    def trait_value(self, trait: str) -> TraitValue:
        """Return the value of a named trait, or None for unknown traits."""
        if trait == "id" or trait not in type(self).model_fields:
            return None
        return getattr(self, trait)


class Question(BaseModel):
    """A yes/no question probing one footballer trait."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    trait: str
    expected_values: tuple[str, ...]
    category: str = ""


class PendingQuestion(BaseModel):
    """A question that has been asked and not yet answered."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    asker_id: str


class TurnRecord(BaseModel):
    """One entry in a room's append-only turn history."""

    model_config = ConfigDict(frozen=True)

    id: str
    player_id: str
    kind: TurnKind
    question_id: str | None = None
    guess_id: str | None = None
    answer: bool | None = None
    timestamp: datetime

    @model_validator(mode="after")
    def _exactly_one_reference(self) -> TurnRecord:
        if (self.question_id is None) == (self.guess_id is None):
            raise ValueError("turn record needs exactly one of question_id or guess_id")
        if self.answer is not None and self.question_id is None:
            raise ValueError("only question records carry an answer")
        return self


class PlayerSession(BaseModel):
    """
    Per-room record of a participant (human or AI).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    is_human: bool = True

    secret_entity_id: str | None = None  # fixed once the room leaves SELECTING
    eliminated_ids: frozenset[str] = frozenset()  # only ever grows
    asked_question_ids: frozenset[str] = frozenset()
    remaining_guesses: int | None = 1  # None = unlimited
    wants_rematch: bool = False


def check_room_invariants(room: Room) -> None:
    """Raise ValueError if the room violates a structural invariant."""
    if not (1 <= len(room.players) <= MAX_PLAYERS):
        raise ValueError(f"room must have 1-{MAX_PLAYERS} players, got {len(room.players)}")
    player_ids = [p.id for p in room.players]
    if len(set(player_ids)) != len(player_ids):
        raise ValueError("player ids in a room must be unique")
    if room.state == RoomState.IN_PROGRESS:
        if room.current_turn_player_id not in player_ids:
            raise ValueError("in-progress room needs a current turn player from its players")
    elif room.current_turn_player_id is not None:
        raise ValueError(f"current_turn_player_id must be unset in state {room.state}")
    if room.winner_id is not None:
        if room.state != RoomState.FINISHED:
            raise ValueError("winner_id may only be set on a finished room")
        if room.winner_id not in player_ids:
            raise ValueError(f"winner {room.winner_id} is not a player in this room")
    if room.pending_question is not None and room.state != RoomState.IN_PROGRESS:
        raise ValueError("pending question outside IN_PROGRESS")


class Room(BaseModel):
    """
    One game session between one or two participants.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    room_code: str
    mode: GameMode
    state: RoomState = RoomState.WAITING
    sub_state: RoomSubState | None = None
    players: tuple[PlayerSession, ...]
    candidate_pool: tuple[str, ...]
    current_turn_player_id: str | None = None
    pending_question: PendingQuestion | None = None
    turn_history: tuple[TurnRecord, ...] = ()
    winner_id: str | None = None
    end_reason: GameEndReason | None = None
    rematch_room_id: str | None = None
    settings: GameSettings = Field(default_factory=GameSettings)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    started_at: datetime | None = None
    ended_at: datetime | None = None

    @model_validator(mode="after")
    def _validate_invariants(self) -> Room:
        check_room_invariants(self)
        return self

    @property
    def creator(self) -> PlayerSession:
        return self.players[0]

    @property
    def is_full(self) -> bool:
        return len(self.players) >= MAX_PLAYERS

    def get_player(self, player_id: str) -> PlayerSession | None:
        return next((p for p in self.players if p.id == player_id), None)

    def opponent_of(self, player_id: str) -> PlayerSession | None:
        return next((p for p in self.players if p.id != player_id), None)

    def remaining_candidates(self, player_id: str) -> tuple[str, ...]:
        """Pool ids the player has not yet eliminated, in pool order."""
        player = self.get_player(player_id)
        if player is None:
            return ()
        return tuple(c for c in self.candidate_pool if c not in player.eliminated_ids)


def get_room_view(room: Room, player_id: str) -> RoomView:
    """
    Return the visible room state for a specific player.

    Each player can see their own secret, both players' eliminated sets,
    asked questions and guess counters. The opponent's secret is hidden
    until the room is finished.
    """
    reveal = room.state == RoomState.FINISHED
    players_view = [
        PlayerView(
            id=p.id,
            display_name=p.display_name,
            is_human=p.is_human,
            has_selected=p.secret_entity_id is not None,
            secret_entity_id=p.secret_entity_id if (p.id == player_id or reveal) else None,
            eliminated_ids=sorted(p.eliminated_ids),
            asked_question_ids=sorted(p.asked_question_ids),
            remaining_guesses=p.remaining_guesses,
            wants_rematch=p.wants_rematch,
        )
        for p in room.players
    ]
    return RoomView(
        room_id=room.id,
        room_code=room.room_code,
        mode=room.mode,
        state=room.state,
        sub_state=room.sub_state,
        players=players_view,
        candidate_pool=list(room.candidate_pool),
        current_turn_player_id=room.current_turn_player_id,
        pending_question_id=room.pending_question.question_id if room.pending_question else None,
        winner_id=room.winner_id,
        end_reason=room.end_reason,
        turn_time_limit=room.settings.turn_time_limit,
    )
