"""Domain event models and service event transport container.

Domain event classes are the canonical event types for the game logic layer.
ServiceEvent is the transport wrapper used to route events to room
participants. convert_events() maps domain events into ServiceEvent
containers with typed routing targets.

All layers import exclusively from this module for event types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

from game.logic.enums import GameEndReason, GameErrorCode
from game.logic.types import GameStatistics, RoomView  # noqa: TC001

_PLAYER_TARGET_PREFIX = "player:"

# ---------------------------------------------------------------------------
# Typed routing targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BroadcastTarget:
    """Event should be sent to all participants of the room."""


@dataclass(frozen=True)
class PlayerTarget:
    """Event should be sent to one participant."""

    player_id: str


EventTarget = BroadcastTarget | PlayerTarget


def player_target(player_id: str) -> str:
    """Return the string target addressing a single player."""
    return f"{_PLAYER_TARGET_PREFIX}{player_id}"


def parse_event_target(value: str) -> EventTarget:
    """Parse a string target into a typed EventTarget."""
    if value == "all":
        return BroadcastTarget()
    if value.startswith(_PLAYER_TARGET_PREFIX):
        player_id = value.removeprefix(_PLAYER_TARGET_PREFIX)
        if not player_id:
            raise ValueError(f"missing player id in target: {value}")
        return PlayerTarget(player_id=player_id)
    raise ValueError(f"invalid target value: {value}")


# ---------------------------------------------------------------------------
# Event type enum
# ---------------------------------------------------------------------------


class EventType(StrEnum):
    """Types of game events."""

    ROOM_UPDATED = "room_updated"
    TURN_CHANGED = "turn_changed"
    QUESTION_ASKED = "question_asked"
    QUESTION_ANSWERED = "question_answered"
    CARDS_ELIMINATED = "cards_eliminated"
    GUESS_MADE = "guess_made"
    GAME_OVER = "game_over"
    REMATCH_REQUESTED = "rematch_requested"
    REMATCH_STARTED = "rematch_started"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Domain event models
# ---------------------------------------------------------------------------


class GameEvent(BaseModel):
    """Base class for all domain game events."""

    model_config = ConfigDict(frozen=True)

    type: EventType
    target: str


class RoomUpdatedEvent(GameEvent):
    """Event sent to each player with their filtered view of the room."""

    type: Literal[EventType.ROOM_UPDATED] = EventType.ROOM_UPDATED
    room: RoomView


class TurnChangedEvent(GameEvent):
    """Event broadcast when the acting player changes."""

    type: Literal[EventType.TURN_CHANGED] = EventType.TURN_CHANGED
    target: str = "all"
    player_id: str


class QuestionAskedEvent(GameEvent):
    """Event broadcast when a player asks a question."""

    type: Literal[EventType.QUESTION_ASKED] = EventType.QUESTION_ASKED
    target: str = "all"
    player_id: str
    question_id: str
    text: str


class QuestionAnsweredEvent(GameEvent):
    """Event broadcast when the pending question is answered."""

    type: Literal[EventType.QUESTION_ANSWERED] = EventType.QUESTION_ANSWERED
    target: str = "all"
    player_id: str
    question_id: str
    answer: bool


class CardsEliminatedEvent(GameEvent):
    """Event broadcast with the ids newly ruled out for a player."""

    type: Literal[EventType.CARDS_ELIMINATED] = EventType.CARDS_ELIMINATED
    target: str = "all"
    player_id: str
    eliminated_ids: list[str]
    remaining_count: int


class GuessMadeEvent(GameEvent):
    """Event broadcast after a guess is evaluated."""

    type: Literal[EventType.GUESS_MADE] = EventType.GUESS_MADE
    target: str = "all"
    player_id: str
    entity_id: str
    correct: bool
    remaining_guesses: int | None = None


class GameOverEvent(GameEvent):
    """Event broadcast when the room finishes."""

    type: Literal[EventType.GAME_OVER] = EventType.GAME_OVER
    target: str = "all"
    winner_id: str | None
    reason: GameEndReason
    statistics: GameStatistics


class RematchRequestedEvent(GameEvent):
    """Event broadcast when a player changes their rematch vote."""

    type: Literal[EventType.REMATCH_REQUESTED] = EventType.REMATCH_REQUESTED
    target: str = "all"
    player_id: str
    wants_rematch: bool


class RematchStartedEvent(GameEvent):
    """Event broadcast on the finished room pointing players to the new room."""

    type: Literal[EventType.REMATCH_STARTED] = EventType.REMATCH_STARTED
    target: str = "all"
    new_room_id: str
    room_code: str


class ErrorEvent(GameEvent):
    """Event sent to a player when their action is rejected."""

    type: Literal[EventType.ERROR] = EventType.ERROR
    code: GameErrorCode
    message: str


Event = (
    RoomUpdatedEvent
    | TurnChangedEvent
    | QuestionAskedEvent
    | QuestionAnsweredEvent
    | CardsEliminatedEvent
    | GuessMadeEvent
    | GameOverEvent
    | RematchRequestedEvent
    | RematchStartedEvent
    | ErrorEvent
)


# ---------------------------------------------------------------------------
# Service event transport container
# ---------------------------------------------------------------------------


class ServiceEvent(BaseModel):
    """Event transport container for the game service layer.

    Uses typed internal targets (BroadcastTarget / PlayerTarget) for routing.
    """

    model_config = {"arbitrary_types_allowed": True}

    event: EventType
    data: GameEvent
    target: EventTarget = BroadcastTarget()

    @model_validator(mode="after")
    def _ensure_event_matches_data(self) -> ServiceEvent:
        if self.event.value != self.data.type.value:
            raise ValueError(
                f"ServiceEvent.event '{self.event.value}' does not match data.type '{self.data.type.value}'",
            )
        return self


def convert_events(raw_events: list[GameEvent]) -> list[ServiceEvent]:
    """Convert typed domain events to service events with typed targets."""
    return [
        ServiceEvent(event=event.type, data=event, target=parse_event_target(event.target)) for event in raw_events
    ]


def extract_game_over(events: list[ServiceEvent]) -> GameOverEvent | None:
    """Return the game over event from a list of service events, if any."""
    for event in events:
        if event.event == EventType.GAME_OVER and isinstance(event.data, GameOverEvent):
            return event.data
    return None
