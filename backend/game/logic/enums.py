"""
String enum definitions for guess-who game concepts.
"""

from enum import StrEnum


class GameMode(StrEnum):
    """Who sits on the other side of the board."""

    SINGLE_PLAYER = "single_player"
    MULTI_PLAYER = "multi_player"


class RoomState(StrEnum):
    """Lifecycle state of a room. Transitions only move forward."""

    WAITING = "waiting"
    SELECTING = "selecting"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class RoomSubState(StrEnum):
    """Finer-grained marker inside IN_PROGRESS / FINISHED."""

    WAITING_FOR_ANSWER = "waiting_for_answer"
    PENDING_REMATCH = "pending_rematch"


class ActionKind(StrEnum):
    """Actions dispatched from a client to the game service."""

    JOIN = "join"
    SELECT_SECRET = "select_secret"
    ASK_QUESTION = "ask_question"
    ANSWER_QUESTION = "answer_question"
    MAKE_GUESS = "make_guess"
    REQUEST_REMATCH = "request_rematch"
    LEAVE_ROOM = "leave_room"


class TurnKind(StrEnum):
    """Kinds of entries in a room's turn history."""

    QUESTION_ASKED = "question_asked"
    QUESTION_ANSWERED = "question_answered"
    GUESS_MADE = "guess_made"


class GameEndReason(StrEnum):
    """Why a room reached FINISHED."""

    CORRECT_GUESS = "correct_guess"
    OUT_OF_GUESSES = "out_of_guesses"
    ELIMINATION = "elimination"
    FORFEIT = "forfeit"
    ABANDONED = "abandoned"


class Difficulty(StrEnum):
    """AI opponent strength."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Position(StrEnum):
    """Footballer playing positions."""

    GK = "GK"
    DEF = "DEF"
    MID = "MID"
    FWD = "FWD"


class GameErrorCode(StrEnum):
    """Error codes sent to clients for rejected actions."""

    NOT_FOUND = "not_found"
    INVALID_ACTION = "invalid_action"
    NOT_YOUR_TURN = "not_your_turn"
    DUPLICATE_SECRET = "duplicate_secret"
    INVALID_REFERENCE = "invalid_reference"
    VALIDATION_ERROR = "validation_error"
    UNSUPPORTED_SETTINGS = "unsupported_settings"
