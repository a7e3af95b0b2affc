"""Typed domain exceptions for game rule violations.

All rule violations raised by the state machine are subclasses of
GameRuleError. The machine never commits partial state before raising,
so the service boundary can convert any of them into an ErrorEvent and
leave the stored room untouched.
"""

from game.logic.enums import GameErrorCode


class GameRuleError(Exception):
    """Base exception for game rule violations.

    Raised by the state machine when an action is illegal in the current
    room. Caught at the service boundary (guess_who_service.py) and
    converted to an ErrorEvent for the acting player.
    """

    error_code: GameErrorCode = GameErrorCode.INVALID_ACTION


class NotFoundError(GameRuleError):
    """Room, player, question or entity does not exist."""

    error_code = GameErrorCode.NOT_FOUND


class InvalidActionError(GameRuleError):
    """Action is not valid in the current room state (including repeats)."""

    error_code = GameErrorCode.INVALID_ACTION


class NotYourTurnError(GameRuleError):
    """Player acted while it was the opponent's turn."""

    error_code = GameErrorCode.NOT_YOUR_TURN


class DuplicateSecretError(GameRuleError):
    """Player tried to commit the secret the opponent already holds."""

    error_code = GameErrorCode.DUPLICATE_SECRET


class InvalidReferenceError(GameRuleError):
    """Question or entity id is outside this room's catalog or pool."""

    error_code = GameErrorCode.INVALID_REFERENCE


class UnsupportedSettingsError(GameRuleError):
    """Game settings contain values the engine cannot honour."""

    error_code = GameErrorCode.UNSUPPORTED_SETTINGS
