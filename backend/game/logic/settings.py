"""Per-room game settings - all configurable gameplay rules."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from game.logic.enums import Difficulty
from game.logic.exceptions import UnsupportedSettingsError

MAX_PLAYERS = 2
MIN_POOL_SIZE = 2
DEFAULT_POOL_SIZE = 24


class GameSettings(BaseModel):
    """
    Rules for a single room.

    Copied unchanged into a rematch room.
    """

    model_config = ConfigDict(frozen=True)

    # --- Board ---
    pool_size: int = DEFAULT_POOL_SIZE

    # --- Guessing ---
    max_guesses: int | None = 1  # None = unlimited guesses
    auto_win_by_elimination: bool = True

    # --- Questions ---
    max_questions: int | None = None  # per player; None = no cap
    enforce_truthful_answers: bool = True  # False lets players lie

    # --- Pacing ---
    turn_time_limit: int | None = None  # seconds; recorded for clients, not enforced

    # --- AI opponent ---
    difficulty: Difficulty = Difficulty.MEDIUM


def validate_settings(settings: GameSettings) -> None:
    """Validate that all settings values are supported by the engine.

    Raises UnsupportedSettingsError listing every offending value.
    """
    errors: list[str] = []

    if settings.pool_size < MIN_POOL_SIZE:
        errors.append(f"pool_size={settings.pool_size} is too small (need at least {MIN_POOL_SIZE})")

    if settings.max_guesses is not None and settings.max_guesses < 1:
        errors.append(f"max_guesses={settings.max_guesses} must be at least 1 or None for unlimited")

    if settings.max_questions is not None and settings.max_questions < 0:
        errors.append(f"max_questions={settings.max_questions} must not be negative")

    if settings.turn_time_limit is not None and settings.turn_time_limit <= 0:
        errors.append(f"turn_time_limit={settings.turn_time_limit} must be positive or None")

    if errors:
        raise UnsupportedSettingsError("; ".join(errors))
