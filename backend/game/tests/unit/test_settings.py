import pytest

from game.logic.enums import Difficulty
from game.logic.exceptions import UnsupportedSettingsError
from game.logic.settings import DEFAULT_POOL_SIZE, GameSettings, validate_settings


class TestGameSettingsDefaults:
    def test_defaults(self):
        settings = GameSettings()

        assert settings.pool_size == DEFAULT_POOL_SIZE
        assert settings.max_guesses == 1
        assert settings.auto_win_by_elimination is True
        assert settings.max_questions is None
        assert settings.enforce_truthful_answers is True
        assert settings.difficulty == Difficulty.MEDIUM

    def test_defaults_validate(self):
        validate_settings(GameSettings())


class TestValidateSettings:
    def test_pool_too_small(self):
        with pytest.raises(UnsupportedSettingsError, match="pool_size=1"):
            validate_settings(GameSettings(pool_size=1))

    def test_zero_guesses(self):
        with pytest.raises(UnsupportedSettingsError, match="max_guesses=0"):
            validate_settings(GameSettings(max_guesses=0))

    def test_unlimited_guesses_allowed(self):
        validate_settings(GameSettings(max_guesses=None))

    def test_negative_question_cap(self):
        with pytest.raises(UnsupportedSettingsError, match="max_questions=-1"):
            validate_settings(GameSettings(max_questions=-1))

    def test_zero_question_cap_allowed(self):
        validate_settings(GameSettings(max_questions=0))

    def test_non_positive_turn_limit(self):
        with pytest.raises(UnsupportedSettingsError, match="turn_time_limit=0"):
            validate_settings(GameSettings(turn_time_limit=0))

    def test_reports_every_problem(self):
        with pytest.raises(UnsupportedSettingsError) as exc_info:
            validate_settings(GameSettings(pool_size=0, max_guesses=0))

        message = str(exc_info.value)
        assert "pool_size=0" in message
        assert "max_guesses=0" in message
