"""Tests for game event utility functions and validation."""

import pytest

from game.logic.enums import GameEndReason
from game.logic.events import (
    BroadcastTarget,
    EventType,
    GameOverEvent,
    PlayerTarget,
    QuestionAskedEvent,
    ServiceEvent,
    TurnChangedEvent,
    convert_events,
    extract_game_over,
    parse_event_target,
    player_target,
)
from game.logic.types import GameStatistics


def _stats() -> GameStatistics:
    return GameStatistics(total_turns=3, question_count=2, guess_count=1, duration_seconds=1.0, winner_id="alice")


class TestServiceEvent:
    def test_event_must_match_data_type(self):
        with pytest.raises(ValueError, match="does not match"):
            ServiceEvent(event=EventType.GAME_OVER, data=TurnChangedEvent(player_id="alice"))

    def test_default_target_is_broadcast(self):
        event = ServiceEvent(event=EventType.TURN_CHANGED, data=TurnChangedEvent(player_id="alice"))

        assert event.target == BroadcastTarget()


class TestParseEventTarget:
    def test_all(self):
        assert parse_event_target("all") == BroadcastTarget()

    def test_player(self):
        assert parse_event_target(player_target("bob")) == PlayerTarget(player_id="bob")

    def test_missing_player_id(self):
        with pytest.raises(ValueError, match="missing player id"):
            parse_event_target("player:")

    def test_unknown_target(self):
        with pytest.raises(ValueError, match="invalid target"):
            parse_event_target("team:red")


class TestConvertEvents:
    def test_preserves_order_and_targets(self):
        raw = [
            QuestionAskedEvent(player_id="alice", question_id="q_fwd", text="Is your player a forward?"),
            TurnChangedEvent(target="player:bob", player_id="bob"),
        ]

        converted = convert_events(raw)

        assert [e.event for e in converted] == [EventType.QUESTION_ASKED, EventType.TURN_CHANGED]
        assert converted[0].target == BroadcastTarget()
        assert converted[1].target == PlayerTarget(player_id="bob")
        assert converted[0].data is raw[0]

    def test_empty(self):
        assert convert_events([]) == []


class TestExtractGameOver:
    def test_finds_game_over(self):
        game_over = GameOverEvent(winner_id="alice", reason=GameEndReason.CORRECT_GUESS, statistics=_stats())
        events = convert_events([TurnChangedEvent(player_id="bob"), game_over])

        assert extract_game_over(events) is game_over

    def test_none_without_game_over(self):
        assert extract_game_over(convert_events([TurnChangedEvent(player_id="bob")])) is None
