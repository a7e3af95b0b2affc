"""Tests for the notification bus and its in-memory implementation."""

from game.logic.enums import GameErrorCode
from game.logic.events import (
    BroadcastTarget,
    ErrorEvent,
    EventType,
    PlayerTarget,
    ServiceEvent,
    TurnChangedEvent,
)
from game.messaging.bus import InMemoryNotificationBus


def _turn_changed(player_id: str) -> ServiceEvent:
    return ServiceEvent(
        event=EventType.TURN_CHANGED,
        data=TurnChangedEvent(player_id=player_id),
        target=BroadcastTarget(),
    )


def _error_for(player_id: str) -> ServiceEvent:
    return ServiceEvent(
        event=EventType.ERROR,
        data=ErrorEvent(target=f"player:{player_id}", code=GameErrorCode.INVALID_ACTION, message="nope"),
        target=PlayerTarget(player_id=player_id),
    )


class TestInMemoryNotificationBus:
    async def test_broadcast_reaches_everyone_in_room(self):
        bus = InMemoryNotificationBus()

        await bus.publish("room1", _turn_changed("bob"))

        assert bus.messages_for("room1", "alice") == [{"t": "turn_changed", "player_id": "bob"}]
        assert bus.messages_for("room1", "bob") == [{"t": "turn_changed", "player_id": "bob"}]

    async def test_player_target_reaches_only_that_player(self):
        bus = InMemoryNotificationBus()

        await bus.publish("room1", _error_for("alice"))

        assert [m["t"] for m in bus.messages_for("room1", "alice")] == ["error"]
        assert bus.messages_for("room1", "bob") == []

    async def test_rooms_are_isolated(self):
        bus = InMemoryNotificationBus()

        await bus.publish("room1", _turn_changed("alice"))

        assert bus.messages_for("room2", "alice") == []

    async def test_publish_all_keeps_order(self):
        bus = InMemoryNotificationBus()

        await bus.publish_all("room1", [_turn_changed("alice"), _error_for("alice"), _turn_changed("bob")])

        assert [m["t"] for m in bus.messages_for("room1", "alice")] == ["turn_changed", "error", "turn_changed"]
        assert len(bus.deliveries) == 3
        assert bus.deliveries[1].target == PlayerTarget(player_id="alice")

    async def test_clear(self):
        bus = InMemoryNotificationBus()
        await bus.publish("room1", _turn_changed("alice"))

        bus.clear()

        assert bus.deliveries == []

    async def test_deliveries_is_a_copy(self):
        bus = InMemoryNotificationBus()
        await bus.publish("room1", _turn_changed("alice"))

        bus.deliveries.clear()

        assert len(bus.deliveries) == 1
