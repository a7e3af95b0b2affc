"""
Outbound notification bus.

The service publishes every ServiceEvent for a room here once the room
has been stored. Transports (websockets, push) implement NotificationBus;
InMemoryNotificationBus records what each participant would receive.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, NamedTuple

import structlog

from game.logic.events import BroadcastTarget, EventTarget, PlayerTarget
from game.messaging.encoder import decode, encode
from game.messaging.event_payload import service_event_payload

if TYPE_CHECKING:
    from collections.abc import Iterable

    from game.logic.events import ServiceEvent

logger = structlog.get_logger()


def _reaches(target: EventTarget, player_id: str) -> bool:
    if isinstance(target, BroadcastTarget):
        return True
    return isinstance(target, PlayerTarget) and target.player_id == player_id


class Delivery(NamedTuple):
    """One published payload as a connection would decode it."""

    room_id: str
    target: EventTarget
    payload: dict[str, Any]


class NotificationBus(ABC):
    """Fan-out of room events to room participants."""

    @abstractmethod
    async def publish(self, room_id: str, event: ServiceEvent) -> None:
        """Deliver one event to the participants its target selects."""
        ...

    async def publish_all(self, room_id: str, events: Iterable[ServiceEvent]) -> None:
        for event in events:
            await self.publish(room_id, event)


class InMemoryNotificationBus(NotificationBus):
    """
    Bus that records deliveries instead of sending them.

    Every payload is encoded to MessagePack and decoded back, so anything
    recorded here is exactly what survives the wire.
    """

    def __init__(self) -> None:
        self._deliveries: list[Delivery] = []

    @property
    def deliveries(self) -> list[Delivery]:
        return self._deliveries.copy()

    async def publish(self, room_id: str, event: ServiceEvent) -> None:
        payload = decode(encode(service_event_payload(event)))
        self._deliveries.append(Delivery(room_id=room_id, target=event.target, payload=payload))
        logger.debug("event published", room_id=room_id, event_type=event.event)

    def messages_for(self, room_id: str, player_id: str) -> list[dict[str, Any]]:
        """Return the payloads a given player in a room would have received, in order."""
        return [d.payload for d in self._deliveries if d.room_id == room_id and _reaches(d.target, player_id)]

    def clear(self) -> None:
        self._deliveries.clear()
