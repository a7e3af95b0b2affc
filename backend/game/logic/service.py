from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import datetime

    from game.logic.actions import Action
    from game.logic.enums import GameMode
    from game.logic.events import ServiceEvent
    from game.logic.settings import GameSettings
    from game.logic.state import Room
    from game.logic.types import RoomView


class GameService(ABC):
    """
    Abstract interface for game room orchestration.

    Events returned by methods carry a typed target:
    - BroadcastTarget: send to every player in the room
    - PlayerTarget: send only to the addressed player
    """

    @abstractmethod
    async def create_room(
        self,
        creator_id: str,
        display_name: str,
        mode: GameMode,
        settings: GameSettings | None = None,
    ) -> Room:
        """
        Create a room with a freshly drawn candidate pool.

        In single-player mode the AI opponent joins and picks its secret
        before the room is returned.
        """
        ...

    @abstractmethod
    async def handle_action(self, action: Action | dict[str, Any]) -> list[ServiceEvent]:
        """
        Apply a player action to its room.

        Returns the service events produced, already published to the bus.
        Rejected actions yield a single error event targeted at the actor.
        """
        ...

    @abstractmethod
    def get_room(self, room_id: str) -> Room | None:
        """Return the stored room, or None if it doesn't exist."""
        ...

    @abstractmethod
    def get_room_view(self, room_id: str, player_id: str) -> RoomView | None:
        """Return the room as seen by one player, or None if the room doesn't exist."""
        ...

    @abstractmethod
    async def remove_room(self, room_id: str) -> bool:
        """
        Remove a room and its lock. Returns False if the room was unknown.

        Waits for any action in progress on the room to finish first.
        """
        ...

    @abstractmethod
    async def cleanup_stale_rooms(self, now: datetime | None = None) -> list[str]:
        """Remove rooms idle past the configured TTL and return their ids."""
        ...
