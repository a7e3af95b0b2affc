"""Wiring of the game service from process settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from game.logic.catalog import load_footballers, load_questions
from game.logic.guess_who_service import GuessWhoService
from game.server.settings import GameServiceSettings
from game.session.room_store import RoomStore

if TYPE_CHECKING:
    from game.messaging.bus import NotificationBus

logger = structlog.get_logger()


def create_service(
    settings: GameServiceSettings | None = None,
    *,
    bus: NotificationBus | None = None,
) -> GuessWhoService:
    """Load the catalogs and build a GuessWhoService over a fresh RoomStore."""
    if settings is None:
        settings = GameServiceSettings()

    service = GuessWhoService(
        RoomStore(),
        load_footballers(settings.footballers_path),
        load_questions(settings.questions_path),
        bus,
        seed=settings.seed,
        room_ttl_seconds=settings.room_ttl_seconds,
        max_rooms=settings.max_rooms,
    )
    logger.info("game service ready", max_rooms=settings.max_rooms, room_ttl_seconds=settings.room_ttl_seconds)
    return service
