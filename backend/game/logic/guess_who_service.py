"""
GuessWhoService implementation of the GameService interface.

Orchestrates room creation, action application, persistence, event
publication and AI turns. The state machine stays pure; this service owns
the store writes and serializes them with one asyncio.Lock per room.
"""

from __future__ import annotations

import asyncio
import random
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from game.logic.action_result import create_room_updated_events
from game.logic.actions import JoinAction, RequestRematchAction, parse_action
from game.logic.ai_player import AI_DISPLAY_NAME, AI_PLAYER_ID, AIPlayer
from game.logic.catalog import build_context
from game.logic.enums import GameErrorCode, GameMode, RoomState
from game.logic.events import ErrorEvent, ServiceEvent, convert_events, extract_game_over, player_target
from game.logic.exceptions import GameRuleError, InvalidActionError, NotFoundError
from game.logic.game import create_room, generate_room_code
from game.logic.machine import apply
from game.logic.service import GameService
from game.logic.settings import GameSettings, validate_settings
from game.logic.state import get_room_view, utcnow
from game.messaging.bus import InMemoryNotificationBus
from shared.logging import bound_log_context

if TYPE_CHECKING:
    from datetime import datetime

    from game.logic.actions import Action
    from game.logic.catalog import CandidateCatalog, CatalogContext, QuestionCatalog
    from game.logic.state import Room
    from game.logic.types import RoomView
    from game.messaging.bus import NotificationBus
    from game.session.room_store import RoomStore

logger = structlog.get_logger()

# upper bound on consecutive AI actions after one human action
MAX_AI_STEPS = 100
DEFAULT_ROOM_TTL_SECONDS = 3600


class GuessWhoService(GameService):
    """
    Game service for football Guess Who rooms.

    Maintains rooms for multiple concurrent games through the injected store.
    """

    def __init__(  # noqa: PLR0913
        self,
        store: RoomStore,
        candidate_catalog: CandidateCatalog,
        question_catalog: QuestionCatalog,
        bus: NotificationBus | None = None,
        *,
        seed: int | None = None,
        room_ttl_seconds: float = DEFAULT_ROOM_TTL_SECONDS,
        max_rooms: int | None = None,
    ) -> None:
        self._store = store
        self._candidate_catalog = candidate_catalog
        self._question_catalog = question_catalog
        self._bus = bus or InMemoryNotificationBus()
        self._rng = random.Random(seed)  # noqa: S311
        self._room_ttl_seconds = room_ttl_seconds
        self._max_rooms = max_rooms
        self._room_locks: dict[str, asyncio.Lock] = {}  # room_id -> Lock

    @property
    def bus(self) -> NotificationBus:
        return self._bus

    def _get_room_lock(self, room_id: str) -> asyncio.Lock:
        lock = self._room_locks.get(room_id)
        if lock is None:
            lock = self._room_locks[room_id] = asyncio.Lock()
        return lock

    def catalog_context(self, room: Room) -> CatalogContext:
        """Resolve the room's candidate pool and the question list."""
        return build_context(room.candidate_pool, self._candidate_catalog, self._question_catalog)

    def _new_room_code(self) -> str:
        return generate_room_code(self._store.is_code_taken)

    async def create_room(
        self,
        creator_id: str,
        display_name: str,
        mode: GameMode,
        settings: GameSettings | None = None,
    ) -> Room:
        room_settings = settings or GameSettings()
        validate_settings(room_settings)
        if self._max_rooms is not None and len(self._store) >= self._max_rooms:
            raise InvalidActionError(f"room capacity of {self._max_rooms} reached")
        if mode == GameMode.SINGLE_PLAYER and creator_id == AI_PLAYER_ID:
            raise InvalidActionError(f"player id {AI_PLAYER_ID} is reserved for the AI opponent")

        pool = self._candidate_catalog.get_random(room_settings.pool_size, self._rng)
        room = create_room(
            creator_id,
            display_name,
            mode,
            [f.id for f in pool],
            settings=room_settings,
            room_code=self._new_room_code(),
        )
        with bound_log_context(room_id=room.id):
            async with self._get_room_lock(room.id):
                self._store.put(room)
                logger.info("room created", room_code=room.room_code, mode=mode, creator_id=creator_id)
                if mode == GameMode.SINGLE_PLAYER:
                    join = JoinAction(
                        room_id=room.id,
                        player_id=AI_PLAYER_ID,
                        display_name=AI_DISPLAY_NAME,
                        is_human=False,
                    )
                    await self._commit(room, join)
                    await self._run_ai_followup(room.id)
                else:
                    await self._bus.publish_all(room.id, convert_events(create_room_updated_events(room)))
                stored = self._store.get(room.id)
        if stored is None:
            raise NotFoundError(f"room {room.id} disappeared during creation")
        return stored

    async def handle_action(self, action: Action | dict[str, Any]) -> list[ServiceEvent]:
        """
        Handle an action from a player.

        Applies the action, stores the result, publishes the events and then
        lets the AI act until a human must move. Rejected actions leave the
        room untouched and produce one error event for the actor.
        """
        if isinstance(action, dict):
            try:
                action = parse_action(action)
            except ValidationError as e:
                logger.warning("invalid action payload", error_count=e.error_count())
                player_id = action.get("player_id")
                room_id = action.get("room_id")
                return await self._reject(
                    room_id if isinstance(room_id, str) else None,
                    player_id if isinstance(player_id, str) else None,
                    GameErrorCode.VALIDATION_ERROR,
                    f"invalid action data: {e}",
                )

        with bound_log_context(room_id=action.room_id):
            try:
                return await self._handle_locked(action)
            except GameRuleError as e:
                logger.warning(
                    "action rejected",
                    action=action.kind,
                    player_id=action.player_id,
                    code=e.error_code,
                    reason=str(e),
                )
                return await self._reject(action.room_id, action.player_id, e.error_code, str(e))

    async def _handle_locked(self, action: Action) -> list[ServiceEvent]:
        if self._store.get(action.room_id) is None:
            raise NotFoundError(f"room {action.room_id} not found")

        async with self._get_room_lock(action.room_id):
            # re-fetch under the lock: the room may have been removed while waiting
            room = self._store.get(action.room_id)
            if room is None:
                raise NotFoundError(f"room {action.room_id} not found")

            events = await self._commit(room, action)
            events.extend(await self._run_ai_followup(room.id))

            rematch_room_id = self._rematch_room_id(room.id)
            if rematch_room_id is not None:
                async with self._get_room_lock(rematch_room_id):
                    events.extend(await self._run_ai_followup(rematch_room_id))
        return events

    def _rematch_room_id(self, room_id: str) -> str | None:
        room = self._store.get(room_id)
        return room.rematch_room_id if room is not None else None

    async def _commit(self, room: Room, action: Action) -> list[ServiceEvent]:
        """
        Apply one action, persist the result and publish its events.

        Raises GameRuleError before anything is stored when the action is rejected.
        """
        context = self.catalog_context(room)
        result = apply(room, action, context, room_code_factory=self._new_room_code)

        self._store.put(result.room)
        events = convert_events(result.events)
        await self._bus.publish_all(room.id, events)

        if result.rematch_room is not None:
            rematch = self._store.put(result.rematch_room)
            self._get_room_lock(rematch.id)
            rematch_events = convert_events(create_room_updated_events(rematch))
            await self._bus.publish_all(rematch.id, rematch_events)
            events.extend(rematch_events)
            logger.info("rematch room stored", rematch_room_id=rematch.id, room_code=rematch.room_code)

        game_over = extract_game_over(events)
        if game_over is not None:
            logger.info(
                "game over",
                winner_id=game_over.winner_id,
                reason=game_over.reason,
                total_turns=game_over.statistics.total_turns,
            )
        return events

    async def _run_ai_followup(self, room_id: str) -> list[ServiceEvent]:
        """
        Process AI actions iteratively.

        Loop until a human must act, the AI has nothing to do, or the room is gone.
        """
        all_events: list[ServiceEvent] = []
        for _ in range(MAX_AI_STEPS):
            # re-fetch each iteration as the room was just replaced
            room = self._store.get(room_id)
            if room is None or room.mode != GameMode.SINGLE_PLAYER:
                break
            ai_action = self._next_ai_action(room)
            if ai_action is None:
                break
            try:
                events = await self._commit(room, ai_action)
            except GameRuleError as e:
                raise RuntimeError(f"AI action {ai_action.kind} rejected in room {room_id}: {e}") from e
            all_events.extend(events)
        else:
            logger.warning("AI step limit reached", limit=MAX_AI_STEPS)
        return all_events

    def _next_ai_action(self, room: Room) -> Action | None:
        """Return the action the AI should take next, or None when it must wait."""
        ai_session = room.get_player(AI_PLAYER_ID)
        if ai_session is None or ai_session.is_human:
            return None
        ai = AIPlayer(room.settings.difficulty, self._rng)

        if room.state == RoomState.SELECTING:
            if ai_session.secret_entity_id is None:
                return ai.choose_secret(room, AI_PLAYER_ID)
            return None

        if room.state == RoomState.IN_PROGRESS:
            context = self.catalog_context(room)
            if room.pending_question is not None:
                if room.pending_question.asker_id != AI_PLAYER_ID:
                    return ai.answer(room, AI_PLAYER_ID, context)
                return None
            if room.current_turn_player_id == AI_PLAYER_ID:
                return ai.choose_turn_action(room, AI_PLAYER_ID, context)
            return None

        if room.state == RoomState.FINISHED:
            opponent = room.opponent_of(AI_PLAYER_ID)
            if (
                room.rematch_room_id is None
                and not ai_session.wants_rematch
                and opponent is not None
                and opponent.wants_rematch
            ):
                return RequestRematchAction(room_id=room.id, player_id=AI_PLAYER_ID, wants_rematch=True)
        return None

    async def _reject(
        self,
        room_id: str | None,
        player_id: str | None,
        code: GameErrorCode,
        message: str,
    ) -> list[ServiceEvent]:
        target = player_target(player_id) if player_id else "all"
        events = convert_events([ErrorEvent(code=code, message=message, target=target)])
        if room_id is not None:
            await self._bus.publish_all(room_id, events)
        return events

    def get_room(self, room_id: str) -> Room | None:
        return self._store.get(room_id)

    def get_room_by_code(self, room_code: str) -> Room | None:
        return self._store.get_by_code(room_code)

    def get_room_view(self, room_id: str, player_id: str) -> RoomView | None:
        room = self._store.get(room_id)
        if room is None or room.get_player(player_id) is None:
            return None
        return get_room_view(room, player_id)

    async def _remove_locked(self, room_id: str, stale_before: datetime | None = None) -> bool:
        """
        Remove a room while holding its lock, then drop the lock.

        Coroutines already waiting on the lock re-fetch the room and find it
        gone; later requests fail the existence check before creating a lock.
        With stale_before set, a room refreshed while waiting is kept.
        """
        lock = self._get_room_lock(room_id)
        async with lock:
            room = self._store.get(room_id)
            removed = False
            if room is not None and (stale_before is None or room.updated_at < stale_before):
                removed = self._store.remove(room_id)
            if self._store.get(room_id) is None and self._room_locks.get(room_id) is lock:
                del self._room_locks[room_id]
        return removed

    async def remove_room(self, room_id: str) -> bool:
        if self._store.get(room_id) is None:
            return False
        removed = await self._remove_locked(room_id)
        if removed:
            logger.info("room removed", room_id=room_id)
        return removed

    async def cleanup_stale_rooms(self, now: datetime | None = None) -> list[str]:
        now = now or utcnow()
        stale_before = now - timedelta(seconds=self._room_ttl_seconds)
        expired: list[str] = []
        for room_id in self._store.list_expired(self._room_ttl_seconds, now):
            if await self._remove_locked(room_id, stale_before):
                expired.append(room_id)
        if expired:
            logger.info("stale rooms removed", count=len(expired))
        return expired
