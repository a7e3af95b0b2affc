"""
Game state machine entry point.

apply() is the sole authority for room transitions. It performs no I/O:
callers persist the returned room(s) and dispatch the returned events.
A rejected action raises a GameRuleError subclass and the caller's room
is unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from game.logic.action_handlers import (
    handle_answer_question,
    handle_ask_question,
    handle_join,
    handle_leave_room,
    handle_make_guess,
    handle_request_rematch,
    handle_select_secret,
)
from game.logic.actions import (
    AnswerQuestionAction,
    AskQuestionAction,
    JoinAction,
    LeaveRoomAction,
    MakeGuessAction,
    RequestRematchAction,
    SelectSecretAction,
)
from game.logic.catalog import CatalogContext
from game.logic.exceptions import InvalidActionError, NotFoundError
from game.logic.state import check_room_invariants, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from game.logic.action_result import ActionResult
    from game.logic.actions import Action
    from game.logic.state import Room

logger = structlog.get_logger()


def _dispatch(
    room: Room,
    action: Action,
    context: CatalogContext,
    now: datetime,
    room_code_factory: Callable[[], str] | None,
) -> ActionResult:
    match action:
        case JoinAction():
            return handle_join(room, action, now)
        case SelectSecretAction():
            return handle_select_secret(room, action, now)
        case AskQuestionAction():
            return handle_ask_question(room, action, context, now)
        case AnswerQuestionAction():
            return handle_answer_question(room, action, context, now)
        case MakeGuessAction():
            return handle_make_guess(room, action, now)
        case RequestRematchAction():
            return handle_request_rematch(room, action, now, room_code_factory)
        case LeaveRoomAction():
            return handle_leave_room(room, action, now)
    raise InvalidActionError(f"unknown action kind: {action.kind}")


def apply(
    room: Room,
    action: Action,
    context: CatalogContext | None = None,
    *,
    now: datetime | None = None,
    room_code_factory: Callable[[], str] | None = None,
) -> ActionResult:
    """
    Apply an action to a room and return the next room plus its events.

    The returned room has updated_at refreshed. Raises NotFoundError when
    the action targets a different room, and the matching GameRuleError
    subclass for every rule violation.
    """
    if action.room_id != room.id:
        raise NotFoundError(f"action targets room {action.room_id}, not {room.id}")
    timestamp = now or utcnow()
    result = _dispatch(room, action, context or CatalogContext(), timestamp, room_code_factory)

    new_room = result.room.model_copy(update={"updated_at": timestamp})
    check_room_invariants(new_room)
    if result.rematch_room is not None:
        check_room_invariants(result.rematch_room)
    logger.debug(
        "action applied",
        action=action.kind,
        player_id=action.player_id,
        state_before=room.state,
        state_after=new_room.state,
    )
    return result._replace(room=new_room)
