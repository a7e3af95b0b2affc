"""
Action handlers for player actions.

Each handler validates the action against the room, then returns an
ActionResult with the new room and the events it produced. Handlers are
pure: they raise a GameRuleError subclass on any violation before building
new state, and the input room is never modified.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from game.logic.action_result import ActionResult, create_game_over_event, create_room_updated_events
from game.logic.enums import GameEndReason, RoomState, RoomSubState, TurnKind
from game.logic.evaluator import eliminated_by_answer, evaluate
from game.logic.events import (
    CardsEliminatedEvent,
    GameEvent,
    GuessMadeEvent,
    QuestionAnsweredEvent,
    QuestionAskedEvent,
    RematchRequestedEvent,
    RematchStartedEvent,
    TurnChangedEvent,
)
from game.logic.exceptions import (
    DuplicateSecretError,
    InvalidActionError,
    InvalidReferenceError,
    NotFoundError,
    NotYourTurnError,
)
from game.logic.game import create_rematch_room, new_player_session
from game.logic.state import PendingQuestion, PlayerSession, Room
from game.logic.state_utils import add_eliminated, append_turn, finish_room, pass_turn_to, update_player

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

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

logger = structlog.get_logger()


def _require_state(room: Room, state: RoomState, action: str) -> None:
    if room.state != state:
        raise InvalidActionError(f"cannot {action} while room is {room.state.value}")


def _require_player(room: Room, player_id: str) -> PlayerSession:
    player = room.get_player(player_id)
    if player is None:
        raise NotFoundError(f"player {player_id} is not in room {room.id}")
    return player


def _require_opponent(room: Room, player_id: str) -> PlayerSession:
    opponent = room.opponent_of(player_id)
    if opponent is None:
        raise InvalidActionError(f"room {room.id} has no opponent for {player_id}")
    return opponent


def _require_turn(room: Room, player_id: str) -> None:
    if room.current_turn_player_id != player_id:
        raise NotYourTurnError(f"it is not {player_id}'s turn")


def _require_no_pending_question(room: Room) -> None:
    if room.pending_question is not None:
        raise InvalidActionError("waiting for the opponent to answer")


def _finish(room: Room, winner_id: str | None, reason: GameEndReason, now: datetime) -> tuple[Room, list[GameEvent]]:
    finished = finish_room(room, winner_id, reason, now)
    logger.info("game finished", winner_id=winner_id, reason=reason)
    return finished, [create_game_over_event(finished)]


def handle_join(room: Room, action: JoinAction, now: datetime) -> ActionResult:
    """
    Add a second participant to a WAITING room.

    The room moves to SELECTING as soon as it holds two players.
    """
    _require_state(room, RoomState.WAITING, "join")
    if room.get_player(action.player_id) is not None:
        raise InvalidActionError(f"player {action.player_id} already joined room {room.id}")
    if room.is_full:
        raise InvalidActionError(f"room {room.id} is full")

    player = new_player_session(action.player_id, action.display_name, room.settings, is_human=action.is_human)
    new_room = room.model_copy(update={"players": (*room.players, player)})
    if new_room.is_full:
        new_room = new_room.model_copy(update={"state": RoomState.SELECTING})
    return ActionResult(room=new_room, events=create_room_updated_events(new_room))


def handle_select_secret(room: Room, action: SelectSecretAction, now: datetime) -> ActionResult:
    """
    Commit a player's secret footballer.

    Once both players have committed, the game starts with the creator's turn.
    """
    _require_state(room, RoomState.SELECTING, "select a secret")
    player = _require_player(room, action.player_id)
    if player.secret_entity_id is not None:
        raise InvalidActionError(f"player {action.player_id} already selected a secret")
    if action.entity_id not in room.candidate_pool:
        raise InvalidReferenceError(f"footballer {action.entity_id} is not in this room's pool")
    opponent = room.opponent_of(action.player_id)
    if opponent is not None and opponent.secret_entity_id == action.entity_id:
        raise DuplicateSecretError(f"footballer {action.entity_id} is already the opponent's secret")

    new_room = update_player(room, action.player_id, secret_entity_id=action.entity_id)
    events: list[GameEvent] = []
    if new_room.is_full and all(p.secret_entity_id is not None for p in new_room.players):
        first = new_room.creator.id
        new_room = new_room.model_copy(
            update={
                "state": RoomState.IN_PROGRESS,
                "current_turn_player_id": first,
                "started_at": now,
            },
        )
        events.append(TurnChangedEvent(player_id=first))
        logger.info("game started", first_player_id=first)
    return ActionResult(room=new_room, events=[*create_room_updated_events(new_room), *events])


def handle_ask_question(
    room: Room,
    action: AskQuestionAction,
    context: CatalogContext,
    now: datetime,
) -> ActionResult:
    """
    Record a question from the turn player and wait for the answer.

    The turn does not change until the opponent answers.
    """
    _require_state(room, RoomState.IN_PROGRESS, "ask a question")
    player = _require_player(room, action.player_id)
    _require_turn(room, action.player_id)
    _require_no_pending_question(room)
    question = context.questions.get(action.question_id)
    if question is None:
        raise InvalidReferenceError(f"question {action.question_id} does not exist")
    if action.question_id in player.asked_question_ids:
        raise InvalidActionError(f"question {action.question_id} was already asked")
    max_questions = room.settings.max_questions
    if max_questions is not None and len(player.asked_question_ids) >= max_questions:
        raise InvalidActionError(f"question limit of {max_questions} reached")

    new_room = update_player(
        room,
        action.player_id,
        asked_question_ids=player.asked_question_ids | {action.question_id},
    )
    new_room = append_turn(new_room, action.player_id, TurnKind.QUESTION_ASKED, now, question_id=question.id)
    new_room = new_room.model_copy(
        update={
            "pending_question": PendingQuestion(question_id=question.id, asker_id=action.player_id),
            "sub_state": RoomSubState.WAITING_FOR_ANSWER,
        },
    )
    events: list[GameEvent] = [
        QuestionAskedEvent(player_id=action.player_id, question_id=question.id, text=question.text),
    ]
    return ActionResult(room=new_room, events=[*events, *create_room_updated_events(new_room)])


def handle_answer_question(
    room: Room,
    action: AnswerQuestionAction,
    context: CatalogContext,
    now: datetime,
) -> ActionResult:
    """
    Answer the pending question and update the asker's eliminated set.

    Every remaining candidate whose evaluation disagrees with the answer is
    eliminated for the asker. The turn then passes to the answering player,
    unless the elimination leaves only the answerer's secret and auto-win is
    enabled, in which case the asker wins.
    """
    _require_state(room, RoomState.IN_PROGRESS, "answer a question")
    answerer = _require_player(room, action.player_id)
    pending = room.pending_question
    if pending is None:
        raise InvalidActionError("there is no question to answer")
    if pending.asker_id == action.player_id:
        raise InvalidActionError("cannot answer your own question")
    question = context.questions.get(pending.question_id)
    if question is None:
        raise InvalidReferenceError(f"question {pending.question_id} does not exist")
    if room.settings.enforce_truthful_answers and answerer.secret_entity_id is not None:
        secret = context.candidates.get(answerer.secret_entity_id)
        if secret is not None and evaluate(question, secret) != action.answer:
            raise InvalidActionError("answer contradicts your secret footballer")

    asker_id = pending.asker_id
    newly_eliminated = eliminated_by_answer(
        question,
        action.answer,
        room.remaining_candidates(asker_id),
        context.candidates,
    )

    new_room = append_turn(
        room,
        action.player_id,
        TurnKind.QUESTION_ANSWERED,
        now,
        question_id=question.id,
        answer=action.answer,
    )
    new_room = add_eliminated(new_room, asker_id, newly_eliminated)
    new_room = new_room.model_copy(update={"pending_question": None, "sub_state": None})
    remaining = new_room.remaining_candidates(asker_id)

    events: list[GameEvent] = [
        QuestionAnsweredEvent(player_id=action.player_id, question_id=question.id, answer=action.answer),
        CardsEliminatedEvent(
            player_id=asker_id,
            eliminated_ids=[c for c in room.candidate_pool if c in newly_eliminated],
            remaining_count=len(remaining),
        ),
    ]
    logger.debug("cards eliminated", player_id=asker_id, eliminated=len(newly_eliminated), remaining=len(remaining))

    if room.settings.auto_win_by_elimination and remaining == (answerer.secret_entity_id,):
        new_room, end_events = _finish(new_room, asker_id, GameEndReason.ELIMINATION, now)
        events.extend(end_events)
    else:
        new_room = pass_turn_to(new_room, action.player_id)
        events.append(TurnChangedEvent(player_id=action.player_id))
    return ActionResult(room=new_room, events=[*events, *create_room_updated_events(new_room)])


def handle_make_guess(room: Room, action: MakeGuessAction, now: datetime) -> ActionResult:
    """
    Guess the opponent's secret.

    A correct guess wins. A wrong guess spends one guess when guesses are
    capped; running out hands the win to the opponent, otherwise the turn
    passes.
    """
    _require_state(room, RoomState.IN_PROGRESS, "guess")
    player = _require_player(room, action.player_id)
    _require_turn(room, action.player_id)
    _require_no_pending_question(room)
    if action.entity_id not in room.candidate_pool:
        raise InvalidReferenceError(f"footballer {action.entity_id} is not in this room's pool")
    opponent = _require_opponent(room, action.player_id)

    new_room = append_turn(room, action.player_id, TurnKind.GUESS_MADE, now, guess_id=action.entity_id)
    correct = action.entity_id == opponent.secret_entity_id
    remaining_guesses = player.remaining_guesses
    if not correct and remaining_guesses is not None:
        remaining_guesses -= 1
        new_room = update_player(new_room, action.player_id, remaining_guesses=remaining_guesses)

    events: list[GameEvent] = [
        GuessMadeEvent(
            player_id=action.player_id,
            entity_id=action.entity_id,
            correct=correct,
            remaining_guesses=remaining_guesses,
        ),
    ]
    if correct:
        new_room, end_events = _finish(new_room, action.player_id, GameEndReason.CORRECT_GUESS, now)
        events.extend(end_events)
    elif remaining_guesses is not None and remaining_guesses <= 0:
        new_room, end_events = _finish(new_room, opponent.id, GameEndReason.OUT_OF_GUESSES, now)
        events.extend(end_events)
    else:
        new_room = pass_turn_to(new_room, opponent.id)
        events.append(TurnChangedEvent(player_id=opponent.id))
    return ActionResult(room=new_room, events=[*events, *create_room_updated_events(new_room)])


def handle_request_rematch(
    room: Room,
    action: RequestRematchAction,
    now: datetime,
    room_code_factory: Callable[[], str] | None = None,
) -> ActionResult:
    """
    Record a rematch vote on a finished room.

    When every player wants a rematch, a new SELECTING room is returned
    alongside the finished one.
    """
    _require_state(room, RoomState.FINISHED, "request a rematch")
    _require_player(room, action.player_id)
    _require_opponent(room, action.player_id)
    if room.rematch_room_id is not None:
        raise InvalidActionError(f"rematch already started in room {room.rematch_room_id}")

    new_room = update_player(room, action.player_id, wants_rematch=action.wants_rematch)
    any_wants = any(p.wants_rematch for p in new_room.players)
    new_room = new_room.model_copy(update={"sub_state": RoomSubState.PENDING_REMATCH if any_wants else None})
    events: list[GameEvent] = [
        RematchRequestedEvent(player_id=action.player_id, wants_rematch=action.wants_rematch),
    ]

    rematch_room: Room | None = None
    if all(p.wants_rematch for p in new_room.players):
        code = room_code_factory() if room_code_factory is not None else None
        rematch_room = create_rematch_room(new_room, now, room_code=code)
        new_room = new_room.model_copy(update={"rematch_room_id": rematch_room.id, "sub_state": None})
        events.append(RematchStartedEvent(new_room_id=rematch_room.id, room_code=rematch_room.room_code))
        logger.info("rematch started", rematch_room_id=rematch_room.id)
    return ActionResult(room=new_room, events=events, rematch_room=rematch_room)


def handle_leave_room(room: Room, action: LeaveRoomAction, now: datetime) -> ActionResult:
    """
    Leave a room that has not finished.

    Leaving a WAITING room abandons it; leaving later forfeits to the opponent.
    """
    if room.state == RoomState.FINISHED:
        raise InvalidActionError("cannot leave a finished room")
    _require_player(room, action.player_id)

    opponent = room.opponent_of(action.player_id)
    if room.state == RoomState.WAITING or opponent is None:
        new_room, events = _finish(room, None, GameEndReason.ABANDONED, now)
    else:
        new_room, events = _finish(room, opponent.id, GameEndReason.FORFEIT, now)
    return ActionResult(room=new_room, events=[*events, *create_room_updated_events(new_room)])
