"""
Inbound player actions.

Every action names the room and the acting player; each kind carries only
its own payload fields. Raw client input is validated through parse_action().
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from game.logic.enums import ActionKind

_MAX_NAME_LENGTH = 40


class BaseAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    room_id: str = Field(min_length=1)
    player_id: str = Field(min_length=1)


class JoinAction(BaseAction):
    kind: Literal[ActionKind.JOIN] = ActionKind.JOIN
    display_name: str = Field(min_length=1, max_length=_MAX_NAME_LENGTH)
    is_human: bool = True


class SelectSecretAction(BaseAction):
    kind: Literal[ActionKind.SELECT_SECRET] = ActionKind.SELECT_SECRET
    entity_id: str = Field(min_length=1)


class AskQuestionAction(BaseAction):
    kind: Literal[ActionKind.ASK_QUESTION] = ActionKind.ASK_QUESTION
    question_id: str = Field(min_length=1)


class AnswerQuestionAction(BaseAction):
    kind: Literal[ActionKind.ANSWER_QUESTION] = ActionKind.ANSWER_QUESTION
    answer: bool


class MakeGuessAction(BaseAction):
    kind: Literal[ActionKind.MAKE_GUESS] = ActionKind.MAKE_GUESS
    entity_id: str = Field(min_length=1)


class RequestRematchAction(BaseAction):
    kind: Literal[ActionKind.REQUEST_REMATCH] = ActionKind.REQUEST_REMATCH
    wants_rematch: bool = True


class LeaveRoomAction(BaseAction):
    kind: Literal[ActionKind.LEAVE_ROOM] = ActionKind.LEAVE_ROOM


Action = Annotated[
    JoinAction
    | SelectSecretAction
    | AskQuestionAction
    | AnswerQuestionAction
    | MakeGuessAction
    | RequestRematchAction
    | LeaveRoomAction,
    Field(discriminator="kind"),
]

_action_adapter: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(data: dict[str, Any]) -> Action:
    """Validate a raw client payload into a typed action.

    Raises pydantic.ValidationError on unknown kinds or malformed fields.
    """
    return _action_adapter.validate_python(data)
