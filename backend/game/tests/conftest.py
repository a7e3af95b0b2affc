from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from game.logic.catalog import CatalogContext, InMemoryCandidateCatalog, InMemoryQuestionCatalog
from game.logic.enums import GameMode, Position, RoomState
from game.logic.guess_who_service import GuessWhoService
from game.logic.settings import GameSettings
from game.logic.state import Footballer, PendingQuestion, PlayerSession, Question, Room
from game.messaging.bus import InMemoryNotificationBus
from game.session.room_store import RoomStore

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from game.logic.enums import GameEndReason, RoomSubState


# ============================================================================
# Catalog fixtures
# ============================================================================

# 24 footballers: f01-f03 GK, f04-f10 DEF, f11-f17 MID, f18-f24 FWD
_POSITIONS = [Position.GK] * 3 + [Position.DEF] * 7 + [Position.MID] * 7 + [Position.FWD] * 7
_HAIR = ["black", "brown", "blonde", "red"]
_CLUBS = ["Arsenal", "Barcelona", "Bayern Munich"]


def create_footballer(footballer_id: str, **overrides) -> Footballer:
    """Create a Footballer with sensible defaults for testing."""
    fields = {
        "name": footballer_id.upper(),
        "club": "Arsenal",
        "nation": "England",
        "position": Position.MID,
        "age_bracket": "25_29",
        "hair_color": "brown",
        "facial_hair": False,
        "boots_color": "white",
        "former_clubs": (),
    }
    fields.update(overrides)
    return Footballer(id=footballer_id, **fields)


def build_footballers() -> list[Footballer]:
    return [
        create_footballer(
            f"f{i:02d}",
            position=_POSITIONS[i - 1],
            hair_color=_HAIR[i % len(_HAIR)],
            club=_CLUBS[i % len(_CLUBS)],
            facial_hair=i % 2 == 0,
            former_clubs=("Chelsea",) if i % 5 == 0 else (),
        )
        for i in range(1, 25)
    ]


def build_questions() -> list[Question]:
    return [
        Question(id="q_fwd", text="Is your player a forward?", trait="position", expected_values=("FWD",)),
        Question(id="q_gk", text="Is your player a goalkeeper?", trait="position", expected_values=("GK",)),
        Question(id="q_def", text="Is your player a defender?", trait="position", expected_values=("DEF",)),
        Question(id="q_black_hair", text="Black hair?", trait="hair_color", expected_values=("black",)),
        Question(id="q_beard", text="Facial hair?", trait="facial_hair", expected_values=("true",)),
        Question(id="q_arsenal", text="Plays for Arsenal?", trait="club", expected_values=("Arsenal",)),
        Question(id="q_chelsea", text="Ever at Chelsea?", trait="former_clubs", expected_values=("Chelsea",)),
    ]


FOOTBALLER_IDS = [f"f{i:02d}" for i in range(1, 25)]
FORWARD_IDS = FOOTBALLER_IDS[17:]


def create_context(
    footballers: Iterable[Footballer] | None = None,
    questions: Iterable[Question] | None = None,
) -> CatalogContext:
    footballers = build_footballers() if footballers is None else footballers
    questions = build_questions() if questions is None else questions
    return CatalogContext(
        candidates={f.id: f for f in footballers},
        questions={q.id: q for q in questions},
    )


# ============================================================================
# Room builder helpers
# ============================================================================


def create_player(
    player_id: str = "alice",
    display_name: str | None = None,
    *,
    is_human: bool = True,
    secret: str | None = None,
    eliminated: Iterable[str] = (),
    asked: Iterable[str] = (),
    remaining_guesses: int | None = 1,
    wants_rematch: bool = False,
) -> PlayerSession:
    """Create a PlayerSession with sensible defaults for testing."""
    return PlayerSession(
        id=player_id,
        display_name=display_name if display_name is not None else player_id.title(),
        is_human=is_human,
        secret_entity_id=secret,
        eliminated_ids=frozenset(eliminated),
        asked_question_ids=frozenset(asked),
        remaining_guesses=remaining_guesses,
        wants_rematch=wants_rematch,
    )


def create_room(  # noqa: PLR0913
    *,
    players: Sequence[PlayerSession] | None = None,
    state: RoomState = RoomState.WAITING,
    sub_state: RoomSubState | None = None,
    mode: GameMode = GameMode.MULTI_PLAYER,
    pool: Sequence[str] | None = None,
    current_turn: str | None = None,
    pending_question: PendingQuestion | None = None,
    winner_id: str | None = None,
    end_reason: GameEndReason | None = None,
    settings: GameSettings | None = None,
    room_id: str = "room1",
    room_code: str = "ABC123",
) -> Room:
    """Create a Room with sensible defaults for testing."""
    return Room(
        id=room_id,
        room_code=room_code,
        mode=mode,
        state=state,
        sub_state=sub_state,
        players=tuple(players) if players is not None else (create_player("alice"),),
        candidate_pool=tuple(pool) if pool is not None else tuple(FOOTBALLER_IDS),
        current_turn_player_id=current_turn,
        pending_question=pending_question,
        winner_id=winner_id,
        end_reason=end_reason,
        settings=settings or GameSettings(),
    )


def create_in_progress_room(
    *,
    alice_secret: str = "f01",
    bob_secret: str = "f24",
    current_turn: str = "alice",
    settings: GameSettings | None = None,
    alice: PlayerSession | None = None,
    bob: PlayerSession | None = None,
    pending_question: PendingQuestion | None = None,
) -> Room:
    """Create a two-player IN_PROGRESS room with both secrets chosen."""
    remaining = (settings or GameSettings()).max_guesses
    return create_room(
        players=(
            alice or create_player("alice", secret=alice_secret, remaining_guesses=remaining),
            bob or create_player("bob", secret=bob_secret, remaining_guesses=remaining),
        ),
        state=RoomState.IN_PROGRESS,
        current_turn=current_turn,
        pending_question=pending_question,
        settings=settings,
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def footballers():
    return build_footballers()


@pytest.fixture
def questions():
    return build_questions()


@pytest.fixture
def context():
    return create_context()


@pytest.fixture
def store():
    return RoomStore()


@pytest.fixture
def bus():
    return InMemoryNotificationBus()


@pytest.fixture
def service(store, bus):
    return GuessWhoService(
        store,
        InMemoryCandidateCatalog(build_footballers()),
        InMemoryQuestionCatalog(build_questions()),
        bus,
        seed=42,
        room_ttl_seconds=60,
    )
