"""
AI opponent decision making for single-player rooms.

The AI answers truthfully, asks the question that best splits its
remaining candidates (or a random one on easy), and guesses once few
enough candidates remain.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from game.logic.actions import AnswerQuestionAction, AskQuestionAction, MakeGuessAction, SelectSecretAction
from game.logic.enums import Difficulty
from game.logic.evaluator import evaluate, matching_ids

if TYPE_CHECKING:
    from game.logic.catalog import CatalogContext
    from game.logic.state import Question, Room

AI_PLAYER_ID = "ai"
AI_DISPLAY_NAME = "Coach Bot"

# guess once remaining candidates drop to this many
GUESS_THRESHOLDS: dict[Difficulty, int] = {
    Difficulty.EASY: 3,
    Difficulty.MEDIUM: 2,
    Difficulty.HARD: 1,
}


class AIPlayer:
    """
    AI opponent with difficulty-dependent question choice.

    Randomness comes from the injected rng so games are reproducible
    under a fixed seed.
    """

    def __init__(self, difficulty: Difficulty = Difficulty.MEDIUM, rng: random.Random | None = None) -> None:
        self.difficulty = difficulty
        self._rng = rng or random.Random()  # noqa: S311

    def choose_secret(self, room: Room, player_id: str) -> SelectSecretAction:
        """Pick a secret uniformly from the pool, avoiding the opponent's."""
        opponent = room.opponent_of(player_id)
        taken = opponent.secret_entity_id if opponent is not None else None
        choices = [c for c in room.candidate_pool if c != taken]
        return SelectSecretAction(room_id=room.id, player_id=player_id, entity_id=self._rng.choice(choices))

    def answer(self, room: Room, player_id: str, context: CatalogContext) -> AnswerQuestionAction:
        """Answer the pending question truthfully about our own secret."""
        player = room.get_player(player_id)
        if player is None or player.secret_entity_id is None or room.pending_question is None:
            raise ValueError(f"AI player {player_id} has nothing to answer in room {room.id}")
        question = context.questions[room.pending_question.question_id]
        secret = context.candidates[player.secret_entity_id]
        return AnswerQuestionAction(room_id=room.id, player_id=player_id, answer=evaluate(question, secret))

    def choose_turn_action(
        self,
        room: Room,
        player_id: str,
        context: CatalogContext,
    ) -> AskQuestionAction | MakeGuessAction:
        """Decide between asking a question and guessing."""
        remaining = list(room.remaining_candidates(player_id)) or list(room.candidate_pool)
        if len(remaining) <= GUESS_THRESHOLDS[self.difficulty]:
            return self._guess(room, player_id, remaining)

        question = self._pick_question(room, player_id, remaining, context)
        if question is None:
            return self._guess(room, player_id, remaining)
        return AskQuestionAction(room_id=room.id, player_id=player_id, question_id=question.id)

    def _guess(self, room: Room, player_id: str, remaining: list[str]) -> MakeGuessAction:
        return MakeGuessAction(room_id=room.id, player_id=player_id, entity_id=self._rng.choice(remaining))

    def _pick_question(
        self,
        room: Room,
        player_id: str,
        remaining: list[str],
        context: CatalogContext,
    ) -> Question | None:
        player = room.get_player(player_id)
        if player is None:
            return None
        max_questions = room.settings.max_questions
        if max_questions is not None and len(player.asked_question_ids) >= max_questions:
            return None
        unasked = [context.questions[qid] for qid in sorted(context.questions) if qid not in player.asked_question_ids]
        if not unasked:
            return None
        if self.difficulty == Difficulty.EASY:
            return self._rng.choice(unasked)

        # prefer the question whose yes-count is closest to half the remaining pool
        useful: list[tuple[float, Question]] = []
        for question in unasked:
            yes = len(matching_ids(question, remaining, context.candidates))
            if 0 < yes < len(remaining):
                useful.append((abs(yes - len(remaining) / 2), question))
        if not useful:
            return None
        best_score = min(score for score, _ in useful)
        return self._rng.choice([q for score, q in useful if score == best_score])
