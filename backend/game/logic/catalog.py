"""
Read-only catalogs of footballers and questions.

The state machine never talks to a catalog directly. The service resolves
a room's candidate pool and the question list into a CatalogContext and
passes that snapshot into each transition.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import TypeAdapter

from game.logic.exceptions import NotFoundError, UnsupportedSettingsError
from game.logic.state import Footballer, Question

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = structlog.get_logger()

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_FOOTBALLERS_PATH = DATA_DIR / "footballers.json"
DEFAULT_QUESTIONS_PATH = DATA_DIR / "questions.json"

_footballers_adapter = TypeAdapter(list[Footballer])
_questions_adapter = TypeAdapter(list[Question])


@dataclass(frozen=True)
class CatalogContext:
    """Catalog data a single transition may consult."""

    candidates: Mapping[str, Footballer] = field(default_factory=dict)
    questions: Mapping[str, Question] = field(default_factory=dict)


class CandidateCatalog(ABC):
    """Provider of footballers and their trait values."""

    @abstractmethod
    def get_by_ids(self, ids: Iterable[str]) -> list[Footballer]:
        """Return footballers in the order of ids. Raise NotFoundError for unknown ids."""
        ...

    @abstractmethod
    def get_random(self, count: int, rng: random.Random | None = None) -> list[Footballer]:
        """Return count distinct footballers drawn at random."""
        ...


class QuestionCatalog(ABC):
    """Provider of the available questions."""

    @abstractmethod
    def get_all(self) -> list[Question]:
        ...

    def get(self, question_id: str) -> Question:
        for question in self.get_all():
            if question.id == question_id:
                return question
        raise NotFoundError(f"question {question_id} not found")


class InMemoryCandidateCatalog(CandidateCatalog):
    def __init__(self, footballers: Iterable[Footballer]) -> None:
        self._footballers: dict[str, Footballer] = {}
        for footballer in footballers:
            if footballer.id in self._footballers:
                raise ValueError(f"duplicate footballer id {footballer.id}")
            self._footballers[footballer.id] = footballer

    def __len__(self) -> int:
        return len(self._footballers)

    def get_by_ids(self, ids: Iterable[str]) -> list[Footballer]:
        result: list[Footballer] = []
        for fid in ids:
            footballer = self._footballers.get(fid)
            if footballer is None:
                raise NotFoundError(f"footballer {fid} not found")
            result.append(footballer)
        return result

    def get_random(self, count: int, rng: random.Random | None = None) -> list[Footballer]:
        if count > len(self._footballers):
            raise UnsupportedSettingsError(
                f"pool_size={count} exceeds catalog size {len(self._footballers)}",
            )
        rng = rng or random.Random()  # noqa: S311
        return rng.sample(list(self._footballers.values()), count)


class InMemoryQuestionCatalog(QuestionCatalog):
    def __init__(self, questions: Iterable[Question]) -> None:
        self._questions = {q.id: q for q in questions}

    def get_all(self) -> list[Question]:
        return list(self._questions.values())

    def get(self, question_id: str) -> Question:
        question = self._questions.get(question_id)
        if question is None:
            raise NotFoundError(f"question {question_id} not found")
        return question


def load_footballers(path: Path | str = DEFAULT_FOOTBALLERS_PATH) -> InMemoryCandidateCatalog:
    """Load a footballer catalog from a JSON array file."""
    footballers = _footballers_adapter.validate_json(Path(path).read_bytes())
    logger.info("loaded footballer catalog", path=str(path), count=len(footballers))
    return InMemoryCandidateCatalog(footballers)


def load_questions(path: Path | str = DEFAULT_QUESTIONS_PATH) -> InMemoryQuestionCatalog:
    """Load a question catalog from a JSON array file."""
    questions = _questions_adapter.validate_json(Path(path).read_bytes())
    logger.info("loaded question catalog", path=str(path), count=len(questions))
    return InMemoryQuestionCatalog(questions)


def build_context(
    candidate_ids: Iterable[str],
    candidate_catalog: CandidateCatalog,
    question_catalog: QuestionCatalog,
) -> CatalogContext:
    """Resolve a room's candidate pool and all questions into a CatalogContext."""
    candidates = {f.id: f for f in candidate_catalog.get_by_ids(candidate_ids)}
    questions = {q.id: q for q in question_catalog.get_all()}
    return CatalogContext(candidates=candidates, questions=questions)
