"""
Question evaluation against candidate footballers.

Pure functions: the same (question, candidate) pair always yields the same
answer. Used both to answer questions on behalf of the AI and to filter a
player's remaining candidates after an answer.
"""

from collections.abc import Iterable, Mapping
from enum import Enum

from game.logic.state import Footballer, Question, TraitValue


def _normalize(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        value = value.value
    return str(value).strip().casefold()


def evaluate(question: Question, candidate: Footballer) -> bool:
    """
    Return True if the candidate satisfies the question.

    Collection-valued traits match on a non-empty intersection with the
    expected values; scalar traits match on case-insensitive equality with
    any expected value. Unknown or empty traits never match.
    """
    value: TraitValue = candidate.trait_value(question.trait)
    if value is None:
        return False
    expected = {_normalize(v) for v in question.expected_values}
    if isinstance(value, tuple):
        return not expected.isdisjoint(_normalize(v) for v in value)
    return _normalize(value) in expected


def matching_ids(
    question: Question,
    candidate_ids: Iterable[str],
    candidates: Mapping[str, Footballer],
) -> frozenset[str]:
    """Return the subset of candidate_ids that answer "yes" to the question."""
    return frozenset(cid for cid in candidate_ids if cid in candidates and evaluate(question, candidates[cid]))


def eliminated_by_answer(
    question: Question,
    answer: bool,  # noqa: FBT001
    candidate_ids: Iterable[str],
    candidates: Mapping[str, Footballer],
) -> frozenset[str]:
    """
    Return the candidates whose evaluation disagrees with the given answer.

    Ids missing from the candidates mapping are left alone: without trait
    data they cannot be ruled out.
    """
    return frozenset(
        cid for cid in candidate_ids if cid in candidates and evaluate(question, candidates[cid]) != answer
    )
