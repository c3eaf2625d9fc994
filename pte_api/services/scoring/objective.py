"""Deterministic scoring of reading and listening items with PTE partial credit."""

from collections import Counter
from dataclasses import dataclass
from typing import Any

from pte_api.services.scoring.normalize import scale_to_90
from pte_api.services.scoring.transcript import tokenize


@dataclass(frozen=True)
class ObjectiveResult:
    earned: int
    possible: int
    is_correct: bool
    score_90: int


def _norm(value: Any) -> str:
    return " ".join(str(value).strip().lower().split()) if value is not None else ""


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, dict):
        # {"1": "word", "2": "word"} keyed blanks, ordered by key
        return [value[k] for k in sorted(value, key=lambda k: (len(str(k)), str(k)))]
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _result(earned: int, possible: int) -> ObjectiveResult:
    earned = max(0, earned)
    return ObjectiveResult(
        earned=earned,
        possible=possible,
        is_correct=possible > 0 and earned == possible,
        score_90=scale_to_90(earned, possible),
    )


def _plus_minus(user: Any, key: Any) -> ObjectiveResult:
    keys = {_norm(k) for k in _as_list(key)}
    chosen = {_norm(c) for c in _as_list(user)}
    earned = len(chosen & keys) - len(chosen - keys)
    return _result(earned, len(keys))


def _single_choice(user: Any, key: Any) -> ObjectiveResult:
    answer = _as_list(user)
    expected = _as_list(key)
    ok = bool(answer) and bool(expected) and _norm(answer[0]) == _norm(expected[0])
    return _result(1 if ok else 0, 1)


def _blanks(user: Any, key: Any) -> ObjectiveResult:
    expected = _as_list(key)
    given = _as_list(user)
    earned = sum(
        1 for i, answer in enumerate(expected) if i < len(given) and _norm(given[i]) == _norm(answer)
    )
    return _result(earned, len(expected))


def _reorder(user: Any, key: Any) -> ObjectiveResult:
    expected = [_norm(x) for x in _as_list(key)]
    given = [_norm(x) for x in _as_list(user)]
    pairs = set(zip(expected, expected[1:]))
    earned = sum(1 for pair in zip(given, given[1:]) if pair in pairs)
    return _result(earned, len(pairs))


def _dictation(user: Any, key: Any) -> ObjectiveResult:
    expected = Counter(tokenize(" ".join(str(k) for k in _as_list(key))))
    given = Counter(tokenize(" ".join(str(u) for u in _as_list(user))))
    earned = sum((expected & given).values())
    return _result(earned, sum(expected.values()))


def _exact(user: Any, key: Any) -> ObjectiveResult:
    ok = key is not None and _norm(user) == _norm(key)
    return _result(1 if ok else 0, 1)


_SCORERS = {
    "reading_multiple_choice_single": _single_choice,
    "listening_multiple_choice_single": _single_choice,
    "highlight_correct_summary": _single_choice,
    "select_missing_word": _single_choice,
    "reading_multiple_choice_multiple": _plus_minus,
    "listening_multiple_choice_multiple": _plus_minus,
    "highlight_incorrect_words": _plus_minus,
    "reading_fill_in_blanks": _blanks,
    "reading_writing_fill_in_blanks": _blanks,
    "listening_fill_in_blanks": _blanks,
    "reorder_paragraphs": _reorder,
    "write_from_dictation": _dictation,
}


def score_objective(question_type: str, user_answer: Any, correct_answer: Any) -> ObjectiveResult:
    scorer = _SCORERS.get(question_type, _exact)
    return scorer(user_answer, correct_answer)


def basic_feedback(is_correct: bool) -> dict:
    if is_correct:
        return {
            "suggestions": ["Great job! Keep practicing similar questions to build speed."],
            "strengths": ["Accurate answer"],
            "areas_for_improvement": [],
        }
    return {
        "suggestions": [
            "Review the passage for keywords and context clues.",
            "Eliminate clearly wrong options before choosing.",
        ],
        "strengths": [],
        "areas_for_improvement": ["Comprehension accuracy"],
    }
