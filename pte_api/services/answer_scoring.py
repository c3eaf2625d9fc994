"""Score one candidate answer to a bank question, objectively or with AI."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.models.pte_question import PteQuestion
from pte_api.models.user import User
from pte_api.schemas.attempts import AnswerPayload
from pte_api.schemas.scoring import ListeningInput, ReadingInput
from pte_api.services.ai_service.orchestrator import ScoringOrchestrator
from pte_api.services.credits import consume_ai_credit, ensure_credit_available
from pte_api.services.scoring.actions import score_speaking_action, score_writing_action
from pte_api.services.scoring.objective import basic_feedback, score_objective
from pte_api.services.usage import record_scoring_usage
from pte_api.utils.enums import (
    QuestionType,
    RECORDING_LIMIT_SECONDS,
    SPEAKING_TYPES,
    Section,
    WRITING_TYPES,
)

logger = logging.getLogger(__name__)

PTE_MAX = 90


@dataclass
class ScoredAnswer:
    score: int
    points_earned: int
    points_possible: int
    is_correct: Optional[bool]
    feedback: dict = field(default_factory=dict)
    ai_scored: bool = False


def _question_text(question: PteQuestion) -> Optional[str]:
    data = question.question_data or {}
    return data.get("text") or data.get("passage") or question.question


def _recording_limit_ms(question_type: str) -> Optional[int]:
    try:
        seconds = RECORDING_LIMIT_SECONDS.get(QuestionType(question_type))
    except ValueError:
        return None
    return seconds * 1000 if seconds else None


async def score_answer(
    question: PteQuestion,
    payload: AnswerPayload,
    user: User,
    db: AsyncSession,
    orchestrator: ScoringOrchestrator,
) -> ScoredAnswer:
    """
    Score ``payload`` against ``question``.

    Speaking and writing answers cost one AI credit, taken only after the
    providers returned a score. Raises ValueError for unusable input,
    CreditLimitExceeded when the allowance is spent and
    ScoringUnavailableError when no provider answered.
    """
    qt = question.question_type
    speaking = {t.value for t in SPEAKING_TYPES}
    writing = {t.value for t in WRITING_TYPES}

    if qt in speaking:
        transcript = (payload.transcript or "").strip()
        if not transcript:
            raise ValueError("No speech detected. Record your answer and try again.")
        limit = _recording_limit_ms(qt)
        if limit and payload.duration_ms and payload.duration_ms > limit:
            raise ValueError(f"Recording exceeded the {limit // 1000} second limit for this task.")
        ensure_credit_available(user)
        data = question.question_data or {}
        result = await score_speaking_action(
            orchestrator,
            type=qt,
            transcript=transcript,
            prompt_text=_question_text(question),
            situation=data.get("situation"),
            duration_ms=payload.duration_ms,
        )
        await consume_ai_credit(user, db)
        await record_scoring_usage(db, user, result, question_type=qt)
        return ScoredAnswer(
            score=result["overall"],
            points_earned=result["overall"],
            points_possible=PTE_MAX,
            is_correct=None,
            feedback=result,
            ai_scored=True,
        )

    if qt in writing:
        text = payload.text if payload.text is not None else payload.answer
        if not isinstance(text, str) or not text.strip():
            raise ValueError("Response text is empty.")
        ensure_credit_available(user)
        result = await score_writing_action(
            orchestrator, type=qt, response_text=text, prompt_text=_question_text(question)
        )
        await consume_ai_credit(user, db)
        await record_scoring_usage(db, user, result, question_type=qt)
        return ScoredAnswer(
            score=result["overall"],
            points_earned=result["overall"],
            points_possible=PTE_MAX,
            is_correct=None,
            feedback=result,
            ai_scored=True,
        )

    if payload.answer is None:
        raise ValueError("An answer is required for this question.")
    outcome = score_objective(qt, payload.answer, question.correct_answer)
    feedback: dict[str, Any] = basic_feedback(outcome.is_correct)
    if payload.explain:
        feedback["explanation"] = await _explain(question, payload.answer, user, db, orchestrator)
    return ScoredAnswer(
        score=outcome.score_90,
        points_earned=outcome.earned,
        points_possible=outcome.possible,
        is_correct=outcome.is_correct,
        feedback=feedback,
    )


async def _explain(
    question: PteQuestion,
    answer: Any,
    user: User,
    db: AsyncSession,
    orchestrator: ScoringOrchestrator,
) -> dict:
    ensure_credit_available(user)
    data = question.question_data or {}
    common = dict(
        type=question.question_type,
        question=question.question,
        options=data.get("options"),
        user_answer=answer,
        correct_answer=question.correct_answer,
    )
    if question.section == Section.listening:
        kind, input = "listening", ListeningInput(transcript=data.get("transcript"), **common)
    else:
        kind, input = "reading", ReadingInput(passage=data.get("passage") or data.get("text"), **common)
    result = await orchestrator.score(kind, input)
    await consume_ai_credit(user, db)
    await record_scoring_usage(db, user, result, question_type=question.question_type)
    return {
        "text": result.get("rationale"),
        "key_points": (result.get("meta") or {}).get("key_points", []),
        "strategies": (result.get("meta") or {}).get("strategies", []),
        "provider": (result.get("meta") or {}).get("provider"),
    }
