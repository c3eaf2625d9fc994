"""Standalone practice answers outside of a test attempt."""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.models.practice_attempt import PracticeAttempt
from pte_api.models.pte_question import PteQuestion
from pte_api.models.user import User
from pte_api.schemas.attempts import AnswerPayload
from pte_api.services.ai_service.orchestrator import ScoringOrchestrator
from pte_api.services.answer_scoring import score_answer
from pte_api.services.progress import record_practice_answer
from pte_api.utils.datetime_utils import as_utc, get_current_utc_datetime
from pte_api.utils.enums import PracticeStage, Section


async def submit_practice_answer(
    db: AsyncSession,
    user: User,
    question: PteQuestion,
    payload: AnswerPayload,
    orchestrator: ScoringOrchestrator,
) -> PracticeAttempt:
    scored = await score_answer(question, payload, user, db, orchestrator)
    feedback = dict(scored.feedback)
    practice = PracticeAttempt(
        id=uuid.uuid4(),
        user_id=user.id,
        question_id=question.id,
        question_type=question.question_type,
        section=question.section,
        user_answer=payload.answer if payload.answer is not None else payload.text,
        transcript=payload.transcript,
        audio_key=payload.audio_key,
        duration_ms=payload.duration_ms,
        stage=PracticeStage.complete,
        score=scored.score,
        subscores=feedback.pop("subscores", None),
        feedback={
            **feedback,
            "is_correct": scored.is_correct,
            "points_earned": scored.points_earned,
            "points_possible": scored.points_possible,
        },
        submitted_at=get_current_utc_datetime(),
    )
    db.add(practice)
    await record_practice_answer(db, user.id)
    await db.commit()
    await db.refresh(practice)
    return practice


async def list_practice_attempts(
    db: AsyncSession,
    user: User,
    question_id: Optional[uuid.UUID] = None,
    limit: int = 50,
) -> list[PracticeAttempt]:
    query = select(PracticeAttempt).where(PracticeAttempt.user_id == user.id)
    if question_id is not None:
        query = query.where(PracticeAttempt.question_id == question_id)
    result = await db.execute(query.order_by(PracticeAttempt.submitted_at.desc()).limit(limit))
    return list(result.scalars().all())


def serialize_practice_attempt(practice: PracticeAttempt) -> dict:
    return {
        "id": str(practice.id),
        "question_id": str(practice.question_id),
        "question_type": practice.question_type,
        "section": Section(practice.section).value,
        "user_answer": practice.user_answer,
        "transcript": practice.transcript,
        "audio_key": practice.audio_key,
        "duration_ms": practice.duration_ms,
        "stage": PracticeStage(practice.stage).value,
        "score": practice.score,
        "subscores": practice.subscores,
        "feedback": practice.feedback,
        "submitted_at": as_utc(practice.submitted_at),
    }
