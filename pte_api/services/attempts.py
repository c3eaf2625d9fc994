"""Mock and section test attempts: start, answer, complete, abandon."""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pte_api.models.attempt import Attempt, AttemptAnswer
from pte_api.models.pte_question import PteQuestion
from pte_api.models.pte_test import PteTest
from pte_api.models.user import User
from pte_api.schemas.attempts import AnswerPayload
from pte_api.services.ai_service.orchestrator import ScoringOrchestrator
from pte_api.services.answer_scoring import score_answer
from pte_api.services.progress import SECTION_FIELDS, record_completed_attempt
from pte_api.services.scoring.normalize import clamp_to_90
from pte_api.utils.datetime_utils import as_utc, get_current_utc_datetime
from pte_api.utils.enums import AttemptStatus, Section

logger = logging.getLogger(__name__)


class AttemptError(Exception):
    """Attempt operation rejected; carries the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int, error_code: str):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code


async def get_owned_attempt(
    db: AsyncSession, attempt_id: uuid.UUID, user: User, with_answers: bool = False
) -> Attempt:
    query = select(Attempt).where(Attempt.id == attempt_id)
    if with_answers:
        query = query.options(selectinload(Attempt.answers))
    attempt = (await db.execute(query)).scalars().first()
    if attempt is None:
        raise AttemptError("Attempt not found", 404, "ATTEMPT_NOT_FOUND")
    if attempt.user_id != user.id:
        raise AttemptError("You do not have access to this attempt", 403, "FORBIDDEN")
    return attempt


async def start_attempt(db: AsyncSession, user: User, test: PteTest) -> tuple[Attempt, bool]:
    """Return the user's open attempt for ``test`` or a new one; the flag is True when created."""
    result = await db.execute(
        select(Attempt).where(
            Attempt.user_id == user.id,
            Attempt.test_id == test.id,
            Attempt.status == AttemptStatus.in_progress,
        )
    )
    existing = result.scalars().first()
    if existing is not None:
        return existing, False

    attempt = Attempt(
        id=uuid.uuid4(),
        user_id=user.id,
        test_id=test.id,
        status=AttemptStatus.in_progress,
        started_at=get_current_utc_datetime(),
    )
    db.add(attempt)
    await db.commit()
    await db.refresh(attempt)
    logger.info(f"User {user.id} started attempt {attempt.id} on test {test.id}")
    return attempt, True


async def submit_answer(
    db: AsyncSession,
    attempt: Attempt,
    question_id: uuid.UUID,
    payload: AnswerPayload,
    user: User,
    orchestrator: ScoringOrchestrator,
) -> AttemptAnswer:
    if attempt.user_id != user.id:
        raise AttemptError("You do not have access to this attempt", 403, "FORBIDDEN")
    if attempt.status != AttemptStatus.in_progress:
        raise AttemptError("This attempt is no longer in progress", 409, "ATTEMPT_NOT_IN_PROGRESS")

    question = await db.get(PteQuestion, question_id)
    if question is None or question.test_id != attempt.test_id:
        raise AttemptError("Question does not belong to this test", 400, "QUESTION_NOT_IN_TEST")

    scored = await score_answer(question, payload, user, db, orchestrator)

    existing = (
        await db.execute(
            select(AttemptAnswer).where(
                AttemptAnswer.attempt_id == attempt.id,
                AttemptAnswer.question_id == question.id,
            )
        )
    ).scalars().first()
    answer = existing or AttemptAnswer(id=uuid.uuid4(), attempt_id=attempt.id, question_id=question.id)
    answer.user_answer = payload.answer if payload.answer is not None else payload.text
    answer.transcript = payload.transcript
    answer.audio_key = payload.audio_key
    answer.is_correct = scored.is_correct
    answer.points_earned = scored.points_earned
    answer.points_possible = scored.points_possible
    answer.score = scored.score
    answer.ai_feedback = scored.feedback
    answer.submitted_at = get_current_utc_datetime()
    db.add(answer)
    await db.commit()
    await db.refresh(answer)
    return answer


def compute_section_scores(rows: list[tuple[Section, Optional[int]]]) -> dict:
    """
    Mean 0-90 score per section and the total over sections that have answers.

    ``rows`` is a list of (section, score) pairs, one per answer.
    """
    buckets: dict[Section, list[int]] = {}
    for section, score in rows:
        if score is None:
            continue
        buckets.setdefault(Section(section), []).append(score)
    sections = {s: clamp_to_90(sum(v) / len(v)) for s, v in buckets.items()}
    total = clamp_to_90(sum(sections.values()) / len(sections)) if sections else None
    return {"sections": sections, "total": total}


async def complete_attempt(db: AsyncSession, attempt: Attempt, user: User) -> Attempt:
    if attempt.user_id != user.id:
        raise AttemptError("You do not have access to this attempt", 403, "FORBIDDEN")
    if attempt.status != AttemptStatus.in_progress:
        raise AttemptError("This attempt is no longer in progress", 409, "ATTEMPT_NOT_IN_PROGRESS")

    result = await db.execute(
        select(PteQuestion.section, AttemptAnswer.score)
        .join(PteQuestion, PteQuestion.id == AttemptAnswer.question_id)
        .where(AttemptAnswer.attempt_id == attempt.id)
    )
    rows = result.all()
    scores = compute_section_scores(rows)

    for section, field in SECTION_FIELDS.items():
        setattr(attempt, field, scores["sections"].get(section))
    attempt.total_score = scores["total"]
    attempt.status = AttemptStatus.completed
    attempt.completed_at = get_current_utc_datetime()
    db.add(attempt)
    await record_completed_attempt(db, attempt, answers_count=len(rows))
    await db.commit()
    await db.refresh(attempt)
    return attempt


async def abandon_attempt(db: AsyncSession, attempt: Attempt, user: User) -> Attempt:
    if attempt.user_id != user.id:
        raise AttemptError("You do not have access to this attempt", 403, "FORBIDDEN")
    if attempt.status != AttemptStatus.in_progress:
        raise AttemptError("This attempt is no longer in progress", 409, "ATTEMPT_NOT_IN_PROGRESS")
    attempt.status = AttemptStatus.abandoned
    attempt.completed_at = get_current_utc_datetime()
    db.add(attempt)
    await db.commit()
    await db.refresh(attempt)
    return attempt


async def list_attempts(
    db: AsyncSession, user: User, status: Optional[AttemptStatus] = None
) -> list[Attempt]:
    query = select(Attempt).where(Attempt.user_id == user.id)
    if status is not None:
        query = query.where(Attempt.status == status)
    result = await db.execute(query.order_by(Attempt.started_at.desc()))
    return list(result.scalars().all())


def serialize_answer(answer: AttemptAnswer) -> dict:
    return {
        "id": str(answer.id),
        "question_id": str(answer.question_id),
        "user_answer": answer.user_answer,
        "transcript": answer.transcript,
        "audio_key": answer.audio_key,
        "is_correct": answer.is_correct,
        "points_earned": answer.points_earned,
        "points_possible": answer.points_possible,
        "score": answer.score,
        "ai_feedback": answer.ai_feedback,
        "submitted_at": as_utc(answer.submitted_at),
    }


def serialize_attempt(attempt: Attempt, answers: Optional[list[AttemptAnswer]] = None) -> dict:
    data = {
        "id": str(attempt.id),
        "test_id": str(attempt.test_id),
        "status": AttemptStatus(attempt.status).value,
        "started_at": as_utc(attempt.started_at),
        "completed_at": as_utc(attempt.completed_at),
        "total_score": attempt.total_score,
        "speaking_score": attempt.speaking_score,
        "writing_score": attempt.writing_score,
        "reading_score": attempt.reading_score,
        "listening_score": attempt.listening_score,
    }
    if answers is not None:
        data["answers"] = [serialize_answer(a) for a in answers]
    return data
