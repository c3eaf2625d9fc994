"""User progress tracking and dashboard statistics."""

import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.models.attempt import Attempt
from pte_api.models.pte_question import PteQuestion
from pte_api.models.pte_test import PteTest
from pte_api.models.user_progress import UserProgress
from pte_api.services.scoring.normalize import clamp_to_90
from pte_api.utils.datetime_utils import as_utc, get_current_utc_datetime
from pte_api.utils.enums import AttemptStatus, PteTestType, Section

SECTION_FIELDS = {
    Section.speaking: "speaking_score",
    Section.writing: "writing_score",
    Section.reading: "reading_score",
    Section.listening: "listening_score",
}


async def get_or_create_progress(db: AsyncSession, user_id: uuid.UUID) -> UserProgress:
    result = await db.execute(select(UserProgress).where(UserProgress.user_id == user_id))
    progress = result.scalars().first()
    if progress is None:
        progress = UserProgress(id=uuid.uuid4(), user_id=user_id)
        db.add(progress)
        await db.flush()
    return progress


def touch_activity(progress: UserProgress, now: Optional[datetime] = None) -> None:
    """Advance the daily study streak and stamp the activity time."""
    now = now or get_current_utc_datetime()
    last = as_utc(progress.last_active_at)
    if last is None:
        progress.study_streak = 1
    else:
        gap = (now.date() - last.date()).days
        if gap == 1:
            progress.study_streak = (progress.study_streak or 0) + 1
        elif gap > 1:
            progress.study_streak = 1
        elif not progress.study_streak:
            progress.study_streak = 1
    progress.last_active_at = now


async def record_completed_attempt(
    db: AsyncSession, attempt: Attempt, answers_count: int
) -> UserProgress:
    progress = await get_or_create_progress(db, attempt.user_id)
    progress.tests_completed = (progress.tests_completed or 0) + 1
    progress.questions_answered = (progress.questions_answered or 0) + answers_count
    for section, field in SECTION_FIELDS.items():
        score = getattr(attempt, field)
        if score is not None:
            setattr(progress, field, score)
    if attempt.total_score is not None:
        progress.overall_score = attempt.total_score

    started, completed = as_utc(attempt.started_at), as_utc(attempt.completed_at)
    if started and completed and completed > started:
        progress.total_study_time = (progress.total_study_time or 0) + int(
            (completed - started) / timedelta(minutes=1)
        )
    touch_activity(progress, completed)
    db.add(progress)
    return progress


async def record_practice_answer(db: AsyncSession, user_id: uuid.UUID) -> UserProgress:
    progress = await get_or_create_progress(db, user_id)
    progress.questions_answered = (progress.questions_answered or 0) + 1
    touch_activity(progress)
    db.add(progress)
    return progress


def serialize_progress(progress: UserProgress) -> dict:
    return {
        "overall_score": progress.overall_score or 0,
        "speaking_score": progress.speaking_score or 0,
        "writing_score": progress.writing_score or 0,
        "reading_score": progress.reading_score or 0,
        "listening_score": progress.listening_score or 0,
        "tests_completed": progress.tests_completed or 0,
        "questions_answered": progress.questions_answered or 0,
        "study_streak": progress.study_streak or 0,
        "total_study_time": progress.total_study_time or 0,
        "last_active_at": as_utc(progress.last_active_at),
    }


async def dashboard_stats(db: AsyncSession, user_id: uuid.UUID) -> dict:
    section_rows = await db.execute(
        select(PteQuestion.section, func.count())
        .where(PteQuestion.is_active.is_(True))
        .group_by(PteQuestion.section)
    )
    per_section = {s.value: 0 for s in Section}
    for section, count in section_rows.all():
        per_section[Section(section).value] = count

    mock_tests = (
        await db.execute(
            select(func.count()).select_from(PteTest).where(PteTest.test_type == PteTestType.mock)
        )
    ).scalar_one()

    completed = await db.execute(
        select(func.count(), func.avg(Attempt.total_score), func.max(Attempt.completed_at)).where(
            Attempt.user_id == user_id, Attempt.status == AttemptStatus.completed
        )
    )
    count, average, last_completed = completed.one()

    return {
        "total_questions": sum(per_section.values()),
        "questions_by_section": per_section,
        "mock_tests": mock_tests,
        "completed_attempts": count or 0,
        "average_score": clamp_to_90(float(average)) if average is not None else None,
        "last_completed_at": as_utc(last_completed),
    }
