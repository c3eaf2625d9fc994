"""Question bank and test catalog queries."""

import math
from datetime import date
from typing import Any, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pte_api.models.pte_question import PteQuestion
from pte_api.models.pte_test import PteTest
from pte_api.utils.datetime_utils import utc_today
from pte_api.utils.enums import Difficulty, PteTestType, Section

MAX_PAGE_SIZE = 100


def not_in_premium_test():
    """Filter clause: standalone questions, or questions of a free test."""
    premium_ids = select(PteTest.id).where(PteTest.is_premium.is_(True))
    return or_(PteQuestion.test_id.is_(None), PteQuestion.test_id.not_in(premium_ids))


async def question_is_premium(db: AsyncSession, question: PteQuestion) -> bool:
    if question.test_id is None:
        return False
    test = await db.get(PteTest, question.test_id)
    return bool(test is not None and test.is_premium)


async def questions_of_type(
    db: AsyncSession, question_type: str, include_premium: bool = True
) -> list[PteQuestion]:
    query = select(PteQuestion).where(
        PteQuestion.question_type == question_type, PteQuestion.is_active.is_(True)
    )
    if not include_premium:
        query = query.where(not_in_premium_test())
    result = await db.execute(query.order_by(PteQuestion.created_at.desc(), PteQuestion.id))
    return list(result.scalars().all())


async def list_questions(
    db: AsyncSession,
    section: Optional[Section] = None,
    question_type: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
    difficulty: Optional[Difficulty] = None,
    search: Optional[str] = None,
    is_active: Optional[bool] = True,
    include_premium: bool = True,
) -> dict:
    page = max(1, page)
    page_size = max(1, min(page_size, MAX_PAGE_SIZE))

    filters = [] if include_premium else [not_in_premium_test()]
    if section is not None:
        filters.append(PteQuestion.section == section)
    if question_type:
        filters.append(PteQuestion.question_type == question_type)
    if difficulty is not None:
        filters.append(PteQuestion.difficulty == difficulty)
    if is_active is not None:
        filters.append(PteQuestion.is_active == is_active)
    if search:
        filters.append(func.lower(PteQuestion.question).contains(search.strip().lower()))

    total = (
        await db.execute(select(func.count()).select_from(PteQuestion).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(PteQuestion)
        .where(*filters)
        .order_by(PteQuestion.created_at.desc(), PteQuestion.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return {
        "items": list(result.scalars().all()),
        "page": page,
        "page_size": page_size,
        "total": total,
        "total_pages": math.ceil(total / page_size) if total else 0,
    }


def categorize_questions(questions: Sequence[Any], today: Optional[date] = None) -> dict:
    """
    Split questions into weekly and monthly prediction lists.

    Each list falls back to every question when no tagged question exists.
    ``questions`` may be ORM rows or dicts carrying a ``tags`` list.
    """
    month_key = (today or utc_today()).strftime("%B").lower()

    def tags_of(q) -> list:
        tags = q.get("tags") if isinstance(q, dict) else getattr(q, "tags", None)
        return tags if isinstance(tags, list) else []

    questions = list(questions)
    weekly = [q for q in questions if "weekly_prediction" in tags_of(q)]
    monthly = [
        q
        for q in questions
        if f"prediction_{month_key}" in tags_of(q) or "monthly_prediction" in tags_of(q)
    ]
    return {
        "all": questions,
        "weekly": weekly or questions,
        "monthly": monthly or questions,
    }


async def get_question(db: AsyncSession, question_id) -> Optional[PteQuestion]:
    return await db.get(PteQuestion, question_id)


def serialize_question(question: PteQuestion, include_answer: bool = False) -> dict:
    data = {
        "id": str(question.id),
        "test_id": str(question.test_id) if question.test_id else None,
        "question": question.question,
        "question_type": question.question_type,
        "section": Section(question.section).value,
        "question_data": question.question_data or {},
        "points": question.points,
        "order_index": question.order_index,
        "difficulty": Difficulty(question.difficulty).value if question.difficulty else None,
        "tags": question.tags or [],
        "is_active": question.is_active,
    }
    if include_answer:
        data["correct_answer"] = question.correct_answer
    return data


async def list_tests(
    db: AsyncSession,
    test_type: Optional[PteTestType] = None,
    section: Optional[Section] = None,
) -> list[PteTest]:
    query = select(PteTest)
    if test_type is not None:
        query = query.where(PteTest.test_type == test_type)
    if section is not None:
        query = query.where(PteTest.section == section)
    result = await db.execute(query.order_by(PteTest.created_at.desc(), PteTest.title))
    return list(result.scalars().all())


async def get_test_with_questions(db: AsyncSession, test_id) -> Optional[PteTest]:
    result = await db.execute(
        select(PteTest).options(selectinload(PteTest.questions)).where(PteTest.id == test_id)
    )
    return result.scalars().first()


async def count_test_questions(db: AsyncSession, test_ids: Sequence) -> dict:
    if not test_ids:
        return {}
    result = await db.execute(
        select(PteQuestion.test_id, func.count())
        .where(PteQuestion.test_id.in_(list(test_ids)))
        .group_by(PteQuestion.test_id)
    )
    return {row[0]: row[1] for row in result.all()}


def serialize_test(test: PteTest, question_count: Optional[int] = None) -> dict:
    data = {
        "id": str(test.id),
        "title": test.title,
        "description": test.description,
        "test_type": PteTestType(test.test_type).value,
        "section": Section(test.section).value if test.section else None,
        "is_premium": bool(test.is_premium),
        "duration": test.duration,
    }
    if question_count is not None:
        data["question_count"] = question_count
    return data
