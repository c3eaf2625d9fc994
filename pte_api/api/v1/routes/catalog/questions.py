# pte_api/api/v1/routes/catalog/questions.py

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.api.dependencies.subscription import get_current_subscription, has_premium_access
from pte_api.api.v1.routes.auth.auth import get_current_user
from pte_api.core.response import ResponseModel, error_response, success_response
from pte_api.db.deps import get_db
from pte_api.models.subscription import Subscription
from pte_api.models.user import User
from pte_api.services.catalog import (
    MAX_PAGE_SIZE,
    categorize_questions,
    get_question,
    list_questions,
    question_is_premium,
    questions_of_type,
    serialize_question,
)
from pte_api.utils.enums import Difficulty, Role, Section

router = APIRouter(prefix="/questions", tags=["questions"])


def _is_admin(user: User) -> bool:
    return Role(user.role) == Role.admin


@router.get("", response_model=ResponseModel)
async def get_questions(
    section: Optional[Section] = None,
    question_type: Optional[str] = None,
    difficulty: Optional[Difficulty] = None,
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    subscription: Subscription = Depends(get_current_subscription),
    db: AsyncSession = Depends(get_db),
):
    """
    Paginated question bank.

    Method/Path: GET /api/v1/questions
    Query: section, question_type, difficulty, search, page, page_size (max 100)
    Returns: { items, page, page_size, total, total_pages }
    Questions of premium tests are left out on the free plan.
    """
    result = await list_questions(
        db,
        section=section,
        question_type=question_type,
        page=page,
        page_size=page_size,
        difficulty=difficulty,
        search=search,
        include_premium=has_premium_access(subscription),
    )
    include_answer = _is_admin(current_user)
    result["items"] = [serialize_question(q, include_answer) for q in result["items"]]
    return success_response(msg="Questions fetched", data=result)


@router.get("/categorized", response_model=ResponseModel)
async def get_categorized_questions(
    question_type: str = Query(..., min_length=1),
    current_user: User = Depends(get_current_user),
    subscription: Subscription = Depends(get_current_subscription),
    db: AsyncSession = Depends(get_db),
):
    """Weekly and monthly prediction lists for one task type."""
    rows = await questions_of_type(
        db, question_type, include_premium=has_premium_access(subscription)
    )
    include_answer = _is_admin(current_user)
    questions = [serialize_question(q, include_answer) for q in rows]
    return success_response(msg="Questions fetched", data=categorize_questions(questions))


@router.get("/{question_id}", response_model=ResponseModel)
async def get_question_detail(
    question_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    subscription: Subscription = Depends(get_current_subscription),
    db: AsyncSession = Depends(get_db),
):
    question = await get_question(db, question_id)
    if question is None:
        return error_response(msg="Question not found", status_code=404, error_code="QUESTION_NOT_FOUND")
    if not has_premium_access(subscription) and await question_is_premium(db, question):
        return error_response(
            msg="This question belongs to a premium test",
            status_code=403,
            error_code="PREMIUM_REQUIRED",
        )
    return success_response(
        msg="Question fetched",
        data=serialize_question(question, include_answer=_is_admin(current_user)),
    )
