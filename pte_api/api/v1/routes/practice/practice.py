# pte_api/api/v1/routes/practice/practice.py

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
from pte_api.schemas.attempts import AnswerPayload
from pte_api.services.ai_service.orchestrator import ScoringOrchestrator, get_scoring_orchestrator
from pte_api.services.catalog import get_question, question_is_premium
from pte_api.services.practice import (
    list_practice_attempts,
    serialize_practice_attempt,
    submit_practice_answer,
)

router = APIRouter(prefix="/practice", tags=["practice"])


@router.post("/{question_id}/attempts", response_model=ResponseModel)
async def practice_question(
    question_id: uuid.UUID,
    payload: AnswerPayload,
    current_user: User = Depends(get_current_user),
    subscription: Subscription = Depends(get_current_subscription),
    db: AsyncSession = Depends(get_db),
    orchestrator: ScoringOrchestrator = Depends(get_scoring_orchestrator),
):
    """
    Score a single practice answer outside of a test.

    Method/Path: POST /api/v1/practice/{question_id}/attempts
    Returns 201 with the stored practice attempt (score, subscores, feedback).
    """
    question = await get_question(db, question_id)
    if question is None or not question.is_active:
        return error_response(msg="Question not found", status_code=404, error_code="QUESTION_NOT_FOUND")
    if not has_premium_access(subscription) and await question_is_premium(db, question):
        return error_response(
            msg="This question belongs to a premium test",
            status_code=403,
            error_code="PREMIUM_REQUIRED",
        )
    try:
        practice = await submit_practice_answer(db, current_user, question, payload, orchestrator)
    except ValueError as e:
        return error_response(msg=str(e), status_code=400, error_code="INVALID_ANSWER")
    return success_response(
        msg="Practice answer scored", data=serialize_practice_attempt(practice), status_code=201
    )


@router.get("/attempts", response_model=ResponseModel)
async def practice_history(
    question_id: Optional[uuid.UUID] = None,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await list_practice_attempts(db, current_user, question_id=question_id, limit=limit)
    return success_response(msg="Practice history", data=[serialize_practice_attempt(p) for p in rows])
