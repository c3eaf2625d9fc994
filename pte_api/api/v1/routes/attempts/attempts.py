# pte_api/api/v1/routes/attempts/attempts.py

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.api.dependencies.subscription import get_current_subscription, has_premium_access
from pte_api.api.v1.routes.auth.auth import get_current_user
from pte_api.core.response import ResponseModel, error_response, success_response
from pte_api.db.deps import get_db
from pte_api.models.pte_test import PteTest
from pte_api.models.subscription import Subscription
from pte_api.models.user import User
from pte_api.schemas.attempts import AttemptAnswerRequest, StartAttemptRequest
from pte_api.services.ai_service.orchestrator import ScoringOrchestrator, get_scoring_orchestrator
from pte_api.services.attempts import (
    abandon_attempt,
    complete_attempt,
    get_owned_attempt,
    list_attempts,
    serialize_answer,
    serialize_attempt,
    start_attempt,
    submit_answer,
)
from pte_api.utils.enums import AttemptStatus

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/attempts", tags=["attempts"])


@router.post("", response_model=ResponseModel)
async def start_test_attempt(
    req: StartAttemptRequest,
    current_user: User = Depends(get_current_user),
    subscription: Subscription = Depends(get_current_subscription),
    db: AsyncSession = Depends(get_db),
):
    """
    Start (or resume) an attempt on a test.

    Method/Path: POST /api/v1/attempts
    Returns 201 with a new attempt, 200 when an in-progress one is resumed.
    """
    test = await db.get(PteTest, req.test_id)
    if test is None:
        return error_response(msg="Test not found", status_code=404, error_code="TEST_NOT_FOUND")
    if test.is_premium and not has_premium_access(subscription):
        return error_response(
            msg="This test requires a premium plan",
            status_code=403,
            error_code="PREMIUM_REQUIRED",
        )
    attempt, created = await start_attempt(db, current_user, test)
    return success_response(
        msg="Attempt started" if created else "Attempt resumed",
        data=serialize_attempt(attempt),
        status_code=201 if created else 200,
    )


@router.get("", response_model=ResponseModel)
async def get_attempt_history(
    status: Optional[AttemptStatus] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    attempts = await list_attempts(db, current_user, status=status)
    return success_response(msg="Attempts fetched", data=[serialize_attempt(a) for a in attempts])


@router.get("/{attempt_id}", response_model=ResponseModel)
async def get_attempt_detail(
    attempt_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    attempt = await get_owned_attempt(db, attempt_id, current_user, with_answers=True)
    return success_response(msg="Attempt fetched", data=serialize_attempt(attempt, attempt.answers))


@router.post("/{attempt_id}/answers", response_model=ResponseModel)
async def answer_question(
    attempt_id: uuid.UUID,
    req: AttemptAnswerRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    orchestrator: ScoringOrchestrator = Depends(get_scoring_orchestrator),
):
    """
    Submit (or replace) the answer to one question of the attempt.

    Objective items are scored locally; speaking and writing items use one AI credit.
    """
    attempt = await get_owned_attempt(db, attempt_id, current_user)
    try:
        answer = await submit_answer(db, attempt, req.question_id, req, current_user, orchestrator)
    except ValueError as e:
        return error_response(msg=str(e), status_code=400, error_code="INVALID_ANSWER")
    return success_response(msg="Answer saved", data=serialize_answer(answer))


@router.post("/{attempt_id}/complete", response_model=ResponseModel)
async def complete_test_attempt(
    attempt_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    attempt = await get_owned_attempt(db, attempt_id, current_user)
    attempt = await complete_attempt(db, attempt, current_user)
    logger.info(f"Attempt {attempt.id} completed with total score {attempt.total_score}")
    return success_response(msg="Attempt completed", data=serialize_attempt(attempt))


@router.post("/{attempt_id}/abandon", response_model=ResponseModel)
async def abandon_test_attempt(
    attempt_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    attempt = await get_owned_attempt(db, attempt_id, current_user)
    attempt = await abandon_attempt(db, attempt, current_user)
    return success_response(msg="Attempt abandoned", data=serialize_attempt(attempt))
