# pte_api/api/v1/routes/scoring/scoring.py

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.api.v1.routes.auth.auth import get_current_user
from pte_api.core.response import ResponseModel, error_response, success_response
from pte_api.db.deps import get_db
from pte_api.models.user import User
from pte_api.schemas.scoring import SpeakingScoreRequest, WritingScoreRequest
from pte_api.services.ai_service.base import ProviderError, ScoringUnavailableError
from pte_api.services.ai_service.orchestrator import ScoringOrchestrator, get_scoring_orchestrator
from pte_api.services.credits import consume_ai_credit, ensure_credit_available, remaining_credits
from pte_api.services.scoring.actions import score_speaking_action, score_writing_action
from pte_api.services.usage import record_scoring_usage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/score", tags=["scoring"])


async def _run_scoring(coro, user: User, db: AsyncSession, question_type: str):
    """Await a scoring action and map its failures onto the response envelope."""
    try:
        result = await coro
    except ValueError as e:
        return None, error_response(msg=str(e), status_code=400, error_code="INVALID_INPUT")
    except ScoringUnavailableError as e:
        logger.error(f"Scoring unavailable for {question_type}: {e}")
        return None, error_response(
            msg="AI scoring is temporarily unavailable. Please try again later.",
            status_code=503,
            error_code="SCORING_UNAVAILABLE",
        )
    except ProviderError as e:
        logger.error(f"Provider error while scoring {question_type}: {e}")
        return None, error_response(msg=str(e), status_code=502, error_code="PROVIDER_ERROR")

    await consume_ai_credit(user, db)
    await record_scoring_usage(db, user, result, question_type=question_type)
    result["credits_remaining"] = remaining_credits(user)
    return result, None


@router.post("/speaking", response_model=ResponseModel)
async def score_speaking(
    req: SpeakingScoreRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    orchestrator: ScoringOrchestrator = Depends(get_scoring_orchestrator),
):
    """
    Score a speaking transcript on the 0-90 PTE scale.

    Method/Path: POST /api/v1/score/speaking
    Body: { type, transcript, prompt_text?, situation?, duration_ms?, audio_url? }
    Uses one AI credit on success.
    """
    ensure_credit_available(current_user)
    result, failure = await _run_scoring(
        score_speaking_action(
            orchestrator,
            type=req.type,
            transcript=req.transcript,
            prompt_text=req.prompt_text,
            situation=req.situation,
            duration_ms=req.duration_ms,
            audio_url=req.audio_url,
        ),
        current_user,
        db,
        req.type,
    )
    if failure is not None:
        return failure
    return success_response(msg="Speaking scored", data=result)


@router.post("/writing", response_model=ResponseModel)
async def score_writing(
    req: WritingScoreRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    orchestrator: ScoringOrchestrator = Depends(get_scoring_orchestrator),
):
    """Score a written response; PTE form rules are applied locally."""
    ensure_credit_available(current_user)
    result, failure = await _run_scoring(
        score_writing_action(
            orchestrator,
            type=req.type,
            response_text=req.response_text,
            prompt_text=req.prompt_text,
        ),
        current_user,
        db,
        req.type,
    )
    if failure is not None:
        return failure
    return success_response(msg="Writing scored", data=result)


@router.get("/providers", response_model=ResponseModel)
async def provider_health(
    current_user: User = Depends(get_current_user),
    orchestrator: ScoringOrchestrator = Depends(get_scoring_orchestrator),
):
    return success_response(
        msg="Provider health",
        data={"strategy": orchestrator.strategy, "providers": orchestrator.providers_health()},
    )
