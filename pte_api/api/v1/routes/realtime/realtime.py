# pte_api/api/v1/routes/realtime/realtime.py

from typing import AsyncIterator

import httpx
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.api.v1.routes.auth.auth import get_current_user
from pte_api.core.config import settings
from pte_api.core.response import ResponseModel, success_response
from pte_api.db.deps import get_db
from pte_api.models.user import User
from pte_api.schemas.realtime import RealtimeSessionRequest, SaveTurnsRequest
from pte_api.services.realtime import save_turns, start_session

router = APIRouter(prefix="/realtime", tags=["realtime"])


async def get_realtime_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.AI_REQUEST_TIMEOUT_SECONDS) as client:
        yield client


@router.post("/session", response_model=ResponseModel)
async def create_realtime_session(
    req: RealtimeSessionRequest | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    http_client: httpx.AsyncClient = Depends(get_realtime_http_client),
):
    """
    Start a voice conversation with the OpenAI Realtime API.

    Method/Path: POST /api/v1/realtime/session
    Returns 201 with { session_id, realtime_token }; the token is an
    ephemeral client secret the browser uses to connect directly.
    """
    req = req or RealtimeSessionRequest()
    session, token = await start_session(
        db,
        current_user,
        session_type=req.session_type,
        metadata=req.metadata,
        http_client=http_client,
    )
    return success_response(
        msg="Realtime session created",
        data={"session_id": str(session.id), "realtime_token": token},
        status_code=201,
    )


@router.post("/turns", response_model=ResponseModel)
async def save_conversation_turns(
    req: SaveTurnsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Persist the turns of a finished conversation and close the session."""
    saved = await save_turns(db, current_user, req)
    return success_response(
        msg="Turns saved",
        data={"session_id": str(req.session_id), "saved_turns": saved},
        status_code=201,
    )
