"""OpenAI Realtime voice sessions and their stored conversation turns."""

import logging
import uuid
from typing import Any, Optional

import httpx
import openai
from openai import AsyncOpenAI
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.core.config import settings
from pte_api.models.conversation import ConversationSession, ConversationTurn
from pte_api.models.user import User
from pte_api.schemas.realtime import SaveTurnsRequest, TokenUsage
from pte_api.services.usage import record_realtime_usage
from pte_api.utils.datetime_utils import get_current_utc_datetime
from pte_api.utils.enums import ConversationStatus

logger = logging.getLogger(__name__)


class RealtimeError(Exception):
    """Realtime operation rejected; carries the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int, error_code: str):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code


async def create_ephemeral_token(
    http_client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Create an OpenAI Realtime session and return its ephemeral client secret.

    ``http_client`` is handed to the SDK as its transport and stays owned by the caller.
    """
    if not settings.OPENAI_API_KEY:
        raise RealtimeError("Realtime conversations are not configured", 503, "REALTIME_UNAVAILABLE")

    client = AsyncOpenAI(
        api_key=settings.OPENAI_API_KEY,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.AI_REQUEST_TIMEOUT_SECONDS,
        max_retries=0,
        http_client=http_client,
    )
    payload = {"model": settings.OPENAI_REALTIME_MODEL, "voice": settings.OPENAI_REALTIME_VOICE}
    try:
        response = await client.post("/realtime/sessions", cast_to=httpx.Response, body=payload)
        data = response.json()
    except openai.APIStatusError as e:
        logger.error(f"OpenAI realtime session failed ({e.status_code}): {e.message}")
        raise RealtimeError("Could not start a realtime session", 502, "REALTIME_PROVIDER_ERROR") from e
    except (openai.APIError, ValueError) as e:
        logger.error(f"OpenAI realtime session request error: {e}")
        raise RealtimeError("Could not start a realtime session", 502, "REALTIME_PROVIDER_ERROR") from e
    finally:
        if http_client is None:
            await client.close()

    token = ((data or {}).get("client_secret") or {}).get("value")
    if not token:
        raise RealtimeError("Realtime provider returned no client secret", 502, "REALTIME_PROVIDER_ERROR")
    return token


async def start_session(
    db: AsyncSession,
    user: User,
    session_type: str = "customer_support",
    metadata: Optional[dict[str, Any]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> tuple[ConversationSession, str]:
    token = await create_ephemeral_token(http_client)
    session = ConversationSession(
        id=uuid.uuid4(),
        user_id=user.id,
        session_type=session_type,
        status=ConversationStatus.active,
        started_at=get_current_utc_datetime(),
        ai_provider="openai",
        model_used=settings.OPENAI_REALTIME_MODEL,
        session_metadata=metadata or {},
    )
    db.add(session)
    await db.commit()
    await db.refresh(session)
    logger.info(f"Realtime session {session.id} started for user {user.id}")
    return session, token


async def save_turns(db: AsyncSession, user: User, req: SaveTurnsRequest) -> int:
    session = await db.get(ConversationSession, req.session_id)
    if session is None:
        raise RealtimeError("Session not found", 404, "NOT_FOUND")
    if session.user_id != user.id:
        raise RealtimeError("Forbidden", 403, "FORBIDDEN")

    for turn in req.turns:
        db.add(
            ConversationTurn(
                id=uuid.uuid4(),
                session_id=session.id,
                turn_index=turn.turn_index,
                role=turn.role,
                audio_url=turn.audio_url,
                transcript=turn.transcript,
                scores=turn.scores,
                duration_ms=turn.duration_ms,
                words_per_minute=turn.words_per_minute,
                pause_count=turn.pause_count,
                filler_word_count=turn.filler_word_count,
                turn_metadata=turn.metadata,
            )
        )
    await db.flush()

    total_turns = (
        await db.execute(
            select(func.count()).select_from(ConversationTurn).where(
                ConversationTurn.session_id == session.id
            )
        )
    ).scalar_one()
    batch_duration_ms = sum(t.duration_ms or 0 for t in req.turns)

    session.status = req.status
    session.ended_at = get_current_utc_datetime()
    session.total_turns = total_turns
    session.total_duration_ms = (session.total_duration_ms or 0) + batch_duration_ms
    usage = req.token_usage or TokenUsage()
    session.token_usage = req.token_usage.model_dump() if req.token_usage else None
    db.add(session)

    await record_realtime_usage(
        db,
        user_id=user.id,
        session_id=session.id,
        audio_seconds=batch_duration_ms / 1000,
        input_tokens=usage.input_tokens,
        output_tokens=usage.output_tokens,
        metadata={"total_turns": total_turns, "session_status": req.status.value},
        commit=False,
    )
    await db.commit()
    return len(req.turns)
