"""AI usage logging (scoring calls and realtime conversations)."""

import uuid
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.models.usage_log import AIUsageLog
from pte_api.models.user import User
from pte_api.utils.enums import UsageType


async def record_scoring_usage(
    db: AsyncSession, user: User, result: dict, question_type: Optional[str] = None
) -> AIUsageLog:
    meta = result.get("meta") or {}
    providers = meta.get("providers") or ([meta["provider"]] if meta.get("provider") else [])
    log = AIUsageLog(
        id=uuid.uuid4(),
        user_id=user.id,
        usage_type=UsageType.scoring,
        provider=",".join(providers) or None,
        credits=1,
        usage_metadata={"question_type": question_type, "strategy": meta.get("strategy")},
    )
    db.add(log)
    await db.commit()
    return log


async def record_realtime_usage(
    db: AsyncSession,
    user_id: uuid.UUID,
    session_id: uuid.UUID,
    audio_seconds: float,
    input_tokens: int,
    output_tokens: int,
    metadata: Optional[dict[str, Any]] = None,
    commit: bool = True,
) -> AIUsageLog:
    log = AIUsageLog(
        id=uuid.uuid4(),
        user_id=user_id,
        usage_type=UsageType.realtime,
        provider="openai",
        session_id=session_id,
        audio_seconds=audio_seconds,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        usage_metadata=metadata or {},
    )
    db.add(log)
    if commit:
        await db.commit()
    return log
