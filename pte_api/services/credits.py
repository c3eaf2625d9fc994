"""Daily AI credit accounting."""

import logging
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.models.user import User
from pte_api.utils.datetime_utils import as_utc, get_current_utc_datetime

logger = logging.getLogger(__name__)

UNLIMITED = -1


class CreditLimitExceeded(Exception):
    """Raised when a user has used up today's AI scoring credits."""

    def __init__(self, used: int, allowance: int):
        self.used = used
        self.allowance = allowance
        super().__init__(
            f"Daily AI scoring limit reached ({used}/{allowance}). Upgrade your plan or try again tomorrow."
        )


def reset_if_new_day(user: User) -> bool:
    """Zero today's usage when the last reset happened on an earlier UTC day."""
    now = get_current_utc_datetime()
    last = as_utc(user.last_credit_reset)
    if last is None or last.date() < now.date():
        user.ai_credits_used = 0
        user.last_credit_reset = now
        return True
    return False


def remaining_credits(user: User) -> int | None:
    """Credits left today, or None for unlimited plans."""
    allowance = user.daily_ai_credits
    if allowance is None or allowance == UNLIMITED:
        return None
    return max(0, allowance - (user.ai_credits_used or 0))


def ensure_credit_available(user: User, amount: int = 1) -> None:
    """Raise CreditLimitExceeded if the user cannot spend ``amount`` credits today."""
    reset_if_new_day(user)
    used = user.ai_credits_used or 0
    allowance = user.daily_ai_credits
    if allowance is not None and allowance != UNLIMITED and used + amount > allowance:
        raise CreditLimitExceeded(used, allowance)


async def consume_ai_credit(user: User, db: AsyncSession, amount: int = 1) -> int | None:
    """
    Take ``amount`` credits from today's allowance.

    Returns the remaining credits (None when unlimited). Raises
    CreditLimitExceeded without consuming anything when the allowance is spent.
    """
    reset_if_new_day(user)
    used = user.ai_credits_used or 0
    allowance = user.daily_ai_credits
    if allowance is not None and allowance != UNLIMITED and used + amount > allowance:
        db.add(user)
        await db.commit()
        raise CreditLimitExceeded(used, allowance)

    user.ai_credits_used = used + amount
    db.add(user)
    await db.commit()
    logger.debug(f"User {user.id} consumed {amount} AI credit(s); used {user.ai_credits_used}")
    return remaining_credits(user)


def credits_summary(user: User) -> dict:
    reset_if_new_day(user)
    return {
        "daily_ai_credits": user.daily_ai_credits,
        "ai_credits_used": user.ai_credits_used or 0,
        "remaining": remaining_credits(user),
        "unlimited": user.daily_ai_credits == UNLIMITED,
        "last_credit_reset": as_utc(user.last_credit_reset),
    }
