"""
Subscription dependencies for FastAPI routes.

Every authenticated user gets a free subscription on first use if none is
active; premium content additionally requires a paid plan.
"""

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.api.v1.routes.auth.auth import get_current_user
from pte_api.db.deps import get_db
from pte_api.models.subscription import Subscription
from pte_api.models.user import User
from pte_api.services.subscriptions import create_free_subscription, get_active_subscription
from pte_api.utils.enums import PlanType


async def ensure_user_has_subscription(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Guarantee the user holds an active subscription.

    Creates a free one when none exists (new accounts, lapsed free periods,
    rows removed by hand). Paid renewals are not handled here.
    """
    sub = await get_active_subscription(current_user, db)
    if not sub:
        await create_free_subscription(current_user, db)
    return current_user


async def get_current_subscription(
    current_user: User = Depends(ensure_user_has_subscription),
    db: AsyncSession = Depends(get_db),
) -> Subscription:
    sub = await get_active_subscription(current_user, db)
    if sub is None:
        raise HTTPException(status_code=500, detail="Subscription could not be created")
    return sub


def has_premium_access(sub: Subscription | None) -> bool:
    return sub is not None and PlanType(sub.plan_type) != PlanType.free
