"""Subscription lookup and plan changes.

A user has at most one ``active`` subscription row at a time. Cancelled rows
keep access until their end date; lapsed rows are marked expired lazily.
"""

import logging
import uuid
from datetime import timedelta

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.core.config import settings
from pte_api.models.subscription import Subscription
from pte_api.models.user import User
from pte_api.utils.enums import PlanType, SubscriptionStatus
from pte_api.utils.datetime_utils import as_utc, get_current_utc_datetime

logger = logging.getLogger(__name__)


def daily_credits_for_plan(plan_type: PlanType) -> int:
    """Daily AI credit allowance for a plan; -1 means unlimited."""
    return {
        PlanType.free: settings.DAILY_AI_CREDITS_FREE,
        PlanType.basic: settings.DAILY_AI_CREDITS_BASIC,
        PlanType.premium: settings.DAILY_AI_CREDITS_PREMIUM,
        PlanType.enterprise: settings.DAILY_AI_CREDITS_ENTERPRISE,
    }[PlanType(plan_type)]


async def get_active_subscription(user: User, db: AsyncSession) -> Subscription | None:
    """
    Return the subscription currently granting access, if any.

    Cancelled subscriptions still count until their end date.
    """
    now = get_current_utc_datetime()
    result = await db.execute(
        select(Subscription)
        .where(
            Subscription.user_id == user.id,
            Subscription.start_date <= now,
            or_(Subscription.end_date.is_(None), Subscription.end_date > now),
            Subscription.status.in_([SubscriptionStatus.active, SubscriptionStatus.cancelled]),
        )
        .order_by(Subscription.start_date.desc())
        .limit(1)
    )
    return result.scalars().first()


async def expire_lapsed_subscriptions(user_id: uuid.UUID, db: AsyncSession) -> int:
    """Mark past-due subscriptions as expired so only current rows stay active."""
    now = get_current_utc_datetime()
    stale_query = await db.execute(
        select(Subscription).where(
            Subscription.user_id == user_id,
            Subscription.status.in_([SubscriptionStatus.active, SubscriptionStatus.cancelled]),
            Subscription.end_date.is_not(None),
            Subscription.end_date <= now,
        )
    )
    stale_rows = stale_query.scalars().all()
    for subscription in stale_rows:
        subscription.status = SubscriptionStatus.expired
        subscription.auto_renew = False
        db.add(subscription)

    if stale_rows:
        await db.commit()
    return len(stale_rows)


async def _deactivate_current(user_id: uuid.UUID, db: AsyncSession) -> None:
    now = get_current_utc_datetime()
    result = await db.execute(
        select(Subscription).where(
            Subscription.user_id == user_id,
            Subscription.status == SubscriptionStatus.active,
        )
    )
    for subscription in result.scalars().all():
        subscription.status = SubscriptionStatus.cancelled
        subscription.auto_renew = False
        subscription.canceled_at = now
        subscription.end_date = now
        db.add(subscription)


async def _open_subscription(
    user: User,
    plan_type: PlanType,
    db: AsyncSession,
    duration_days: int,
    payment_method: str | None = None,
) -> Subscription:
    now = get_current_utc_datetime()
    sub = Subscription(
        id=uuid.uuid4(),
        user_id=user.id,
        plan_type=plan_type,
        start_date=now,
        end_date=now + timedelta(days=duration_days),
        status=SubscriptionStatus.active,
        auto_renew=True,
        payment_method=payment_method,
    )
    # The user row caches the plan allowance read by the credit checks
    user.daily_ai_credits = daily_credits_for_plan(plan_type)
    db.add_all([sub, user])
    await db.commit()
    await db.refresh(sub)
    return sub


async def create_free_subscription(
    user: User, db: AsyncSession, duration_days: int | None = None
) -> Subscription:
    """Free plan for new accounts, or for users found without any subscription."""
    await expire_lapsed_subscriptions(user.id, db)
    return await _open_subscription(
        user, PlanType.free, db, duration_days or settings.FREE_SUBSCRIPTION_DAYS
    )


async def change_plan(
    user: User,
    plan_type: PlanType,
    db: AsyncSession,
    duration_days: int = 30,
    payment_method: str | None = None,
) -> Subscription:
    """Close the current active row, then open one on ``plan_type``."""
    await expire_lapsed_subscriptions(user.id, db)
    await _deactivate_current(user.id, db)
    sub = await _open_subscription(user, plan_type, db, duration_days, payment_method)
    logger.info(f"User {user.id} moved to plan {plan_type.value}")
    return sub


async def cancel_subscription(user: User, db: AsyncSession) -> Subscription | None:
    """Turn off auto-renew; access continues until the end date."""
    sub = await get_active_subscription(user, db)
    if sub is None:
        return None
    sub.status = SubscriptionStatus.cancelled
    sub.auto_renew = False
    sub.canceled_at = get_current_utc_datetime()
    db.add(sub)
    await db.commit()
    await db.refresh(sub)
    return sub


def serialize_subscription(sub: Subscription | None) -> dict | None:
    if sub is None:
        return None
    plan_type = PlanType(sub.plan_type)
    return {
        "id": str(sub.id),
        "plan_type": plan_type.value,
        "status": SubscriptionStatus(sub.status).value,
        "start_date": as_utc(sub.start_date),
        "end_date": as_utc(sub.end_date),
        "auto_renew": bool(sub.auto_renew),
        "canceled_at": as_utc(sub.canceled_at),
        "daily_ai_credits": daily_credits_for_plan(plan_type),
    }
