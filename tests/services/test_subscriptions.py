from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select

from conftest import make_user
from pte_api.models.subscription import Subscription
from pte_api.services.subscriptions import (
    cancel_subscription,
    change_plan,
    daily_credits_for_plan,
    expire_lapsed_subscriptions,
    get_active_subscription,
    serialize_subscription,
)
from pte_api.utils.datetime_utils import get_current_utc_datetime
from pte_api.utils.enums import PlanType, SubscriptionStatus

pytestmark = pytest.mark.anyio


async def _rows(db, user):
    result = await db.execute(select(Subscription).where(Subscription.user_id == user.id))
    return result.scalars().all()


def test_daily_credits_for_plan():
    assert daily_credits_for_plan(PlanType.free) == 4
    assert daily_credits_for_plan(PlanType.basic) == 20
    assert daily_credits_for_plan(PlanType.premium) == -1


async def test_registration_subscription_is_active(db_session):
    user = await make_user(db_session)
    sub = await get_active_subscription(user, db_session)
    assert sub is not None
    assert PlanType(sub.plan_type) == PlanType.free
    assert user.daily_ai_credits == 4


async def test_change_plan_keeps_single_active_row(db_session):
    user = await make_user(db_session)
    new_sub = await change_plan(user, PlanType.premium, db_session)

    rows = await _rows(db_session, user)
    active = [r for r in rows if SubscriptionStatus(r.status) == SubscriptionStatus.active]
    assert [r.id for r in active] == [new_sub.id]
    assert user.daily_ai_credits == -1
    current = await get_active_subscription(user, db_session)
    assert current.id == new_sub.id
    assert serialize_subscription(current)["plan_type"] == "premium"


async def test_cancel_keeps_access_until_end_date(db_session):
    user = await make_user(db_session)
    cancelled = await cancel_subscription(user, db_session)
    assert SubscriptionStatus(cancelled.status) == SubscriptionStatus.cancelled
    assert cancelled.auto_renew is False
    assert (await get_active_subscription(user, db_session)).id == cancelled.id


async def test_cancel_without_subscription_returns_none(db_session):
    user = await make_user(db_session, with_subscription=False)
    assert await cancel_subscription(user, db_session) is None


async def test_lapsed_rows_are_expired(db_session):
    user = await make_user(db_session)
    sub = (await _rows(db_session, user))[0]
    sub.start_date = get_current_utc_datetime() - timedelta(days=40)
    sub.end_date = get_current_utc_datetime() - timedelta(days=10)
    await db_session.commit()

    assert await get_active_subscription(user, db_session) is None
    assert await expire_lapsed_subscriptions(user.id, db_session) == 1
    assert SubscriptionStatus(sub.status) == SubscriptionStatus.expired


def test_serialize_none():
    assert serialize_subscription(None) is None
