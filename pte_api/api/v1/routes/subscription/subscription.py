# pte_api/api/v1/routes/subscription/subscription.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.api.dependencies.subscription import ensure_user_has_subscription
from pte_api.core.response import ResponseModel, error_response, success_response
from pte_api.core.security import require_roles
from pte_api.db.deps import get_db
from pte_api.models.user import User
from pte_api.schemas.subscription import ChangePlanRequest
from pte_api.services.credits import credits_summary
from pte_api.services.subscriptions import (
    cancel_subscription,
    change_plan,
    get_active_subscription,
    serialize_subscription,
)
from pte_api.utils.enums import Role

router = APIRouter(tags=["subscription"])


@router.get("/subscriptions/current", response_model=ResponseModel)
async def get_current_plan(
    current_user: User = Depends(ensure_user_has_subscription),
    db: AsyncSession = Depends(get_db),
):
    sub = await get_active_subscription(current_user, db)
    return success_response(
        msg="Current subscription",
        data={"subscription": serialize_subscription(sub), "credits": credits_summary(current_user)},
    )


@router.post("/subscriptions/change", response_model=ResponseModel)
async def change_user_plan(
    req: ChangePlanRequest,
    admin: User = Depends(require_roles(Role.admin)),
    db: AsyncSession = Depends(get_db),
):
    """Admin-only: plan changes are granted out of band (no checkout flow)."""
    target = await db.get(User, req.user_id) if req.user_id else admin
    if target is None:
        return error_response(msg="User not found", status_code=404, error_code="USER_NOT_FOUND")
    sub = await change_plan(
        target,
        req.plan_type,
        db,
        duration_days=req.duration_days,
        payment_method=req.payment_method,
    )
    return success_response(msg="Plan changed", data=serialize_subscription(sub))


@router.post("/subscriptions/cancel", response_model=ResponseModel)
async def cancel_current_plan(
    current_user: User = Depends(ensure_user_has_subscription),
    db: AsyncSession = Depends(get_db),
):
    sub = await cancel_subscription(current_user, db)
    if sub is None:
        return error_response(msg="No active subscription", status_code=404, error_code="NO_SUBSCRIPTION")
    return success_response(
        msg="Subscription cancelled; access continues until the end of the period",
        data=serialize_subscription(sub),
    )


@router.get("/credits", response_model=ResponseModel)
async def get_credits(current_user: User = Depends(ensure_user_has_subscription)):
    return success_response(msg="AI credits", data=credits_summary(current_user))
