# pte_api/api/v1/routes/user/user.py

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.api.v1.routes.auth.auth import get_current_user
from pte_api.core.response import ResponseModel, error_response, success_response
from pte_api.core.security import get_password_hash, verify_password
from pte_api.db.deps import get_db
from pte_api.models.user import User
from pte_api.models.user_profile import UserProfile
from pte_api.schemas.auth.auth_schema import UpdatePasswordRequest
from pte_api.schemas.user import ProfileUpdateRequest
from pte_api.services.credits import credits_summary
from pte_api.services.subscriptions import get_active_subscription, serialize_subscription
from pte_api.utils.datetime_utils import as_utc
from pte_api.utils.enums import Role

router = APIRouter(prefix="/user", tags=["user"])

USER_FIELDS = ("first_name", "last_name")
PROFILE_FIELDS = (
    "target_score",
    "exam_date",
    "study_goal",
    "phone_number",
    "country",
    "timezone",
    "preferences",
)


async def _get_or_create_profile(db: AsyncSession, user: User) -> UserProfile:
    result = await db.execute(select(UserProfile).where(UserProfile.user_id == user.id))
    profile = result.scalars().first()
    if profile is None:
        profile = UserProfile(id=uuid.uuid4(), user_id=user.id)
        db.add(profile)
        await db.flush()
    return profile


def _serialize_profile(user: User, profile: UserProfile, subscription) -> dict:
    return {
        "id": str(user.id),
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "role": Role(user.role).value,
        "is_active": user.is_active,
        "is_email_verified": user.is_email_verified,
        "created_at": as_utc(user.created_at),
        "profile": {field: getattr(profile, field) for field in PROFILE_FIELDS},
        "subscription": serialize_subscription(subscription),
        "credits": credits_summary(user),
    }


@router.get("/profile", response_model=ResponseModel)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await _get_or_create_profile(db, current_user)
    await db.commit()
    sub = await get_active_subscription(current_user, db)
    return success_response(
        msg="Profile retrieved", data=_serialize_profile(current_user, profile, sub)
    )


@router.patch("/profile", response_model=ResponseModel)
async def update_profile(
    req: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    changes = req.model_dump(exclude_unset=True)
    profile = await _get_or_create_profile(db, current_user)
    for field, value in changes.items():
        if field in USER_FIELDS:
            setattr(current_user, field, value)
        elif field in PROFILE_FIELDS:
            setattr(profile, field, value)
    db.add(current_user)
    db.add(profile)
    await db.commit()
    sub = await get_active_subscription(current_user, db)
    return success_response(
        msg="Profile updated", data=_serialize_profile(current_user, profile, sub)
    )


@router.put("/password", response_model=ResponseModel)
async def update_password(
    req: UpdatePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not verify_password(req.current_password, current_user.password_hash):
        return error_response(
            msg="Current password is incorrect",
            status_code=400,
            error_code="INVALID_CURRENT_PASSWORD",
        )
    if verify_password(req.new_password, current_user.password_hash):
        return error_response(
            msg="New password must be different from the current password",
            status_code=400,
            error_code="PASSWORD_UNCHANGED",
        )
    current_user.password_hash = get_password_hash(req.new_password)
    db.add(current_user)
    await db.commit()
    return success_response(msg="Password updated successfully")
