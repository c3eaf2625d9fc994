"""Account lifecycle: registration, sign-in, email verification and password reset.

Verification and reset codes are TOTP codes derived from a per-user secret
(see ``core.security``); a secret is cleared once its code has been used.
"""

import logging
import uuid
from typing import Optional

from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.core.security import (
    create_access_token,
    create_refresh_token,
    generate_totp_secret,
    get_password_hash,
    get_totp_code,
    verify_password,
    verify_token,
    verify_totp_code,
)
from pte_api.models.user import User
from pte_api.models.user_profile import UserProfile
from pte_api.services.mail_handler_service.mailer_resend import (
    send_reset_password_email,
    send_verification_email,
    send_welcome_email,
)
from pte_api.services.subscriptions import create_free_subscription, daily_credits_for_plan
from pte_api.utils.enums import PlanType, Role

logger = logging.getLogger(__name__)


class AccountError(Exception):
    def __init__(self, message: str, status_code: int, error_code: str):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


def token_pair(user: User) -> dict:
    return {
        "access_token": create_access_token(user.id),
        "refresh_token": create_refresh_token(user.id),
        "token_type": "bearer",
    }


async def register_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    target_score: Optional[int] = None,
) -> User:
    if await get_user_by_email(db, email):
        raise AccountError("Email already registered", 400, "EMAIL_TAKEN")

    secret = generate_totp_secret()
    user = User(
        id=uuid.uuid4(),
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=email,
        password_hash=get_password_hash(password),
        role=Role.student,
        is_email_verified=False,
        email_verification_secret=secret,
        daily_ai_credits=daily_credits_for_plan(PlanType.free),
        ai_credits_used=0,
    )
    db.add(user)
    db.add(UserProfile(id=uuid.uuid4(), user_id=user.id, target_score=target_score))
    await db.commit()
    await db.refresh(user)

    # create_free_subscription commits on its own
    await create_free_subscription(user, db)
    await send_verification_email(user.email, get_totp_code(secret), user.first_name)
    logger.info(f"Registered user {user.id}")
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Check credentials in the order the login screen reports them."""
    user = await get_user_by_email(db, email)
    if user is None:
        raise AccountError("User not found.", 404, "USER_NOT_FOUND")
    if not verify_password(password, user.password_hash):
        raise AccountError("Incorrect email or password.", 401, "INVALID_CREDENTIALS")
    if not user.is_email_verified:
        raise AccountError(
            "Your email address is not verified. Check your inbox for the verification code.",
            403,
            "EMAIL_NOT_VERIFIED",
        )
    if not user.is_active:
        raise AccountError("This account has been deactivated.", 403, "ACCOUNT_INACTIVE")
    return user


async def user_from_refresh_token(db: AsyncSession, refresh_token: str) -> User:
    try:
        user_id = verify_token(refresh_token, refresh=True)
    except JWTError as e:
        raise AccountError("Invalid refresh token", 401, "INVALID_TOKEN") from e
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise AccountError("Invalid refresh token", 401, "INVALID_TOKEN")
    return user


async def confirm_email(db: AsyncSession, email: str, otp: str) -> bool:
    """Mark the address verified. Returns False if it already was."""
    user = await get_user_by_email(db, email)
    if user is None:
        raise AccountError("User not found", 404, "USER_NOT_FOUND")
    if user.is_email_verified:
        return False
    if not user.email_verification_secret or not verify_totp_code(user.email_verification_secret, otp):
        raise AccountError("Invalid or expired code", 400, "INVALID_CODE")

    user.is_email_verified = True
    user.email_verification_secret = None
    await db.commit()
    await send_welcome_email(user.email, user.first_name)
    return True


async def resend_verification_code(db: AsyncSession, email: str) -> bool:
    """Rotate the verification secret and mail a fresh code. False if already verified."""
    user = await get_user_by_email(db, email)
    if user is None:
        raise AccountError("User not found", 404, "USER_NOT_FOUND")
    if user.is_email_verified:
        return False
    user.email_verification_secret = generate_totp_secret()
    await db.commit()
    await send_verification_email(user.email, get_totp_code(user.email_verification_secret), user.first_name)
    return True


async def start_password_reset(db: AsyncSession, email: str) -> None:
    user = await get_user_by_email(db, email)
    if user is None:
        # Same answer for unknown addresses
        logger.info("Password reset requested for unknown address")
        return
    user.password_reset_secret = generate_totp_secret()
    await db.commit()
    await send_reset_password_email(user.email, get_totp_code(user.password_reset_secret), user.first_name)


async def complete_password_reset(db: AsyncSession, email: str, otp: str, new_password: str) -> None:
    user = await get_user_by_email(db, email)
    if user is None or not user.password_reset_secret or not verify_totp_code(user.password_reset_secret, otp):
        raise AccountError("Invalid or expired code", 400, "INVALID_CODE")
    user.password_hash = get_password_hash(new_password)
    user.password_reset_secret = None
    await db.commit()
