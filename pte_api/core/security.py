# pte_api/core/security.py
from datetime import timedelta
import uuid
from passlib.context import CryptContext
from jose import JWTError, jwt
import pyotp

from pte_api.core.config import settings
from pte_api.utils.datetime_utils import get_current_utc_datetime
from pte_api.utils.enums import Role

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(subject, secret: str, lifetime: timedelta, token_type: str) -> str:
    payload = {
        "exp": get_current_utc_datetime() + lifetime,
        "sub": str(subject),
        "type": token_type,
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def create_access_token(subject) -> str:
    return _encode(
        subject,
        settings.JWT_SECRET,
        timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
        "access",
    )


def create_refresh_token(subject) -> str:
    return _encode(
        subject,
        settings.JWT_REFRESH_SECRET,
        timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
        "refresh",
    )


def verify_token(token: str, refresh: bool = False) -> uuid.UUID:
    """
    Decode a JWT and return the subject as a user id.
    Raises JWTError on any failure, including a malformed subject.
    """
    secret = settings.JWT_REFRESH_SECRET if refresh else settings.JWT_SECRET
    payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    sub = payload.get("sub")
    if not sub:
        raise JWTError("Token has no subject")
    try:
        return uuid.UUID(sub)
    except ValueError as exc:
        raise JWTError("Token subject is not a user id") from exc


def generate_totp_secret() -> str:
    """Generate a new base32 secret for the email OTP flows."""
    return pyotp.random_base32()


def get_totp_code(secret: str, interval: int | None = None) -> str:
    totp = pyotp.TOTP(secret, interval=interval or settings.OTP_INTERVAL_SECONDS)
    return totp.now()


def verify_totp_code(secret: str, code: str, interval: int | None = None) -> bool:
    """Verify a user-supplied code, allowing one step of clock drift."""
    totp = pyotp.TOTP(secret, interval=interval or settings.OTP_INTERVAL_SECONDS)
    return totp.verify(code, valid_window=1)


def require_roles(*allowed: Role):
    """
    Dependency factory: ensures current_user.role in allowed.
    """
    from fastapi import Depends, HTTPException, status
    from pte_api.api.v1.routes.auth.auth import get_current_user

    def _check(current_user=Depends(get_current_user)):
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
            )
        return current_user

    return _check
