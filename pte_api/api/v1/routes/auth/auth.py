# pte_api/api/v1/routes/auth/auth.py

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.core.response import ResponseModel, success_response
from pte_api.core.security import verify_token
from pte_api.db.deps import get_db
from pte_api.models.user import User
from pte_api.schemas.auth.auth_schema import (
    EmailBody,
    LoginRequest,
    OtpRequest,
    RefreshTokenRequest,
    ResetPasswordRequest,
    UserCreate,
)
from pte_api.services import accounts

router = APIRouter(prefix="/auth", tags=["auth"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise unauthorized
    try:
        user_id: uuid.UUID = verify_token(token)
    except JWTError:
        raise unauthorized

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise unauthorized
    return user


@router.post("/register", status_code=201, response_model=ResponseModel)
async def register(user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    user = await accounts.register_user(
        db,
        email=user_in.email,
        password=user_in.password,
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        target_score=user_in.target_score,
    )
    return success_response(
        msg="Registration successful; check your email for a verification code",
        data={
            "user_id": str(user.id),
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
        },
        status_code=201,
    )


@router.post("/login", response_model=ResponseModel)
async def login(creds: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await accounts.authenticate(db, creds.email, creds.password)
    return success_response(msg="Login successful!", data=accounts.token_pair(user))


@router.post("/refresh", response_model=ResponseModel)
async def refresh_token(req: RefreshTokenRequest, db: AsyncSession = Depends(get_db)):
    user = await accounts.user_from_refresh_token(db, req.refresh_token)
    return success_response(msg="Token refreshed", data=accounts.token_pair(user))


@router.post("/verify-email", response_model=ResponseModel)
async def verify_email(req: OtpRequest, db: AsyncSession = Depends(get_db)):
    if not await accounts.confirm_email(db, req.email, req.otp):
        return success_response(msg="Email is already verified")
    return success_response(msg="Email verified successfully")


@router.post("/resend-verification", response_model=ResponseModel)
async def resend_verification(req: EmailBody, db: AsyncSession = Depends(get_db)):
    if not await accounts.resend_verification_code(db, req.email):
        return success_response(msg="Email is already verified")
    return success_response(msg="Verification code resent to your email")


@router.post("/forgot-password", response_model=ResponseModel)
async def forgot_password(req: EmailBody, db: AsyncSession = Depends(get_db)):
    await accounts.start_password_reset(db, req.email)
    return success_response(msg="If the address is registered, a reset code has been sent")


@router.post("/reset-password", response_model=ResponseModel)
async def reset_password(req: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    await accounts.complete_password_reset(db, req.email, req.otp, req.new_password)
    return success_response(msg="Password has been reset successfully")


@router.post("/logout", response_model=ResponseModel)
async def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards them."""
    return success_response(msg="Logged out successfully")
