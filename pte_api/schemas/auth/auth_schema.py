# pte_api/schemas/auth/auth_schema.py
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

PASSWORD_SPECIAL_CHARS = "!@#$%^&*()-_+="
PASSWORD_RULES = (
    (str.isdigit, "one number"),
    (str.isalpha, "one letter"),
    (PASSWORD_SPECIAL_CHARS.__contains__, f"one special character ({PASSWORD_SPECIAL_CHARS})"),
)


def check_password_strength(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Password cannot be empty.")
    for rule, label in PASSWORD_RULES:
        if not any(rule(char) for char in value):
            raise ValueError(f"Password must include at least {label}.")
    return value


class EmailBody(BaseModel):
    email: EmailStr = Field(..., json_schema_extra={"example": "candidate@example.com"})

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, email: Optional[str]) -> str:
        # Stored lower-case; lookups must match
        normalized = (email or "").strip().lower()
        if not normalized:
            raise ValueError("Email cannot be empty.")
        return normalized


class UserCreate(EmailBody):
    first_name: str = Field(..., min_length=1, max_length=40, json_schema_extra={"example": "Ada"})
    last_name: str = Field(..., min_length=1, max_length=40, json_schema_extra={"example": "Obi"})
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="8-128 characters including a letter, a number and a special character",
    )
    target_score: Optional[int] = Field(None, ge=10, le=90, description="PTE overall target (10-90)")

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_strength(value)


class LoginRequest(EmailBody):
    password: str


class OtpRequest(EmailBody):
    otp: str = Field(..., min_length=6, max_length=6, json_schema_extra={"example": "123456"})


class ResetPasswordRequest(OtpRequest):
    new_password: str = Field(..., min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_strength(value)


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class UpdatePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=8)
    new_password: str = Field(..., min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_strength(value)
