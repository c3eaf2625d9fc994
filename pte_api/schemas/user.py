# pte_api/schemas/user.py
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class ProfileUpdateRequest(BaseModel):
    # Names may be omitted but not cleared
    first_name: Optional[str] = Field(None, min_length=1, max_length=40)
    last_name: Optional[str] = Field(None, min_length=1, max_length=40)
    target_score: Optional[int] = Field(None, ge=10, le=90)
    exam_date: Optional[datetime] = None
    study_goal: Optional[str] = Field(None, max_length=500)
    phone_number: Optional[str] = Field(None, max_length=30)
    country: Optional[str] = Field(None, max_length=80)
    timezone: Optional[str] = Field(None, max_length=64)
    preferences: Optional[dict[str, Any]] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def name_not_blank(cls, value: Any) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("Name cannot be empty.")
        return value.strip() if isinstance(value, str) else value
