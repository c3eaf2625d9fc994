# pte_api/schemas/subscription.py
import uuid
from typing import Optional
from pydantic import BaseModel, Field

from pte_api.utils.enums import PlanType


class ChangePlanRequest(BaseModel):
    user_id: Optional[uuid.UUID] = Field(None, description="Target user; defaults to the caller")
    plan_type: PlanType
    duration_days: int = Field(30, ge=1, le=366)
    payment_method: Optional[str] = Field(None, max_length=50)
