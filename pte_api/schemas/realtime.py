# pte_api/schemas/realtime.py
import uuid
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from pte_api.utils.enums import ConversationStatus, TurnRole


class RealtimeSessionRequest(BaseModel):
    session_type: str = Field("customer_support", min_length=1, max_length=64)
    metadata: Optional[dict[str, Any]] = None


class TurnPayload(BaseModel):
    turn_index: int = Field(..., ge=0)
    role: TurnRole
    transcript: str
    audio_url: Optional[str] = None
    scores: Optional[dict[str, Any]] = None
    duration_ms: Optional[int] = Field(None, ge=0)
    words_per_minute: Optional[float] = Field(None, ge=0)
    pause_count: Optional[int] = Field(None, ge=0)
    filler_word_count: Optional[int] = Field(None, ge=0)
    metadata: Optional[dict[str, Any]] = None


class TokenUsage(BaseModel):
    """Usage totals reported by the realtime client; other counters are kept as sent."""

    model_config = ConfigDict(extra="allow")

    input_tokens: int = Field(0, ge=0)
    output_tokens: int = Field(0, ge=0)


class SaveTurnsRequest(BaseModel):
    session_id: uuid.UUID
    turns: list[TurnPayload]
    status: ConversationStatus = ConversationStatus.completed
    token_usage: Optional[TokenUsage] = None

    @field_validator("status")
    def status_must_be_final(cls, value: ConversationStatus) -> ConversationStatus:
        if value == ConversationStatus.active:
            raise ValueError("status must be completed, abandoned or error")
        return value
