# pte_api/schemas/attempts.py
import uuid
from typing import Any, Optional
from pydantic import BaseModel, Field


class AnswerPayload(BaseModel):
    """One candidate response. Objective items use ``answer``; speaking uses
    ``transcript`` (+ ``audio_key``/``duration_ms``); writing uses ``text``."""

    answer: Any = None
    transcript: Optional[str] = Field(None, max_length=10000)
    text: Optional[str] = Field(None, max_length=20000)
    audio_key: Optional[str] = Field(None, max_length=512)
    duration_ms: Optional[int] = Field(None, ge=0)
    explain: bool = Field(False, description="Ask an AI tutor to explain objective answers (uses one credit)")


class AttemptAnswerRequest(AnswerPayload):
    question_id: uuid.UUID


class StartAttemptRequest(BaseModel):
    test_id: uuid.UUID

