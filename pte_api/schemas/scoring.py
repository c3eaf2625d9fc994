# pte_api/schemas/scoring.py
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field


# Provider inputs
class SpeakingInput(BaseModel):
    type: str
    transcript: str
    prompt_text: Optional[str] = None
    audio_url: Optional[str] = None
    duration_ms: Optional[int] = Field(None, ge=0)


class WritingInput(BaseModel):
    type: str
    text: str
    prompt_text: Optional[str] = None
    word_limit: Optional[tuple[int, int]] = None


class ReadingInput(BaseModel):
    type: str
    question: str
    passage: Optional[str] = None
    options: Optional[list[str]] = None
    user_answer: Any = None
    correct_answer: Any = None


class ListeningInput(BaseModel):
    type: str
    question: str
    transcript: Optional[str] = None
    options: Optional[list[str]] = None
    user_answer: Any = None
    correct_answer: Any = None


class DialogInput(BaseModel):
    situation: str
    transcript: str


# Raw JSON contracts the examiner prompts ask for
class SpeakingScorePayload(BaseModel):
    content: float
    pronunciation: float
    fluency: float
    overall: Optional[float] = None
    rationale: str = ""
    suggestions: list[str] = []
    transcript_accuracy: Optional[float] = None
    phonetic_analysis: Optional[str] = None
    prosody_score: Optional[float] = None


class WritingScorePayload(BaseModel):
    content: float
    form: float
    grammar: float
    vocabulary: float
    overall: Optional[float] = None
    rationale: str = ""
    suggestions: list[str] = []
    word_count: Optional[int] = None
    coherence_score: Optional[float] = None
    cohesion_score: Optional[float] = None


class ExplanationPayload(BaseModel):
    explanation: str
    confidence: float = 0
    key_points: list[str] = []
    strategies: Optional[list[str]] = None


class DialogScorePayload(BaseModel):
    appropriateness: float
    politeness: float
    relevance: float
    overall: Optional[float] = None
    rationale: str = ""
    suggestions: list[str] = []


class ProviderRawScore(BaseModel):
    overall: Optional[int] = None
    subscores: dict[str, Any] = {}
    rationale: str = ""
    suggestions: list[str] = []
    meta: dict[str, Any] = {}


class HealthStatus(BaseModel):
    status: Literal["available", "unavailable", "error"]
    reason: Optional[str] = None


# Route payloads
class SpeakingScoreRequest(BaseModel):
    type: str = Field(..., json_schema_extra={"example": "read_aloud"})
    transcript: str = Field(..., max_length=10000)
    prompt_text: Optional[str] = Field(None, max_length=10000)
    situation: Optional[str] = Field(None, max_length=5000)
    duration_ms: Optional[int] = Field(None, ge=0)
    audio_url: Optional[str] = None


class WritingScoreRequest(BaseModel):
    type: str = Field(..., json_schema_extra={"example": "write_essay"})
    response_text: str = Field(..., max_length=20000)
    prompt_text: Optional[str] = Field(None, max_length=20000)
