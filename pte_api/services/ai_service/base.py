"""Common provider contract for AI scoring backends."""

import json
import logging
from typing import Optional

from pydantic import BaseModel, ValidationError

from pte_api.schemas.scoring import (
    DialogInput,
    DialogScorePayload,
    ExplanationPayload,
    HealthStatus,
    ListeningInput,
    ProviderRawScore,
    ReadingInput,
    SpeakingInput,
    SpeakingScorePayload,
    WritingInput,
    WritingScorePayload,
)
from pte_api.services.scoring.normalize import clamp_to_90, clamp_to_range
from pte_api.services.scoring.rubrics import (
    build_dialog_prompt,
    build_listening_explanation_prompt,
    build_read_aloud_prompt,
    build_reading_explanation_prompt,
    build_speaking_prompt,
    build_writing_prompt,
)

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when a provider call fails or returns an unusable payload."""


class ProviderNotConfigured(ProviderError):
    """Raised when the provider's API key is missing."""


class ScoringUnavailableError(Exception):
    """Raised when no provider could produce a score."""


def extract_json_text(raw: str) -> str:
    """Strip markdown code fences and surrounding prose from a model reply."""
    text = (raw or "").strip()
    if "```json" in text:
        text = text.split("```json", 1)[1].split("```", 1)[0].strip()
    elif text.startswith("```"):
        text = text.split("```", 2)[1].strip()
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        text = text[start:end + 1]
    return text


def parse_payload(raw: str, model: type[BaseModel], provider: str) -> BaseModel:
    try:
        data = json.loads(extract_json_text(raw))
    except json.JSONDecodeError as e:
        logger.error(f"{provider} returned invalid JSON: {e}")
        raise ProviderError(f"{provider} returned invalid JSON") from e
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"{provider} payload failed validation: {e}")
        raise ProviderError(f"{provider} returned an incomplete score payload") from e


class AIProvider:
    """
    Base class for scoring providers.

    Subclasses implement ``health`` and ``_complete_json``; the scoring
    operations here build the prompt, parse the JSON reply and clamp every
    score before it leaves the provider.
    """

    name: str = "base"
    supports_dialog: bool = True
    fast_model: str = ""
    quality_model: str = ""

    def health(self) -> HealthStatus:
        raise NotImplementedError

    async def _complete_json(self, prompt: str, *, quality: bool) -> str:
        raise NotImplementedError

    def _meta(self, model: str, **extra) -> dict:
        return {"provider": self.name, "model": model, **extra}

    async def _ask(self, prompt: str, payload_model: type[BaseModel], *, quality: bool):
        try:
            raw = await self._complete_json(prompt, quality=quality)
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"{self.name} request failed: {e}")
            raise ProviderError(f"{self.name} request failed: {e}") from e
        return parse_payload(raw, payload_model, self.name)

    async def score_speaking(self, input: SpeakingInput) -> ProviderRawScore:
        if input.type == "read_aloud" and input.prompt_text:
            prompt = build_read_aloud_prompt(input)
        else:
            prompt = build_speaking_prompt(input)
        payload: SpeakingScorePayload = await self._ask(prompt, SpeakingScorePayload, quality=True)
        subscores = {
            "content": clamp_to_90(payload.content),
            "pronunciation": clamp_to_90(payload.pronunciation),
            "fluency": clamp_to_90(payload.fluency),
        }
        if payload.transcript_accuracy is not None:
            subscores["transcript_accuracy"] = clamp_to_range(payload.transcript_accuracy, 0, 100)
        if payload.prosody_score is not None:
            subscores["prosody_score"] = clamp_to_range(payload.prosody_score, 0, 100)
        if payload.phonetic_analysis:
            subscores["phonetic_analysis"] = payload.phonetic_analysis
        return ProviderRawScore(
            overall=clamp_to_90(payload.overall) if payload.overall is not None else None,
            subscores=subscores,
            rationale=payload.rationale,
            suggestions=payload.suggestions,
            meta=self._meta(self.quality_model),
        )

    async def score_writing(self, input: WritingInput) -> ProviderRawScore:
        payload: WritingScorePayload = await self._ask(
            build_writing_prompt(input), WritingScorePayload, quality=True
        )
        subscores = {
            "content": clamp_to_90(payload.content),
            "form": clamp_to_90(payload.form),
            "grammar": clamp_to_90(payload.grammar),
            "vocabulary": clamp_to_90(payload.vocabulary),
        }
        if payload.word_count is not None:
            subscores["word_count"] = payload.word_count
        if payload.coherence_score is not None:
            subscores["coherence_score"] = clamp_to_range(payload.coherence_score, 0, 100)
        if payload.cohesion_score is not None:
            subscores["cohesion_score"] = clamp_to_range(payload.cohesion_score, 0, 100)
        return ProviderRawScore(
            overall=clamp_to_90(payload.overall) if payload.overall is not None else None,
            subscores=subscores,
            rationale=payload.rationale,
            suggestions=payload.suggestions,
            meta=self._meta(self.quality_model),
        )

    async def _explain(self, prompt: str) -> ProviderRawScore:
        payload: ExplanationPayload = await self._ask(prompt, ExplanationPayload, quality=False)
        meta = self._meta(
            self.fast_model,
            confidence=clamp_to_range(payload.confidence, 0, 100),
            key_points=payload.key_points,
        )
        if payload.strategies:
            meta["strategies"] = payload.strategies
        return ProviderRawScore(rationale=payload.explanation, meta=meta)

    async def score_reading(self, input: ReadingInput) -> ProviderRawScore:
        return await self._explain(build_reading_explanation_prompt(input))

    async def score_listening(self, input: ListeningInput) -> ProviderRawScore:
        return await self._explain(build_listening_explanation_prompt(input))

    async def score_dialog(self, input: DialogInput) -> ProviderRawScore:
        if not self.supports_dialog:
            raise ProviderError(f"{self.name} does not support dialog scoring")
        payload: DialogScorePayload = await self._ask(
            build_dialog_prompt(input), DialogScorePayload, quality=True
        )
        return ProviderRawScore(
            overall=clamp_to_90(payload.overall) if payload.overall is not None else None,
            subscores={
                "appropriateness": clamp_to_90(payload.appropriateness),
                "politeness": clamp_to_90(payload.politeness),
                "relevance": clamp_to_90(payload.relevance),
            },
            rationale=payload.rationale,
            suggestions=payload.suggestions,
            meta=self._meta(self.quality_model),
        )


def key_health(name: str, key: Optional[str], env_name: str, min_length: int = 0) -> HealthStatus:
    """Configuration-only health check; never touches the network."""
    try:
        if not key:
            return HealthStatus(status="unavailable", reason=f"{env_name} not set")
        if len(key.strip()) <= min_length:
            return HealthStatus(status="unavailable", reason=f"{env_name} appears invalid")
        return HealthStatus(status="available")
    except Exception as e:
        logger.warning(f"{name} health check failed: {e}")
        return HealthStatus(status="error", reason=str(e))
