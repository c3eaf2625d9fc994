"""Routes scoring requests across the configured AI providers."""

import asyncio
import logging
from typing import Any, Optional, Sequence

from pte_api.core.config import settings
from pte_api.services.ai_service.base import AIProvider, ProviderError, ScoringUnavailableError
from pte_api.services.ai_service.gemini_provider import GeminiProvider
from pte_api.services.ai_service.groq_provider import GroqProvider
from pte_api.services.ai_service.openai_provider import OpenAIProvider
from pte_api.services.scoring.normalize import aggregate_provider_scores
from pte_api.services.scoring.rubrics import DEFAULT_WEIGHTS

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "gemini": GeminiProvider,
    "groq": GroqProvider,
    "openai": OpenAIProvider,
}

# Scoring kind -> provider method
_METHODS = {
    "speaking": "score_speaking",
    "writing": "score_writing",
    "reading": "score_reading",
    "listening": "score_listening",
    "dialog": "score_dialog",
}


class ScoringOrchestrator:
    def __init__(self, providers: Sequence[AIProvider], strategy: str = "fallback"):
        if strategy not in ("fallback", "consensus"):
            raise ValueError(f"Unknown scoring strategy: {strategy}")
        self.providers = list(providers)
        self.strategy = strategy

    def providers_health(self) -> list[dict]:
        report = []
        for provider in self.providers:
            health = provider.health()
            entry = {"name": provider.name, "status": health.status}
            if health.reason:
                entry["reason"] = health.reason
            report.append(entry)
        return report

    def _candidates(self, kind: str) -> list[AIProvider]:
        candidates = []
        for provider in self.providers:
            if kind == "dialog" and not provider.supports_dialog:
                continue
            health = provider.health()
            if health.status != "available":
                logger.debug(f"Skipping {provider.name}: {health.reason}")
                continue
            candidates.append(provider)
        return candidates

    async def score(self, kind: str, input: Any, weights: Optional[dict] = None) -> dict:
        """
        Score ``input`` with the configured strategy.

        Returns a plain dict with ``overall``, ``subscores``, ``rationale``,
        ``suggestions`` and ``meta``. Raises ScoringUnavailableError when no
        healthy provider produced a result.
        """
        method = _METHODS.get(kind)
        if method is None:
            raise ValueError(f"Unknown scoring kind: {kind}")

        candidates = self._candidates(kind)
        if not candidates:
            raise ScoringUnavailableError("No AI scoring provider is configured")

        if self.strategy == "consensus" and len(candidates) > 1:
            return await self._consensus(kind, method, candidates, input, weights)
        return await self._fallback(kind, method, candidates, input)

    async def _fallback(self, kind, method, candidates, input) -> dict:
        attempted: list[str] = []
        errors: dict[str, str] = {}
        for provider in candidates:
            attempted.append(provider.name)
            try:
                result = await getattr(provider, method)(input)
            except ProviderError as e:
                logger.warning(f"{provider.name} failed {kind} scoring: {e}")
                errors[provider.name] = str(e)
                continue
            data = result.model_dump()
            data["meta"] = {**data["meta"], "strategy": "fallback", "attempted": attempted}
            if errors:
                data["meta"]["errors"] = errors
            return data
        raise ScoringUnavailableError(
            f"All AI providers failed to score {kind}: {', '.join(attempted)}"
        )

    async def _consensus(self, kind, method, candidates, input, weights) -> dict:
        outcomes = await asyncio.gather(
            *(getattr(p, method)(input) for p in candidates), return_exceptions=True
        )
        results = []
        errors: dict[str, str] = {}
        for provider, outcome in zip(candidates, outcomes):
            if isinstance(outcome, ProviderError):
                logger.warning(f"{provider.name} failed {kind} scoring: {outcome}")
                errors[provider.name] = str(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome.model_dump())
        if not results:
            raise ScoringUnavailableError(f"All AI providers failed to score {kind}")

        merged = aggregate_provider_scores(results, weights or DEFAULT_WEIGHTS.get(kind))
        merged["meta"]["model"] = [r["meta"].get("model") for r in results]
        if errors:
            merged["meta"]["errors"] = errors
        return merged


def build_providers(order: Sequence[str]) -> list[AIProvider]:
    return [PROVIDER_CLASSES[name]() for name in order]


_orchestrator: Optional[ScoringOrchestrator] = None


def get_scoring_orchestrator() -> ScoringOrchestrator:
    """FastAPI dependency returning the shared orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ScoringOrchestrator(
            build_providers(settings.AI_PROVIDER_ORDER), settings.SCORING_STRATEGY
        )
    return _orchestrator
