"""Groq scoring provider (Llama models in JSON mode)."""

from groq import AsyncGroq

from pte_api.core.config import settings
from pte_api.schemas.scoring import HealthStatus
from pte_api.services.ai_service.base import AIProvider, ProviderNotConfigured, key_health


class GroqProvider(AIProvider):
    name = "groq"
    supports_dialog = False

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key if api_key is not None else settings.GROQ_API_KEY
        self.fast_model = settings.GROQ_MODEL_FAST
        self.quality_model = settings.GROQ_MODEL_QUALITY
        self._client: AsyncGroq | None = None

    def health(self) -> HealthStatus:
        # Real Groq keys are long; anything this short is a placeholder
        return key_health(self.name, self.api_key, "GROQ_API_KEY", min_length=10)

    def _get_client(self) -> AsyncGroq:
        if not self.api_key:
            raise ProviderNotConfigured("GROQ_API_KEY not set")
        if self._client is None:
            self._client = AsyncGroq(
                api_key=self.api_key, timeout=settings.AI_REQUEST_TIMEOUT_SECONDS
            )
        return self._client

    async def _complete_json(self, prompt: str, *, quality: bool) -> str:
        completion = await self._get_client().chat.completions.create(
            model=self.quality_model if quality else self.fast_model,
            messages=[
                {"role": "system", "content": "You are a strict PTE Academic examiner. Reply with JSON only."},
                {"role": "user", "content": prompt},
            ],
            temperature=0.1 if quality else 0.2,
            max_tokens=1000 if quality else 800,
            response_format={"type": "json_object"},
        )
        return completion.choices[0].message.content or ""
