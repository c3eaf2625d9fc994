"""OpenAI scoring provider (chat completions in JSON mode)."""

from openai import AsyncOpenAI

from pte_api.core.config import settings
from pte_api.schemas.scoring import HealthStatus
from pte_api.services.ai_service.base import AIProvider, ProviderNotConfigured, key_health


class OpenAIProvider(AIProvider):
    name = "openai"

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.fast_model = settings.OPENAI_MODEL_FAST
        self.quality_model = settings.OPENAI_MODEL_QUALITY
        self._client: AsyncOpenAI | None = None

    def health(self) -> HealthStatus:
        return key_health(self.name, self.api_key, "OPENAI_API_KEY")

    def _get_client(self) -> AsyncOpenAI:
        if not self.api_key:
            raise ProviderNotConfigured("OPENAI_API_KEY not set")
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=settings.OPENAI_BASE_URL,
                timeout=settings.AI_REQUEST_TIMEOUT_SECONDS,
            )
        return self._client

    async def _complete_json(self, prompt: str, *, quality: bool) -> str:
        response = await self._get_client().chat.completions.create(
            model=self.quality_model if quality else self.fast_model,
            messages=[
                {"role": "system", "content": "You are a strict PTE Academic examiner. Reply with JSON only."},
                {"role": "user", "content": prompt},
            ],
            temperature=0.1 if quality else 0.2,
            max_tokens=1500 if quality else 800,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""
