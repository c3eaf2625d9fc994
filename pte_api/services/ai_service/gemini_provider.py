"""Gemini scoring provider built on the shared retrying client."""

from pte_api.core.config import settings
from pte_api.core.genai_client import (
    EXPLANATION_GENERATION_CONFIG,
    SCORING_GENERATION_CONFIG,
    GeminiServiceError,
    get_gemini_model,
)
from pte_api.schemas.scoring import HealthStatus
from pte_api.services.ai_service.base import (
    AIProvider,
    ProviderError,
    ProviderNotConfigured,
    key_health,
)


class GeminiProvider(AIProvider):
    name = "gemini"

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.fast_model = settings.GEMINI_MODEL_FAST
        self.quality_model = settings.GEMINI_MODEL_QUALITY

    def health(self) -> HealthStatus:
        return key_health(self.name, self.api_key, "GOOGLE_API_KEY")

    async def _complete_json(self, prompt: str, *, quality: bool) -> str:
        if not self.api_key:
            raise ProviderNotConfigured("GOOGLE_API_KEY not set")
        client = get_gemini_model(self.quality_model if quality else self.fast_model)
        config = SCORING_GENERATION_CONFIG if quality else EXPLANATION_GENERATION_CONFIG
        try:
            response = await client.generate_content_async(prompt, generation_config=config.copy())
        except GeminiServiceError as e:
            raise ProviderError(str(e)) from e
        return response.text
