# pte_api/core/genai_client.py
import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from pte_api.core.config import settings

logger = logging.getLogger(__name__)

if settings.GOOGLE_API_KEY:
    genai.configure(api_key=settings.GOOGLE_API_KEY)

# Scoring wants repeatable numbers, so keep sampling tight
SCORING_GENERATION_CONFIG: Dict[str, Any] = {
    "temperature": 0.1,
    "top_p": 0.8,
    "max_output_tokens": 2048,
    "response_mime_type": "application/json",
}

EXPLANATION_GENERATION_CONFIG: Dict[str, Any] = {
    "temperature": 0.2,
    "top_p": 0.85,
    "max_output_tokens": 1024,
    "response_mime_type": "application/json",
}

# Essays on exam topics (crime, health, conflict) must not be blocked
SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_ONLY_HIGH"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]

TRANSIENT_ERRORS = (
    google_exceptions.InternalServerError,
    google_exceptions.ResourceExhausted,
    google_exceptions.DeadlineExceeded,
    google_exceptions.ServiceUnavailable,
)

FAILURE_MESSAGES = {
    google_exceptions.ResourceExhausted: "Gemini quota exhausted",
    google_exceptions.PermissionDenied: "Gemini rejected the API key",
    google_exceptions.InvalidArgument: "Gemini rejected the scoring prompt",
}


class GeminiServiceError(Exception):
    """Raised once a Gemini call has failed for good."""


class GeminiClientWithRetry:
    """Wraps one GenerativeModel; retries transient Google API errors with backoff."""

    def __init__(self, model_name: str, max_retries: int = 2, base_delay: float = 1.0, max_delay: float = 8.0):
        self.model_name = model_name
        self.model = genai.GenerativeModel(model_name)
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay

    def _delay(self, error: Exception, attempt: int) -> float:
        factor = 3 if isinstance(error, google_exceptions.ResourceExhausted) else 2
        return min(self.base_delay * factor ** attempt, self.max_delay)

    async def generate_content_async(
        self,
        prompt: Union[str, List[Dict[str, Any]]],
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Return the Gemini response, raising GeminiServiceError when no usable text came back."""
        config = dict(generation_config or SCORING_GENERATION_CONFIG)
        attempts = self.max_retries + 1

        for attempt in range(attempts):
            try:
                response = await asyncio.wait_for(
                    self.model.generate_content_async(
                        prompt, generation_config=config, safety_settings=SAFETY_SETTINGS
                    ),
                    timeout=settings.AI_REQUEST_TIMEOUT_SECONDS,
                )
            except TRANSIENT_ERRORS as e:
                if attempt + 1 == attempts:
                    raise self._failure(e) from e
                delay = self._delay(e, attempt)
                logger.warning(
                    f"{self.model_name}: {type(e).__name__} on attempt {attempt + 1}/{attempts}, "
                    f"retrying in {delay}s"
                )
                await asyncio.sleep(delay)
                continue
            except asyncio.TimeoutError as e:
                raise GeminiServiceError(f"Gemini timed out after {settings.AI_REQUEST_TIMEOUT_SECONDS}s") from e
            except google_exceptions.GoogleAPIError as e:
                raise self._failure(e) from e

            try:
                text = response.text
            except ValueError as e:
                # .text raises when the candidate was blocked by safety filters
                raise GeminiServiceError(f"{self.model_name} returned no text: {e}") from e
            if not text or not text.strip():
                raise GeminiServiceError(f"{self.model_name} returned an empty response")
            return response

    def _failure(self, error: Exception) -> GeminiServiceError:
        logger.error(f"Gemini call on {self.model_name} failed: {error}")
        for error_type, message in FAILURE_MESSAGES.items():
            if isinstance(error, error_type):
                return GeminiServiceError(message)
        return GeminiServiceError(f"Gemini unavailable ({type(error).__name__})")


_gemini_clients: Dict[str, GeminiClientWithRetry] = {}


def get_gemini_model(model_name: Optional[str] = None) -> GeminiClientWithRetry:
    """Shared client for ``model_name`` (default: the fast model)."""
    name = model_name or settings.GEMINI_MODEL_FAST
    if name not in _gemini_clients:
        _gemini_clients[name] = GeminiClientWithRetry(name)
    return _gemini_clients[name]
