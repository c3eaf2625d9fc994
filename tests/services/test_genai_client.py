from types import SimpleNamespace

import pytest
from google.api_core import exceptions as google_exceptions

from pte_api.core import genai_client
from pte_api.core.genai_client import GeminiClientWithRetry, GeminiServiceError

pytestmark = pytest.mark.anyio


class ScriptedModel:
    """Raises or returns the queued outcomes in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def generate_content_async(self, prompt, generation_config=None, safety_settings=None):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(genai_client.asyncio, "sleep", fake_sleep)
    return delays


def _client(model: ScriptedModel, max_retries: int = 2) -> GeminiClientWithRetry:
    client = GeminiClientWithRetry("gemini-test", max_retries=max_retries)
    client.model = model
    return client


async def test_transient_error_is_retried(no_sleep):
    model = ScriptedModel(
        google_exceptions.ServiceUnavailable("busy"),
        SimpleNamespace(text='{"overall": 70}'),
    )
    response = await _client(model).generate_content_async("score this")

    assert response.text == '{"overall": 70}'
    assert model.calls == 2
    assert no_sleep == [1.0]


async def test_quota_errors_back_off_longer_and_give_up(no_sleep):
    model = ScriptedModel(*[google_exceptions.ResourceExhausted("quota")] * 3)

    with pytest.raises(GeminiServiceError, match="quota exhausted"):
        await _client(model).generate_content_async("score this")

    assert model.calls == 3
    assert no_sleep == [1.0, 3.0]


async def test_rejected_key_is_not_retried(no_sleep):
    model = ScriptedModel(google_exceptions.PermissionDenied("bad key"))

    with pytest.raises(GeminiServiceError, match="API key"):
        await _client(model).generate_content_async("score this")

    assert model.calls == 1
    assert no_sleep == []


async def test_blank_text_is_an_error(no_sleep):
    model = ScriptedModel(SimpleNamespace(text="   "))

    with pytest.raises(GeminiServiceError, match="empty response"):
        await _client(model).generate_content_async("score this")


def test_clients_are_shared_per_model():
    first = genai_client.get_gemini_model("gemini-shared")
    assert genai_client.get_gemini_model("gemini-shared") is first
    assert genai_client.get_gemini_model("gemini-other") is not first
