from __future__ import annotations

import pytest
from sqlalchemy import select

from conftest import auth_headers
from pte_api.models.usage_log import AIUsageLog
from pte_api.utils.datetime_utils import get_current_utc_datetime

pytestmark = pytest.mark.anyio


async def test_score_speaking_uses_a_credit(client, user, db_session):
    resp = await client.post(
        "/api/v1/score/speaking",
        headers=auth_headers(user),
        json={"type": "retell_lecture", "transcript": "The lecturer argued that cities need trees."},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["overall"] == 67
    assert data["credits_remaining"] == 3
    assert data["meta"]["provider"] == "fake"

    logs = (await db_session.execute(select(AIUsageLog).where(AIUsageLog.user_id == user.id))).scalars().all()
    assert len(logs) == 1
    assert logs[0].provider == "fake"


async def test_score_writing_applies_form_rules(client, user):
    resp = await client.post(
        "/api/v1/score/writing",
        headers=auth_headers(user),
        json={"type": "summarize_written_text", "response_text": "Cities grow. Jobs move."},
    )
    data = resp.json()["data"]
    assert data["subscores"]["form"] == 0
    assert data["suggestions"][0].startswith("Your response has 4 words")


async def test_invalid_input_does_not_use_credit(client, user):
    resp = await client.post(
        "/api/v1/score/speaking",
        headers=auth_headers(user),
        json={"type": "read_aloud", "transcript": "   "},
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "INVALID_INPUT"
    assert user.ai_credits_used == 0


async def test_credit_limit(client, user, db_session, fake_provider):
    user.ai_credits_used = 4
    user.last_credit_reset = get_current_utc_datetime()
    await db_session.commit()

    resp = await client.post(
        "/api/v1/score/writing",
        headers=auth_headers(user),
        json={"type": "write_essay", "response_text": "Essay"},
    )
    assert resp.status_code == 403
    body = resp.json()
    assert body["error_code"] == "AI_CREDIT_LIMIT_EXCEEDED"
    assert body["data"] == {"used": 4, "allowance": 4}
    assert fake_provider.calls == []


async def test_providers_down_returns_503(client, user, fake_provider):
    fake_provider.fail = True
    resp = await client.post(
        "/api/v1/score/speaking",
        headers=auth_headers(user),
        json={"type": "describe_image", "transcript": "A pie chart."},
    )
    assert resp.status_code == 503
    assert resp.json()["error_code"] == "SCORING_UNAVAILABLE"
    assert user.ai_credits_used == 0


async def test_provider_health(client, user):
    resp = await client.get("/api/v1/score/providers", headers=auth_headers(user))
    assert resp.json()["data"] == {
        "strategy": "fallback",
        "providers": [{"name": "fake", "status": "available"}],
    }
