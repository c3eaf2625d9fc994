from __future__ import annotations

import uuid

import httpx
import pytest
from sqlalchemy import select

from conftest import auth_headers, make_user
from pte_api.api.v1.routes.realtime.realtime import get_realtime_http_client
from pte_api.core.config import settings
from pte_api.models.conversation import ConversationSession, ConversationTurn
from pte_api.models.usage_log import AIUsageLog

pytestmark = pytest.mark.anyio


@pytest.fixture()
def openai_sessions(test_app, monkeypatch):
    """Route the realtime token request to an in-process handler."""
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test-realtime")
    requests: list[httpx.Request] = []
    reply = {"status": 200, "json": {"id": "sess_1", "client_secret": {"value": "ek_test_123"}}}

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(reply["status"], json=reply["json"])

    async def _client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            yield client

    test_app.dependency_overrides[get_realtime_http_client] = _client
    return requests, reply


async def _start_session(client, user):
    resp = await client.post("/api/v1/realtime/session", headers=auth_headers(user), json={})
    return resp


async def test_create_session_returns_ephemeral_token(client, user, db_session, openai_sessions):
    requests, _ = openai_sessions
    resp = await _start_session(client, user)
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["realtime_token"] == "ek_test_123"
    assert requests[0].url.path.endswith("/realtime/sessions")
    assert requests[0].headers["Authorization"] == "Bearer sk-test-realtime"

    session = await db_session.get(ConversationSession, uuid.UUID(data["session_id"]))
    assert session.user_id == user.id


async def test_provider_failure_is_502(client, user, openai_sessions):
    _, reply = openai_sessions
    reply.update(status=500, json={"error": "boom"})
    resp = await _start_session(client, user)
    assert resp.status_code == 502
    assert resp.json()["error_code"] == "REALTIME_PROVIDER_ERROR"


async def test_missing_api_key_is_503(client, user, openai_sessions, monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    resp = await _start_session(client, user)
    assert resp.status_code == 503


async def test_save_turns_closes_session(client, user, db_session, openai_sessions):
    session_id = (await _start_session(client, user)).json()["data"]["session_id"]
    resp = await client.post(
        "/api/v1/realtime/turns",
        headers=auth_headers(user),
        json={
            "session_id": session_id,
            "turns": [
                {"turn_index": 0, "role": "assistant", "transcript": "How can I help?", "duration_ms": 1500},
                {"turn_index": 1, "role": "user", "transcript": "My order is late.", "duration_ms": 2500},
            ],
            "token_usage": {"input_tokens": 120, "output_tokens": 80},
        },
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["saved_turns"] == 2

    session = await db_session.get(ConversationSession, uuid.UUID(session_id))
    assert session.status.value == "completed"
    assert session.total_turns == 2
    assert session.total_duration_ms == 4000
    turns = (await db_session.execute(select(ConversationTurn))).scalars().all()
    assert len(turns) == 2
    usage = (await db_session.execute(select(AIUsageLog))).scalars().one()
    assert usage.audio_seconds == 4.0
    assert usage.input_tokens == 120


async def test_turns_for_unknown_or_foreign_session(client, user, db_session, openai_sessions):
    body = {"session_id": "00000000-0000-0000-0000-000000000000", "turns": []}
    missing = await client.post("/api/v1/realtime/turns", headers=auth_headers(user), json=body)
    assert missing.status_code == 404

    session_id = (await _start_session(client, user)).json()["data"]["session_id"]
    other = await make_user(db_session, email="other@example.com")
    foreign = await client.post(
        "/api/v1/realtime/turns",
        headers=auth_headers(other),
        json={**body, "session_id": session_id},
    )
    assert foreign.status_code == 403


async def test_turns_reject_active_status(client, user, openai_sessions):
    session_id = (await _start_session(client, user)).json()["data"]["session_id"]
    resp = await client.post(
        "/api/v1/realtime/turns",
        headers=auth_headers(user),
        json={"session_id": session_id, "turns": [], "status": "active"},
    )
    assert resp.status_code == 422


@pytest.mark.parametrize(
    "token_usage",
    [{"input_tokens": "lots"}, {"input_tokens": -5, "output_tokens": 10}],
)
async def test_turns_reject_malformed_token_usage(client, user, db_session, openai_sessions, token_usage):
    session_id = (await _start_session(client, user)).json()["data"]["session_id"]
    resp = await client.post(
        "/api/v1/realtime/turns",
        headers=auth_headers(user),
        json={"session_id": session_id, "turns": [], "token_usage": token_usage},
    )
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "VALIDATION_ERROR"
    assert (await db_session.execute(select(AIUsageLog))).scalars().first() is None


async def test_turns_keep_extra_usage_counters(client, user, db_session, openai_sessions):
    session_id = (await _start_session(client, user)).json()["data"]["session_id"]
    resp = await client.post(
        "/api/v1/realtime/turns",
        headers=auth_headers(user),
        json={
            "session_id": session_id,
            "turns": [],
            "token_usage": {"output_tokens": 30, "cached_tokens": 4},
        },
    )
    assert resp.status_code == 201

    session = await db_session.get(ConversationSession, uuid.UUID(session_id))
    await db_session.refresh(session)
    assert session.token_usage == {"input_tokens": 0, "output_tokens": 30, "cached_tokens": 4}
    usage = (await db_session.execute(select(AIUsageLog))).scalars().one()
    assert usage.output_tokens == 30
