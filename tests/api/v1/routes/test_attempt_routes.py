from __future__ import annotations

import pytest

from conftest import auth_headers, make_user, question_of_type
from pte_api.utils.datetime_utils import get_current_utc_datetime

pytestmark = pytest.mark.anyio

MC_ANSWER = "Connecting people across distances"


async def _start(client, user, test):
    resp = await client.post("/api/v1/attempts", headers=auth_headers(user), json={"test_id": str(test.id)})
    return resp


async def test_start_then_resume(client, user, mock_test):
    first = await _start(client, user, mock_test)
    assert first.status_code == 201
    assert first.json()["data"]["status"] == "in_progress"

    again = await _start(client, user, mock_test)
    assert again.status_code == 200
    assert again.json()["data"]["id"] == first.json()["data"]["id"]


async def test_start_unknown_or_premium_test(client, user, premium_test):
    missing = await client.post(
        "/api/v1/attempts",
        headers=auth_headers(user),
        json={"test_id": "00000000-0000-0000-0000-000000000000"},
    )
    assert missing.status_code == 404
    premium = await _start(client, user, premium_test)
    assert premium.status_code == 403
    assert premium.json()["error_code"] == "PREMIUM_REQUIRED"


async def test_full_attempt_flow(client, user, db_session, mock_test, fake_provider):
    headers = auth_headers(user)
    attempt_id = (await _start(client, user, mock_test)).json()["data"]["id"]

    mc = await question_of_type(db_session, mock_test, "reading_multiple_choice_single")
    resp = await client.post(
        f"/api/v1/attempts/{attempt_id}/answers",
        headers=headers,
        json={"question_id": str(mc.id), "answer": MC_ANSWER},
    )
    assert resp.status_code == 200
    answer = resp.json()["data"]
    assert answer["is_correct"] is True
    assert answer["score"] == 90
    assert fake_provider.calls == []

    speaking = await question_of_type(db_session, mock_test, "describe_image")
    resp = await client.post(
        f"/api/v1/attempts/{attempt_id}/answers",
        headers=headers,
        json={"question_id": str(speaking.id), "transcript": "The chart shows rising sales."},
    )
    assert resp.json()["data"]["score"] == 67

    essay = await question_of_type(db_session, mock_test, "write_essay")
    resp = await client.post(
        f"/api/v1/attempts/{attempt_id}/answers",
        headers=headers,
        json={"question_id": str(essay.id), "text": "Technology helps people learn."},
    )
    assert resp.json()["data"]["score"] == 63
    assert user.ai_credits_used == 2

    detail = await client.get(f"/api/v1/attempts/{attempt_id}", headers=headers)
    assert len(detail.json()["data"]["answers"]) == 3

    done = await client.post(f"/api/v1/attempts/{attempt_id}/complete", headers=headers)
    assert done.status_code == 200
    data = done.json()["data"]
    assert data["status"] == "completed"
    assert data["reading_score"] == 90
    assert data["speaking_score"] == 67
    assert data["writing_score"] == 63
    assert data["listening_score"] is None
    assert data["total_score"] == 73

    late = await client.post(
        f"/api/v1/attempts/{attempt_id}/answers",
        headers=headers,
        json={"question_id": str(mc.id), "answer": MC_ANSWER},
    )
    assert late.status_code == 409
    assert late.json()["error_code"] == "ATTEMPT_NOT_IN_PROGRESS"


async def test_resubmitting_replaces_answer(client, user, db_session, mock_test):
    headers = auth_headers(user)
    attempt_id = (await _start(client, user, mock_test)).json()["data"]["id"]
    mc = await question_of_type(db_session, mock_test, "reading_multiple_choice_single")
    for answer in ("Increased misinformation", MC_ANSWER):
        await client.post(
            f"/api/v1/attempts/{attempt_id}/answers",
            headers=headers,
            json={"question_id": str(mc.id), "answer": answer},
        )
    detail = await client.get(f"/api/v1/attempts/{attempt_id}", headers=headers)
    answers = detail.json()["data"]["answers"]
    assert len(answers) == 1
    assert answers[0]["is_correct"] is True


async def test_answer_validation_errors(client, user, db_session, mock_test):
    headers = auth_headers(user)
    attempt_id = (await _start(client, user, mock_test)).json()["data"]["id"]

    foreign = await client.post(
        f"/api/v1/attempts/{attempt_id}/answers",
        headers=headers,
        json={"question_id": "00000000-0000-0000-0000-000000000000", "answer": "x"},
    )
    assert foreign.status_code == 400
    assert foreign.json()["error_code"] == "QUESTION_NOT_IN_TEST"

    speaking = await question_of_type(db_session, mock_test, "read_aloud")
    silent = await client.post(
        f"/api/v1/attempts/{attempt_id}/answers",
        headers=headers,
        json={"question_id": str(speaking.id), "transcript": "  "},
    )
    assert silent.status_code == 400
    assert silent.json()["error_code"] == "INVALID_ANSWER"


async def test_other_users_attempt_is_forbidden(client, user, db_session, mock_test):
    attempt_id = (await _start(client, user, mock_test)).json()["data"]["id"]
    intruder = await make_user(db_session, email="intruder@example.com")
    resp = await client.get(f"/api/v1/attempts/{attempt_id}", headers=auth_headers(intruder))
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "FORBIDDEN"


async def test_abandon_and_history(client, user, mock_test):
    headers = auth_headers(user)
    attempt_id = (await _start(client, user, mock_test)).json()["data"]["id"]
    resp = await client.post(f"/api/v1/attempts/{attempt_id}/abandon", headers=headers)
    assert resp.json()["data"]["status"] == "abandoned"

    again = await client.post(f"/api/v1/attempts/{attempt_id}/abandon", headers=headers)
    assert again.status_code == 409

    history = await client.get("/api/v1/attempts", headers=headers, params={"status": "abandoned"})
    assert [a["id"] for a in history.json()["data"]] == [attempt_id]
    assert (await client.get("/api/v1/attempts", headers=headers, params={"status": "completed"})).json()["data"] == []


async def test_ai_answer_refused_when_credits_spent(client, user, db_session, mock_test, fake_provider):
    user.ai_credits_used = 4
    user.last_credit_reset = get_current_utc_datetime()
    await db_session.commit()

    attempt_id = (await _start(client, user, mock_test)).json()["data"]["id"]
    essay = await question_of_type(db_session, mock_test, "write_essay")
    resp = await client.post(
        f"/api/v1/attempts/{attempt_id}/answers",
        headers=auth_headers(user),
        json={"question_id": str(essay.id), "text": "An essay."},
    )
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "AI_CREDIT_LIMIT_EXCEEDED"
    assert fake_provider.calls == []
