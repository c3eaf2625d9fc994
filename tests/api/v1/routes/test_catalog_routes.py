from __future__ import annotations

import pytest

from conftest import auth_headers, question_of_type

pytestmark = pytest.mark.anyio


async def test_question_list_hides_answers_for_students(client, user, mock_test):
    resp = await client.get(
        "/api/v1/questions", headers=auth_headers(user), params={"section": "reading"}
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total"] == 2
    assert {q["question_type"] for q in data["items"]} == {
        "reading_multiple_choice_single",
        "reorder_paragraphs",
    }
    assert all("correct_answer" not in q for q in data["items"])


async def test_question_list_shows_answers_to_admins(client, admin, mock_test):
    resp = await client.get(
        "/api/v1/questions",
        headers=auth_headers(admin),
        params={"question_type": "reorder_paragraphs"},
    )
    items = resp.json()["data"]["items"]
    assert len(items) == 1
    assert items[0]["correct_answer"][0] == "First, the researchers defined the problem."


async def test_question_list_paginates(client, user, mock_test):
    resp = await client.get(
        "/api/v1/questions", headers=auth_headers(user), params={"page": 2, "page_size": 4}
    )
    data = resp.json()["data"]
    assert data["page"] == 2
    assert data["total"] == 11
    assert data["total_pages"] == 3
    assert len(data["items"]) == 4


async def test_question_list_rejects_oversized_page(client, user):
    resp = await client.get(
        "/api/v1/questions", headers=auth_headers(user), params={"page_size": 500}
    )
    assert resp.status_code == 422


async def test_categorized_predictions(client, user, mock_test):
    resp = await client.get(
        "/api/v1/questions/categorized",
        headers=auth_headers(user),
        params={"question_type": "read_aloud"},
    )
    data = resp.json()["data"]
    assert len(data["all"]) == 2
    assert [q["tags"] for q in data["weekly"]] == [["weekly_prediction"]]
    assert [q["tags"] for q in data["monthly"]] == [["monthly_prediction"]]


async def test_question_detail(client, user, db_session, mock_test):
    question = await question_of_type(db_session, mock_test, "write_essay")
    resp = await client.get(f"/api/v1/questions/{question.id}", headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json()["data"]["section"] == "writing"

    missing = await client.get(
        "/api/v1/questions/00000000-0000-0000-0000-000000000000", headers=auth_headers(user)
    )
    assert missing.status_code == 404
    assert missing.json()["error_code"] == "QUESTION_NOT_FOUND"


async def test_test_list_counts_questions(client, user, mock_test, premium_test):
    resp = await client.get("/api/v1/tests", headers=auth_headers(user))
    tests = {t["id"]: t for t in resp.json()["data"]}
    assert tests[str(mock_test.id)]["question_count"] == 11
    assert tests[str(premium_test.id)]["question_count"] == 0

    filtered = await client.get(
        "/api/v1/tests", headers=auth_headers(user), params={"test_type": "section"}
    )
    assert [t["id"] for t in filtered.json()["data"]] == [str(premium_test.id)]


async def test_test_detail_lists_questions_in_order(client, user, mock_test):
    resp = await client.get(f"/api/v1/tests/{mock_test.id}", headers=auth_headers(user))
    assert resp.status_code == 200
    questions = resp.json()["data"]["questions"]
    assert [q["order_index"] for q in questions] == list(range(11))
    assert questions[0]["question_type"] == "read_aloud"


async def test_premium_test_requires_paid_plan(client, user, admin, premium_test):
    resp = await client.get(f"/api/v1/tests/{premium_test.id}", headers=auth_headers(user))
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "PREMIUM_REQUIRED"

    await client.post(
        "/api/v1/subscriptions/change",
        headers=auth_headers(admin),
        json={"plan_type": "premium", "user_id": str(user.id)},
    )
    resp = await client.get(f"/api/v1/tests/{premium_test.id}", headers=auth_headers(user))
    assert resp.status_code == 200


async def test_premium_questions_hidden_from_free_plan(
    client, user, admin, mock_test, premium_question
):
    headers = auth_headers(user)
    detail = await client.get(f"/api/v1/questions/{premium_question.id}", headers=headers)
    assert detail.status_code == 403
    assert detail.json()["error_code"] == "PREMIUM_REQUIRED"

    listed = await client.get("/api/v1/questions", headers=headers, params={"section": "reading"})
    assert listed.json()["data"]["total"] == 2
    assert str(premium_question.id) not in {q["id"] for q in listed.json()["data"]["items"]}

    categorized = await client.get(
        "/api/v1/questions/categorized",
        headers=headers,
        params={"question_type": "reading_multiple_choice_single"},
    )
    assert str(premium_question.id) not in {q["id"] for q in categorized.json()["data"]["all"]}

    await client.post(
        "/api/v1/subscriptions/change",
        headers=auth_headers(admin),
        json={"plan_type": "premium", "user_id": str(user.id)},
    )
    detail = await client.get(f"/api/v1/questions/{premium_question.id}", headers=headers)
    assert detail.status_code == 200
    listed = await client.get("/api/v1/questions", headers=headers, params={"section": "reading"})
    assert listed.json()["data"]["total"] == 3
    categorized = await client.get(
        "/api/v1/questions/categorized",
        headers=headers,
        params={"question_type": "reading_multiple_choice_single"},
    )
    assert str(premium_question.id) in {q["id"] for q in categorized.json()["data"]["weekly"]}
