from __future__ import annotations

import pytest

from conftest import auth_headers, make_user

pytestmark = pytest.mark.anyio


async def test_current_subscription(client, user):
    resp = await client.get("/api/v1/subscriptions/current", headers=auth_headers(user))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["subscription"]["plan_type"] == "free"
    assert data["credits"]["daily_ai_credits"] == 4


async def test_missing_subscription_is_recreated(client, db_session):
    bare = await make_user(db_session, email="bare@example.com", with_subscription=False)
    resp = await client.get("/api/v1/subscriptions/current", headers=auth_headers(bare))
    assert resp.status_code == 200
    assert resp.json()["data"]["subscription"]["plan_type"] == "free"


async def test_change_plan_is_admin_only(client, user):
    resp = await client.post(
        "/api/v1/subscriptions/change", headers=auth_headers(user), json={"plan_type": "premium"}
    )
    assert resp.status_code == 403


async def test_admin_changes_user_plan(client, user, admin):
    resp = await client.post(
        "/api/v1/subscriptions/change",
        headers=auth_headers(admin),
        json={"plan_type": "basic", "user_id": str(user.id), "duration_days": 60},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["plan_type"] == "basic"

    credits = await client.get("/api/v1/credits", headers=auth_headers(user))
    assert credits.json()["data"]["daily_ai_credits"] == 20


async def test_admin_change_unknown_user(client, admin):
    resp = await client.post(
        "/api/v1/subscriptions/change",
        headers=auth_headers(admin),
        json={"plan_type": "basic", "user_id": "00000000-0000-0000-0000-000000000000"},
    )
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "USER_NOT_FOUND"


async def test_cancel_subscription(client, user):
    resp = await client.post("/api/v1/subscriptions/cancel", headers=auth_headers(user))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "cancelled"
    assert data["auto_renew"] is False


@pytest.mark.parametrize(
    "body",
    [{"plan_type": "platinum"}, {"plan_type": "basic", "duration_days": 0}],
)
async def test_change_plan_validates_body(client, admin, body):
    resp = await client.post("/api/v1/subscriptions/change", headers=auth_headers(admin), json=body)
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "VALIDATION_ERROR"
