"""HTTP tests: routing, auth and domain error mapping."""
import pytest
from httpx import ASGITransport, AsyncClient

from oomf.api.deps import get_db, get_rate_limit_policy
from oomf.domain.policy.rate_limit import RateLimitAction, RateLimitPolicy, RateLimitRule
from oomf.infra.security.jwt import create_access_token
from oomf.main import app

from tests.conftest import FakeRateLimiter


def auth(user_id):
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
async def client(db_session):
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limit_policy] = lambda: None
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def send(client, sender, receiver, **body):
    response = await client.post("/v1/compliments", json={"receiver_id": receiver, **body}, headers=auth(sender))
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_requires_bearer_token(client):
    assert (await client.get("/v1/compliments/received")).status_code == 401
    bad = await client.get("/v1/compliments/received", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401


async def test_send_and_read_inbox(client, alice, bob, template):
    compliment_id = await send(client, alice, bob, template_id=template)

    response = await client.get("/v1/compliments/received", headers=auth(bob))
    assert response.status_code == 200
    [item] = response.json()["compliments"]
    assert item["id"] == compliment_id
    assert item["sender_id"] is None
    assert item["text"] == "You light up every room"
    assert item["guesses_remaining"] == 3

    read = await client.post(f"/v1/compliments/{compliment_id}/read", headers=auth(bob))
    assert read.json() == {"ok": True}

    templates = await client.get("/v1/compliments/templates", headers=auth(alice))
    assert [t["id"] for t in templates.json()] == [template]


async def test_domain_errors_map_to_status_codes(client, alice, bob, carol, template):
    compliment_id = await send(client, alice, bob, template_id=template)

    self_send = await client.post(
        "/v1/compliments", json={"receiver_id": alice, "template_id": template}, headers=auth(alice)
    )
    assert self_send.status_code == 422
    assert self_send.json()["code"] == "invalid_input"

    missing = await client.get("/v1/compliments/missing", headers=auth(bob))
    assert missing.status_code == 404

    forbidden = await client.get(f"/v1/compliments/{compliment_id}", headers=auth(carol))
    assert forbidden.status_code == 403

    broke = await client.post(f"/v1/compliments/{compliment_id}/hints", json={"hint_number": 1}, headers=auth(bob))
    assert broke.status_code == 402
    assert broke.json() == {"detail": "Not enough tokens. Need 1, have 0.", "code": "insufficient_tokens"}

    out_of_order = await client.post(
        f"/v1/compliments/{compliment_id}/hints", json={"hint_number": 2}, headers=auth(bob)
    )
    assert out_of_order.status_code == 409
    assert out_of_order.json()["code"] == "out_of_sequence"


async def test_guessing_over_http(client, alice, bob, carol, template):
    compliment_id = await send(client, alice, bob, template_id=template)
    url = f"/v1/compliments/{compliment_id}/guesses"

    for remaining in (2, 1, 0):
        response = await client.post(url, json={"guessed_user_id": carol}, headers=auth(bob))
        assert response.json() == {
            "is_correct": False,
            "guesses_remaining": remaining,
            "is_revealed": False,
            "sender": None,
        }

    exhausted = await client.post(url, json={"guessed_user_id": alice}, headers=auth(bob))
    assert exhausted.status_code == 409
    assert exhausted.json() == {"detail": "No guesses remaining", "code": "out_of_guesses"}
    assert len((await client.get(url, headers=auth(bob))).json()) == 3


async def test_rate_limited_send_sets_retry_after(client, alice, bob, template):
    policy = RateLimitPolicy(
        FakeRateLimiter(),
        {RateLimitAction.SEND_COMPLIMENT: RateLimitRule(max_requests=0, window_seconds=86400)},
    )
    app.dependency_overrides[get_rate_limit_policy] = lambda: policy

    response = await client.post(
        "/v1/compliments", json={"receiver_id": bob, "template_id": template}, headers=auth(alice)
    )
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "86400"
    assert response.json()["code"] == "rate_limited"


async def test_secret_admirer_chat_over_http(client, alice, bob):
    compliment_id = await send(client, alice, bob, custom_text="Your energy is unmatched")

    chats = await client.get("/v1/secret-admirer/chats", headers=auth(bob))
    [summary] = chats.json()
    assert summary["compliment_id"] == compliment_id
    assert summary["other_user"] == {
        "id": None,
        "username": "secret_admirer",
        "display_name": "Secret Admirer",
        "avatar_url": None,
    }
    assert summary["unread_count"] == 1

    reply = await client.post(
        f"/v1/secret-admirer/chats/{summary['id']}/messages", json={"message": "who are you?"}, headers=auth(bob)
    )
    body = reply.json()
    assert body["delivered"] is True
    assert body["exchange_count"] == 1
    assert body["messages_until_reveal"] == 5
    assert body["is_revealed"] is False

    chat = await client.get(f"/v1/secret-admirer/compliments/{compliment_id}/chat", headers=auth(alice))
    assert chat.json()["sender"]["id"] == alice
    assert [m["is_own"] for m in chat.json()["messages"]] == [True, False]

    balance = await client.get("/v1/tokens/balance", headers=auth(alice))
    assert balance.json() == {"tokens": 0}


async def test_notifications_inbox(client, alice, bob, template):
    compliment_id = await send(client, alice, bob, template_id=template)

    inbox = await client.get("/v1/notifications", headers=auth(bob))
    [notification] = inbox.json()
    assert notification["type"] == "new_compliment"
    assert notification["payload"]["compliment_id"] == compliment_id
    assert notification["compliment_id"] == compliment_id
    assert notification["is_read"] is False
    assert alice not in notification["payload"].values()

    assert (await client.get("/v1/notifications/unread-count", headers=auth(bob))).json() == {"unread": 1}
    await client.patch(f"/v1/notifications/{notification['id']}/read", headers=auth(bob))
    assert (await client.get("/v1/notifications/unread-count", headers=auth(bob))).json() == {"unread": 0}
    assert (await client.get("/v1/notifications", headers=auth(alice))).json() == []
    missing = await client.patch("/v1/notifications/nope/read", headers=auth(bob))
    assert missing.status_code == 404


async def test_device_registration(client, alice, bob):
    body = {"token": "fcm-token-1", "platform": "ios"}
    registered = await client.post("/v1/devices/push-token", json=body, headers=auth(alice))
    assert registered.status_code == 200
    assert registered.json()["platform"] == "ios"

    bad = await client.post("/v1/devices/push-token", json={"token": "t", "platform": "palm"}, headers=auth(alice))
    assert bad.status_code == 422

    # Same token registered by another account moves to it.
    await client.post("/v1/devices/push-token", json={**body, "platform": "android"}, headers=auth(bob))
    assert (await client.get("/v1/devices", headers=auth(alice))).json() == []
    [device] = (await client.get("/v1/devices", headers=auth(bob))).json()
    assert device["platform"] == "android"

    assert (await client.delete("/v1/devices/push-token/fcm-token-1", headers=auth(alice))).status_code == 404
    assert (await client.delete("/v1/devices/push-token/fcm-token-1", headers=auth(bob))).status_code == 204


async def test_token_for_unknown_user_is_rejected(client):
    response = await client.get("/v1/compliments/received", headers=auth("no-such-user"))
    assert response.status_code == 401


async def test_reaction_over_http(client, alice, bob, template):
    compliment_id = await send(client, alice, bob, template_id=template)
    url = f"/v1/compliments/{compliment_id}/reaction"

    response = await client.post(url, json={"reaction": "crown"}, headers=auth(bob))
    assert response.status_code == 200
    assert response.json() == {"id": compliment_id, "reaction": "crown", "emoji": "👑"}

    inbox = await client.get("/v1/compliments/received", headers=auth(bob))
    assert inbox.json()["compliments"][0]["reaction"] == "crown"

    assert (await client.post(url, json={"reaction": "crown"}, headers=auth(alice))).status_code == 403
    assert (await client.post(url, json={"reaction": "meh"}, headers=auth(bob))).status_code == 422

    cleared = await client.post(url, json={"reaction": None}, headers=auth(bob))
    assert cleared.json()["reaction"] is None


async def test_streak_over_http(client, alice, bob, template):
    before = await client.get("/v1/streaks/me", headers=auth(alice))
    assert before.status_code == 200
    assert before.json()["current_streak"] == 0
    assert before.json()["is_at_risk"] is False

    await send(client, alice, bob, template_id=template)

    body = (await client.get("/v1/streaks/me", headers=auth(alice))).json()
    assert body["current_streak"] == 1
    assert body["best_streak"] == 1
    assert body["freezes_available"] == 1
    assert body["is_at_risk"] is False
    assert body["milestones"] == []
