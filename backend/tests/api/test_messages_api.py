import pytest

from app.settings import settings


def _headers(user_id: int) -> dict[str, str]:
    return {"X-User-Id": str(user_id)}


@pytest.fixture
def trio(wired, make_user):
    for user_id in (1, 2, 3):
        wired.add(make_user(user_id))
    return wired


async def _send(client, sender, receiver, content):
    resp = await client.post(
        "/api/messages",
        json={"receiver_id": receiver, "content": content},
        headers=_headers(sender),
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_send_trims_content(api_client, trio):
    body = await _send(api_client, 1, 2, "  hey there  ")
    assert body["content"] == "hey there"
    assert body["is_read"] is False
    assert body["sender_id"] == 1


@pytest.mark.asyncio
async def test_send_validation_errors(api_client, trio):
    cases = [
        ({"receiver_id": 1, "content": "hi"}, 400, "cannot_message_self"),
        ({"receiver_id": 2, "content": "   "}, 400, "message_required"),
        ({"receiver_id": 2, "content": "x" * (settings.message_max_length + 1)}, 400, "message_too_long"),
        ({"receiver_id": 77, "content": "hi"}, 404, "recipient_not_found"),
    ]
    for payload, code, reason in cases:
        resp = await api_client.post("/api/messages", json=payload, headers=_headers(1))
        assert resp.status_code == code
        assert resp.json()["detail"] == reason
        assert resp.json()["request_id"] == resp.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_conversations_newest_first_with_partner(api_client, trio):
    await _send(api_client, 1, 2, "first")
    await _send(api_client, 3, 1, "second")
    await _send(api_client, 2, 1, "third")

    resp = await api_client.get("/api/messages/conversations", headers=_headers(1))
    rows = resp.json()
    assert [row["partner_id"] for row in rows] == [2, 3]
    assert rows[0]["last_message"]["content"] == "third"
    assert rows[0]["partner"]["username"] == "user2"


@pytest.mark.asyncio
async def test_opening_thread_marks_incoming_read(api_client, trio):
    await _send(api_client, 2, 1, "one")
    await _send(api_client, 2, 1, "two")
    await _send(api_client, 1, 2, "reply")
    await _send(api_client, 3, 1, "other")

    count = await api_client.get("/api/messages/unread/count", headers=_headers(1))
    assert count.json() == {"count": 3}

    thread = await api_client.get("/api/messages/2", headers=_headers(1))
    assert [m["content"] for m in thread.json()] == ["one", "two", "reply"]
    assert all(m["is_read"] for m in thread.json() if m["sender_id"] == 2)

    count = await api_client.get("/api/messages/unread/count", headers=_headers(1))
    assert count.json() == {"count": 1}
    # the partner's unread state is untouched
    count = await api_client.get("/api/messages/unread/count", headers=_headers(2))
    assert count.json() == {"count": 1}


@pytest.mark.asyncio
async def test_thread_with_unknown_partner(api_client, trio):
    resp = await api_client.get("/api/messages/55", headers=_headers(1))
    assert resp.status_code == 404
