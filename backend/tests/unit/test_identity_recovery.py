from datetime import datetime, timedelta, timezone

import pytest

from app.domain.identity import mailer, recovery
from app.domain.identity.exceptions import InvalidResetToken
from app.domain.identity.recovery import PasswordRecovery, hash_token
from app.infra.password import verify_password


@pytest.fixture
def sent_links(monkeypatch):
    links = []

    async def fake_send(email, link):
        links.append((email, link))

    monkeypatch.setattr(mailer, "send_password_reset", fake_send)
    return links


@pytest.mark.asyncio
async def test_request_unknown_email_issues_nothing(fake_users, sent_links):
    flow = PasswordRecovery(repository=fake_users)
    assert await flow.request_reset("ghost@example.com") is None
    assert fake_users.reset_tokens == {}
    assert sent_links == []


@pytest.mark.asyncio
async def test_request_stores_only_token_hash(fake_users, make_user, sent_links):
    fake_users.add(make_user(1, email="member@example.com"))
    flow = PasswordRecovery(repository=fake_users)

    token = await flow.request_reset(" Member@Example.com ")

    assert token is not None and len(token) == 64
    stored = list(fake_users.reset_tokens.values())
    assert len(stored) == 1
    assert stored[0].hashed_token == hash_token(token)
    assert stored[0].hashed_token != token
    remaining = stored[0].expires_at - datetime.now(timezone.utc)
    assert timedelta(minutes=29) < remaining <= timedelta(minutes=30)
    assert sent_links[0][0] == "member@example.com"
    assert sent_links[0][1].endswith(f"token={token}")


@pytest.mark.asyncio
async def test_confirm_resets_password_once(fake_users, make_user, sent_links):
    fake_users.add(make_user(1, email="member@example.com"))
    flow = PasswordRecovery(repository=fake_users)
    token = await flow.request_reset("member@example.com")

    await flow.confirm_reset(token, "brand-new")

    assert verify_password(fake_users.users[1].password_hash, "brand-new")
    with pytest.raises(InvalidResetToken):
        await flow.confirm_reset(token, "again-new")


@pytest.mark.asyncio
async def test_confirm_rejects_expired_and_unknown(fake_users, make_user):
    fake_users.add(make_user(1))
    await fake_users.create_reset_token(1, hash_token("old"), datetime.now(timezone.utc) - timedelta(seconds=1))
    flow = PasswordRecovery(repository=fake_users)

    with pytest.raises(InvalidResetToken) as exc:
        await flow.confirm_reset("old", "whatever1")
    assert exc.value.reason == "invalid_or_expired_token"
    with pytest.raises(InvalidResetToken):
        await flow.confirm_reset("never-issued", "whatever1")


def test_reset_message_is_neutral():
    assert "If an account exists" in recovery.RESET_REQUEST_MESSAGE


@pytest.mark.asyncio
async def test_concurrent_confirms_claim_token_once(fake_users, make_user, sent_links):
    import asyncio

    fake_users.add(make_user(1, email="member@example.com"))
    flow = PasswordRecovery(repository=fake_users)
    token = await flow.request_reset("member@example.com")

    results = await asyncio.gather(
        flow.confirm_reset(token, "first-pass"),
        flow.confirm_reset(token, "second-pass"),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, InvalidResetToken)]
    assert len(failures) == 1
    assert results.count(None) == 1
    winner = "first-pass" if results[0] is None else "second-pass"
    assert verify_password(fake_users.users[1].password_hash, winner)


@pytest.mark.asyncio
async def test_accept_request_does_not_touch_accounts(fake_users, make_user, sent_links):
    fake_users.add(make_user(1, email="member@example.com"))
    flow = PasswordRecovery(repository=fake_users)

    assert await flow.accept_request("  Member@Example.COM ") == "member@example.com"
    assert fake_users.reset_tokens == {}
    assert sent_links == []
