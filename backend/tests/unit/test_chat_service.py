import pytest

from app.domain.chat.exceptions import CannotMessageSelf, InvalidMessage, RecipientNotFound
from app.domain.chat.repo import ChatRepository
from app.domain.chat.service import ChatService
from app.domain.identity import mailer
from app.domain.identity.exceptions import UserNotFound
from app.infra.rate_limit import RateLimitExceeded
from app.settings import settings


@pytest.fixture
def chat(fake_users, make_user):
    fake_users.add(make_user(1))
    fake_users.add(make_user(2, email_on_message=True))
    fake_users.add(make_user(3, email_on_message=False))
    return ChatService(repository=ChatRepository(), users=fake_users)


@pytest.mark.asyncio
async def test_send_message_trims_and_stores(chat):
    message = await chat.send_message(1, 2, "  hello there  ")
    assert message.content == "hello there"
    assert message.sender_id == 1
    assert message.receiver_id == 2
    assert message.is_read is False


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
async def test_send_message_rejects_blank(chat, content):
    with pytest.raises(InvalidMessage) as exc:
        await chat.send_message(1, 2, content)
    assert exc.value.reason == "message_required"


@pytest.mark.asyncio
async def test_send_message_rejects_too_long(chat):
    with pytest.raises(InvalidMessage) as exc:
        await chat.send_message(1, 2, "x" * (settings.message_max_length + 1))
    assert exc.value.reason == "message_too_long"


@pytest.mark.asyncio
async def test_send_message_to_self_rejected(chat):
    with pytest.raises(CannotMessageSelf):
        await chat.send_message(1, 1, "me")


@pytest.mark.asyncio
async def test_send_message_unknown_receiver(chat):
    with pytest.raises(RecipientNotFound):
        await chat.send_message(1, 99, "anyone?")


@pytest.mark.asyncio
async def test_send_message_rate_limited(chat, monkeypatch):
    monkeypatch.setattr(settings, "message_rate_limit_per_minute", 2)
    await chat.send_message(1, 2, "one")
    await chat.send_message(1, 2, "two")
    with pytest.raises(RateLimitExceeded):
        await chat.send_message(1, 2, "three")


@pytest.mark.asyncio
async def test_open_thread_marks_partner_messages_read(chat):
    incoming = await chat.send_message(2, 1, "from two")
    outgoing = await chat.send_message(1, 2, "from one")

    thread = await chat.open_thread(1, 2)

    assert [m.id for m in thread] == [incoming.id, outgoing.id]
    assert incoming.is_read is True
    assert outgoing.is_read is False
    assert await chat.unread_count(1) == 0
    assert await chat.unread_count(2) == 1


@pytest.mark.asyncio
async def test_open_thread_unknown_partner(chat):
    with pytest.raises(UserNotFound):
        await chat.open_thread(1, 404)


@pytest.mark.asyncio
async def test_conversations_with_partners(chat, fake_users):
    await chat.send_message(1, 2, "a")
    await chat.send_message(3, 1, "b")
    await fake_users.delete(3)

    rows = await chat.list_conversations_with_partners(1)

    assert [(conv.partner_id, partner.id if partner else None) for conv, partner in rows] == [(3, None), (2, 2)]


@pytest.mark.asyncio
async def test_notify_respects_email_preference(chat, monkeypatch):
    sent = []

    async def fake_notification(to_email, recipient_name, sender_name, preview):
        sent.append((to_email, sender_name, preview))

    monkeypatch.setattr(mailer, "send_new_message_notification", fake_notification)

    to_two = await chat.send_message(1, 2, "ping")
    to_three = await chat.send_message(1, 3, "ping")
    await chat.notify_new_message(to_two)
    await chat.notify_new_message(to_three)

    assert sent == [("user2@example.com", "user1", "ping")]


@pytest.mark.asyncio
async def test_notify_swallows_delivery_errors(chat, monkeypatch):
    async def failing(*_args, **_kwargs):
        raise mailer.EmailDeliveryError("smtp down")

    monkeypatch.setattr(mailer, "send_new_message_notification", failing)
    message = await chat.send_message(1, 2, "ping")
    await chat.notify_new_message(message)
