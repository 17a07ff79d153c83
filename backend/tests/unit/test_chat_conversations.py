from datetime import datetime, timedelta, timezone

import pytest

from app.domain.chat.conversations import aggregate_conversations, sort_newest_first
from app.domain.chat.models import Message
from app.domain.chat.repo import ChatRepository

BASE = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _msg(msg_id: int, sender: int, receiver: int, minutes: int) -> Message:
    return Message(
        id=msg_id,
        sender_id=sender,
        receiver_id=receiver,
        content=f"m{msg_id}",
        created_at=BASE + timedelta(minutes=minutes),
    )


def _group_then_max(user_id, messages):
    latest: dict[int, Message] = {}
    for message in messages:
        partner = message.partner_of(user_id)
        current = latest.get(partner)
        if current is None or (message.created_at, message.id) > (current.created_at, current.id):
            latest[partner] = message
    ordered = sorted(latest.items(), key=lambda kv: (kv[1].created_at, kv[1].id), reverse=True)
    return [(partner, message.id) for partner, message in ordered]


def test_empty_history_gives_no_conversations():
    assert aggregate_conversations(1, []) == []


def test_one_entry_per_partner_with_latest_message():
    history = sort_newest_first(
        [
            _msg(1, 1, 2, 0),
            _msg(2, 2, 1, 5),
            _msg(3, 1, 3, 3),
            _msg(4, 4, 1, 10),
            _msg(5, 3, 1, 1),
        ]
    )
    conversations = aggregate_conversations(1, history)
    assert [(c.partner_id, c.last_message.id) for c in conversations] == [(4, 4), (2, 2), (3, 3)]


def test_partner_is_the_other_party_in_either_direction():
    conversations = aggregate_conversations(7, [_msg(9, 7, 8, 2), _msg(8, 8, 7, 1)])
    assert len(conversations) == 1
    assert conversations[0].partner_id == 8
    assert conversations[0].last_message.id == 9


def test_ties_on_created_at_resolved_by_id():
    history = sort_newest_first([_msg(10, 1, 2, 0), _msg(11, 1, 3, 0), _msg(12, 2, 1, 0)])
    assert [m.id for m in history] == [12, 11, 10]
    conversations = aggregate_conversations(1, history)
    assert [(c.partner_id, c.last_message.id) for c in conversations] == [(2, 12), (3, 11)]


def test_single_pass_agrees_with_group_by():
    messages = [
        _msg(i, sender, receiver, minutes)
        for i, (sender, receiver, minutes) in enumerate(
            [(1, 2, 4), (2, 1, 9), (1, 3, 9), (3, 1, 2), (1, 4, 7), (5, 1, 7), (1, 5, 1), (2, 1, 9)],
            start=1,
        )
    ]
    single_pass = [(c.partner_id, c.last_message.id) for c in aggregate_conversations(1, sort_newest_first(messages))]
    assert single_pass == _group_then_max(1, messages)


@pytest.mark.asyncio
async def test_memory_store_conversations_and_unread():
    repo = ChatRepository()
    await repo.create_message(1, 2, "hi", BASE)
    await repo.create_message(2, 1, "hey", BASE + timedelta(minutes=1))
    await repo.create_message(3, 1, "yo", BASE + timedelta(minutes=2))

    history = await repo.list_for_user(1)
    assert [m.content for m in history] == ["yo", "hey", "hi"]
    assert await repo.unread_count(1) == 2
    assert await repo.unread_count(2) == 1


@pytest.mark.asyncio
async def test_mark_read_only_touches_sender_to_receiver():
    repo = ChatRepository()
    a_to_b = await repo.create_message(1, 2, "from a", BASE)
    b_to_a = await repo.create_message(2, 1, "from b", BASE + timedelta(seconds=1))
    c_to_b = await repo.create_message(3, 2, "from c", BASE + timedelta(seconds=2))

    updated = await repo.mark_read(2, 1)

    assert updated == 1
    assert a_to_b.is_read is True
    assert b_to_a.is_read is False
    assert c_to_b.is_read is False


@pytest.mark.asyncio
async def test_thread_is_oldest_first_and_excludes_others():
    repo = ChatRepository()
    await repo.create_message(1, 2, "first", BASE)
    await repo.create_message(1, 3, "elsewhere", BASE + timedelta(seconds=1))
    await repo.create_message(2, 1, "second", BASE + timedelta(seconds=2))

    thread = await repo.thread(2, 1)
    assert [m.content for m in thread] == ["first", "second"]
