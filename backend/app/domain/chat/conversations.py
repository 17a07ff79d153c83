"""Per-partner conversation summaries built from a user's message history."""

from __future__ import annotations

from typing import Iterable, List

from .models import Conversation, Message


def newest_first_key(message: Message) -> tuple:
	# id breaks created_at ties so the order is total
	return (message.created_at, message.id)


def sort_newest_first(messages: Iterable[Message]) -> List[Message]:
	return sorted(messages, key=newest_first_key, reverse=True)


def aggregate_conversations(user_id: int, messages: Iterable[Message]) -> List[Conversation]:
	"""Collapse a newest-first message history into one entry per partner.

	The first message seen for each partner is their most recent one, so the
	result is already ordered by last activity, descending.
	"""
	seen: dict[int, Conversation] = {}
	for message in messages:
		partner_id = message.partner_of(user_id)
		if partner_id not in seen:
			seen[partner_id] = Conversation(partner_id=partner_id, last_message=message)
	return list(seen.values())
