"""Direct messaging: sending, conversation lists, and read state."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from app.domain.identity import mailer
from app.domain.identity.exceptions import UserNotFound
from app.domain.identity.models import User
from app.domain.identity.repo import UserRepository
from app.infra import rate_limit
from app.infra.rate_limit import RateLimitExceeded
from app.obs import metrics as obs_metrics
from app.settings import settings

from .conversations import aggregate_conversations
from .exceptions import CannotMessageSelf, InvalidMessage, RecipientNotFound
from .models import Conversation, Message
from .repo import ChatRepository

logger = logging.getLogger(__name__)


def _now() -> datetime:
	return datetime.now(timezone.utc)


class ChatService:
	def __init__(
		self,
		repository: Optional[ChatRepository] = None,
		users: Optional[UserRepository] = None,
	) -> None:
		self._repo = repository or ChatRepository()
		self._users = users or UserRepository()

	async def send_message(self, sender_id: int, receiver_id: int, content: str) -> Message:
		if not isinstance(content, str) or not content.strip():
			raise InvalidMessage("message_required")
		if len(content) > settings.message_max_length:
			raise InvalidMessage("message_too_long")
		if sender_id == receiver_id:
			raise CannotMessageSelf()
		receiver = await self._users.get(receiver_id)
		if receiver is None:
			raise RecipientNotFound()
		if not await rate_limit.allow(
			"chat_send",
			sender_id,
			limit=settings.message_rate_limit_per_minute,
			window_seconds=60,
		):
			obs_metrics.inc_rate_limited("chat_send")
			raise RateLimitExceeded()
		message = await self._repo.create_message(sender_id, receiver_id, content.strip(), _now())
		obs_metrics.inc_chat_send()
		return message

	async def notify_new_message(self, message: Message) -> None:
		"""Email the receiver about a new message if they opted in. Never raises on delivery failure."""
		receiver = await self._users.get(message.receiver_id)
		if receiver is None or not receiver.email_on_message:
			return
		sender = await self._users.get(message.sender_id)
		sender_name = sender.username if sender else "Someone"
		await mailer.send_quietly(
			mailer.send_new_message_notification(receiver.email, receiver.username, sender_name, message.content)
		)

	async def list_conversations(self, user_id: int) -> List[Conversation]:
		history = await self._repo.list_for_user(user_id)
		return aggregate_conversations(user_id, history)

	async def list_conversations_with_partners(self, user_id: int) -> List[Tuple[Conversation, Optional[User]]]:
		conversations = await self.list_conversations(user_id)
		partners = await self._users.get_many(c.partner_id for c in conversations)
		return [(conversation, partners.get(conversation.partner_id)) for conversation in conversations]

	async def mark_read(self, receiver_id: int, sender_id: int) -> int:
		updated = await self._repo.mark_read(receiver_id, sender_id)
		if updated:
			obs_metrics.inc_chat_read()
		return updated

	async def open_thread(self, user_id: int, partner_id: int) -> List[Message]:
		"""Mark the partner's messages to the user as read, then return the thread oldest first."""
		partner = await self._users.get(partner_id)
		if partner is None:
			raise UserNotFound()
		await self.mark_read(user_id, partner_id)
		return await self._repo.thread(user_id, partner_id)

	async def unread_count(self, user_id: int) -> int:
		return await self._repo.unread_count(user_id)

	async def get_message(self, message_id: int) -> Optional[Message]:
		return await self._repo.get_message(message_id)


_SERVICE = ChatService()


def get_service() -> ChatService:
	return _SERVICE


async def send_message(sender_id: int, receiver_id: int, content: str) -> Message:
	return await _SERVICE.send_message(sender_id, receiver_id, content)


async def list_conversations(user_id: int) -> List[Conversation]:
	return await _SERVICE.list_conversations(user_id)


async def mark_read(receiver_id: int, sender_id: int) -> int:
	return await _SERVICE.mark_read(receiver_id, sender_id)


async def open_thread(user_id: int, partner_id: int) -> List[Message]:
	return await _SERVICE.open_thread(user_id, partner_id)


async def unread_count(user_id: int) -> int:
	return await _SERVICE.unread_count(user_id)
