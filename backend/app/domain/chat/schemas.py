"""Pydantic schemas for the messaging API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.domain.identity.models import User
from app.domain.identity.schemas import UserPublic

from .models import Conversation, Message


class SendMessageRequest(BaseModel):
	receiver_id: int = Field(..., gt=0)
	content: str


class MessageOut(BaseModel):
	id: int
	sender_id: int
	receiver_id: int
	content: str
	is_read: bool
	created_at: datetime

	@classmethod
	def from_model(cls, message: Message) -> "MessageOut":
		return cls(
			id=message.id,
			sender_id=message.sender_id,
			receiver_id=message.receiver_id,
			content=message.content,
			is_read=message.is_read,
			created_at=message.created_at,
		)


class ConversationOut(BaseModel):
	partner_id: int
	last_message: MessageOut
	partner: Optional[UserPublic] = None

	@classmethod
	def from_model(cls, conversation: Conversation, partner: Optional[User]) -> "ConversationOut":
		return cls(
			partner_id=conversation.partner_id,
			last_message=MessageOut.from_model(conversation.last_message),
			partner=UserPublic.from_model(partner) if partner else None,
		)


class UnreadCountOut(BaseModel):
	count: int
