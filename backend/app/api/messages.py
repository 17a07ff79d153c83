"""Direct messaging endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from app.domain.chat import service as chat_service
from app.domain.chat.exceptions import ChatError
from app.domain.chat.schemas import ConversationOut, MessageOut, SendMessageRequest, UnreadCountOut
from app.domain.identity.exceptions import UserNotFound
from app.infra.auth import AuthenticatedUser, get_current_user
from app.infra.rate_limit import RateLimitExceeded

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.post("", response_model=MessageOut)
async def send_message(
	payload: SendMessageRequest,
	background_tasks: BackgroundTasks,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> MessageOut:
	svc = chat_service.get_service()
	try:
		message = await svc.send_message(auth_user.id, payload.receiver_id, payload.content)
	except ChatError as exc:
		raise HTTPException(status_code=exc.status_code, detail=exc.reason) from None
	except RateLimitExceeded as exc:
		raise HTTPException(status.HTTP_429_TOO_MANY_REQUESTS, detail=exc.reason) from None
	background_tasks.add_task(svc.notify_new_message, message)
	return MessageOut.from_model(message)


@router.get("/conversations", response_model=List[ConversationOut])
async def list_conversations(auth_user: AuthenticatedUser = Depends(get_current_user)) -> List[ConversationOut]:
	rows = await chat_service.get_service().list_conversations_with_partners(auth_user.id)
	return [ConversationOut.from_model(conversation, partner) for conversation, partner in rows]


@router.get("/unread/count", response_model=UnreadCountOut)
async def unread_count(auth_user: AuthenticatedUser = Depends(get_current_user)) -> UnreadCountOut:
	return UnreadCountOut(count=await chat_service.unread_count(auth_user.id))


@router.get("/{partner_id}", response_model=List[MessageOut])
async def open_thread(partner_id: int, auth_user: AuthenticatedUser = Depends(get_current_user)) -> List[MessageOut]:
	try:
		messages = await chat_service.open_thread(auth_user.id, partner_id)
	except UserNotFound as exc:
		raise HTTPException(status.HTTP_404_NOT_FOUND, detail=exc.reason) from None
	return [MessageOut.from_model(message) for message in messages]
