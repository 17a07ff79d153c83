"""Chat domain exports."""

from .conversations import aggregate_conversations
from .service import ChatService, list_conversations, mark_read, open_thread, send_message, unread_count

__all__ = [
	"ChatService",
	"aggregate_conversations",
	"list_conversations",
	"mark_read",
	"open_thread",
	"send_message",
	"unread_count",
]
