"""Conversation state and the send pipeline.

Responsibilities:
    - Append-only conversation log per session, seeded with a welcome turn
    - In-memory session registry (no persistence)
    - send_message: assembly, dispatch and turn bookkeeping
"""

from financeai.conversation.service import (
    ChatService,
    Exchange,
    error_reply,
    user_display_text,
)
from financeai.conversation.store import ConversationStore, SessionRegistry

__all__ = [
    "ChatService",
    "ConversationStore",
    "Exchange",
    "SessionRegistry",
    "error_reply",
    "user_display_text",
]
