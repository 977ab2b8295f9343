"""Chat and session endpoints.

POST /chat runs the full send pipeline for one message. Model failures are
part of the conversation (an assistant turn explains them), so they come
back as a normal 200 response with the error class set.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from financeai.agent.chat_agent import get_chat_service
from financeai.conversation.service import ChatService
from financeai.conversation.store import SessionRegistry
from financeai.models.schemas import ChatRequest, ChatResponse, SessionInfo

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

_session_registry = SessionRegistry()


def get_session_registry() -> SessionRegistry:
    """Return the process-wide session registry."""
    return _session_registry


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
    registry: SessionRegistry = Depends(get_session_registry),
) -> ChatResponse:
    """Send a message, with optional attached documents, to the assistant.

    Args:
        request: Message text, session id and attached documents.

    Returns:
        ChatResponse with the assistant turn text.

    Raises:
        422: Empty message or malformed documents.
    """
    session_id, store = registry.get_or_create(request.session_id)

    logger.info(
        f"Chat request for session {session_id}: "
        f"{len(request.documents)} documents attached"
    )
    exchange = await service.send_message(store, request.message, request.documents)

    return ChatResponse(
        reply=exchange.reply.text,
        session_id=session_id,
        error=exchange.error,
        turns=len(store),
    )


@router.get("/sessions/{session_id}", response_model=SessionInfo)
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionInfo:
    """Return the conversation log of a session.

    Raises:
        404: Unknown session.
    """
    store = registry.get(session_id)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    return SessionInfo(session_id=session_id, turns=list(store.all_turns()))


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    """Forget a session so the next message starts a new conversation.

    Raises:
        404: Unknown session.
    """
    if not registry.reset(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
