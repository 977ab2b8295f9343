"""Pydantic models for the conversation pipeline and the HTTP API.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - CapturedDocument: A user file read into memory as text or base64
    - ConversationTurn: One immutable message in a session log
    - OutgoingRequest: System prompt, history and message sent to the model
    - ChatRequest / ChatResponse: Chat endpoint payloads
    - CaptureResponse: Result of a document capture upload
    - SessionInfo: Chat session details
"""

from financeai.models.schemas import (
    CaptureBatch,
    CapturedDocument,
    CaptureFailure,
    CaptureFailureReason,
    CaptureResponse,
    ChatRequest,
    ChatResponse,
    ConversationTurn,
    DocumentEncoding,
    HistoryEntry,
    OutgoingRequest,
    SessionInfo,
    TurnRole,
)

__all__ = [
    "CaptureBatch",
    "CaptureFailure",
    "CaptureFailureReason",
    "CaptureResponse",
    "CapturedDocument",
    "ChatRequest",
    "ChatResponse",
    "ConversationTurn",
    "DocumentEncoding",
    "HistoryEntry",
    "OutgoingRequest",
    "SessionInfo",
    "TurnRole",
]
