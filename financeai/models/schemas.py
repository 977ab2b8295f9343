import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _new_id() -> str:
    return uuid.uuid4().hex


class DocumentEncoding(str, Enum):
    """How a captured document's payload is represented."""

    TEXT = "text"
    BINARY_BASE64 = "binary_base64"


class CapturedDocument(BaseModel):
    """A user-supplied file, fully read into memory.

    Attributes:
        id: Opaque token assigned at capture time.
        name: Original file name (display only).
        size_bytes: Byte length of the source file.
        media_type_hint: Media type reported by the uploader, possibly empty.
        encoding: Whether payload is decoded text or base64.
        payload: Decoded text, or the base64-encoded file content.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str
    size_bytes: int = Field(ge=0)
    media_type_hint: str = ""
    encoding: DocumentEncoding
    payload: str


class CaptureFailureReason(str, Enum):
    """Why a single file could not be captured."""

    READ_ERROR = "read_error"
    TOO_LARGE = "too_large"


class CaptureFailure(BaseModel):
    """A file dropped from a capture batch."""

    name: str
    reason: CaptureFailureReason
    detail: str = ""


class CaptureBatch(BaseModel):
    """Result of capturing a batch of files.

    Every input file ends up in exactly one of the two lists.
    """

    documents: list[CapturedDocument] = Field(default_factory=list)
    failures: list[CaptureFailure] = Field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.documents) + len(self.failures)


class TurnRole(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurn(BaseModel):
    """One immutable message in the conversation log."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    role: TurnRole
    text: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class HistoryEntry(BaseModel):
    """A prior turn as the remote model expects it."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"]
    text: str


class OutgoingRequest(BaseModel):
    """Everything sent to the model for a single user message.

    Attributes:
        system_prompt: Constant domain instruction text.
        history: Prior turns, never starting with a model turn.
        message: User text, with the document block appended when
            documents are attached.
    """

    model_config = ConfigDict(frozen=True)

    system_prompt: str
    history: list[HistoryEntry] = Field(default_factory=list)
    message: str


class ChatRequest(BaseModel):
    """Request payload for the chat endpoint.

    Attributes:
        message: User's question or prompt.
        session_id: Optional session for conversation continuity.
        documents: Documents attached to this message only.
    """

    message: str = Field(..., min_length=1)
    session_id: str | None = None
    documents: list[CapturedDocument] = Field(default_factory=list)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ChatResponse(BaseModel):
    """Assistant reply for one chat request.

    Attributes:
        reply: The assistant turn text (model reply or error explanation).
        session_id: Session identifier for follow-up questions.
        error: Error class when the model could not answer.
        turns: Number of turns in the session after this exchange.
    """

    reply: str
    session_id: str
    error: str | None = None
    turns: int = Field(ge=0)


class CaptureResponse(BaseModel):
    """Response after capturing uploaded documents."""

    documents: list[CapturedDocument]
    failures: list[CaptureFailure]


class SessionInfo(BaseModel):
    """Conversation log of a chat session."""

    session_id: str
    turns: list[ConversationTurn]
