"""Outgoing request assembly.

Projects the conversation log into model history and injects attached
document content into the user message. The document block layout is a
wire format the prompting relies on: keep delimiters, ordering and the
trailing instruction byte-for-byte stable.
"""

import logging
from collections.abc import Sequence

from financeai.models.schemas import (
    CapturedDocument,
    ConversationTurn,
    HistoryEntry,
    OutgoingRequest,
    TurnRole,
)
from financeai.prompting.prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

DELIMITER = "━" * 34
BLOCK_HEADER = "📎 ATTACHED DOCUMENTS:"
FILE_LABEL = "📄 FILE: "
TRAILING_INSTRUCTION = "Please analyze the above document(s) and answer this question:"


def project_history(turns: Sequence[ConversationTurn]) -> list[HistoryEntry]:
    """Map the conversation log to model history.

    The first turn is the seeded welcome message and is skipped. Any
    assistant turns directly after it are skipped too, so the history never
    opens with a model turn even for a log that was not seeded.

    Args:
        turns: The full conversation log in insertion order.

    Returns:
        History entries for every turn after the first, starting at the
        first user turn.
    """
    remaining = list(turns[1:])
    while remaining and remaining[0].role is not TurnRole.USER:
        remaining.pop(0)
    return [
        HistoryEntry(
            role="user" if turn.role is TurnRole.USER else "model",
            text=turn.text,
        )
        for turn in remaining
    ]


def build_document_block(user_text: str, documents: Sequence[CapturedDocument]) -> str:
    """Render attached documents as the block appended to the user message.

    Args:
        user_text: The original question, repeated after the documents.
        documents: Attached documents in display order.

    Returns:
        The document block, or an empty string when nothing is attached.
    """
    if not documents:
        return ""

    parts = [f"\n\n{BLOCK_HEADER}\n\n"]
    for doc in documents:
        parts.append(f"{DELIMITER}\n")
        parts.append(f"{FILE_LABEL}{doc.name}\n")
        parts.append(f"{DELIMITER}\n\n")
        parts.append(doc.payload)
        parts.append("\n\n")

    parts.append(f"{DELIMITER}\n\n")
    parts.append(f"{TRAILING_INSTRUCTION}\n{user_text}")
    return "".join(parts)


def assemble_request(
    turns: Sequence[ConversationTurn],
    user_text: str,
    documents: Sequence[CapturedDocument] = (),
    system_prompt: str = SYSTEM_PROMPT,
) -> OutgoingRequest:
    """Build the request for one user message.

    Document payloads are inserted verbatim; no truncation happens here.

    Args:
        turns: Conversation log before the new user turn.
        user_text: The new user message.
        documents: Documents attached to this message.
        system_prompt: Instruction text for the model.

    Returns:
        OutgoingRequest ready for dispatch.
    """
    message = user_text + build_document_block(user_text, documents)
    history = project_history(turns)

    if documents:
        logger.debug(
            f"Injected {len(documents)} documents, message length {len(message)}"
        )

    return OutgoingRequest(
        system_prompt=system_prompt,
        history=history,
        message=message,
    )


def request_size(request: OutgoingRequest) -> int:
    """Return the UTF-8 byte size of everything sent to the model."""
    total = len(request.system_prompt.encode("utf-8"))
    total += len(request.message.encode("utf-8"))
    total += sum(len(entry.text.encode("utf-8")) for entry in request.history)
    return total
