"""Send pipeline for one user message.

Assembles the request from the session log, dispatches it, and records both
sides of the exchange. Every call appends exactly one user turn and one
assistant turn, whatever happens during dispatch.
"""

import logging
from collections.abc import Sequence

from pydantic import BaseModel

from financeai.conversation.store import ConversationStore
from financeai.dispatch.dispatcher import DispatchResult, RetryingDispatcher
from financeai.dispatch.retry import ErrorKind
from financeai.models.schemas import CapturedDocument, ConversationTurn, TurnRole
from financeai.prompting.assembler import assemble_request, request_size
from financeai.prompting.prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

RATE_LIMIT_REPLY = (
    "⏳ Rate limit reached. The model API has usage limits. Please wait a minute "
    "and try again, or check your API quota at "
    "https://ai.google.dev/gemini-api/docs/rate-limits"
)
UNAUTHORIZED_REPLY = (
    "🔑 API key issue. Please check that your LLM_API_KEY (or GEMINI_API_KEY) "
    "is correctly set in your .env file."
)
TOO_LARGE_REPLY = (
    "📎 The attached documents are too large to send ({size} bytes, limit "
    "{limit} bytes). Please attach fewer or smaller files."
)
TOO_LARGE_ERROR = "too_large"


class Exchange(BaseModel):
    """Both turns recorded for one send.

    Attributes:
        user: The user turn.
        reply: The assistant turn (model reply or error explanation).
        error: Error class when the model did not answer.
    """

    user: ConversationTurn
    reply: ConversationTurn
    error: str | None = None


def error_reply(result: DispatchResult) -> str:
    """Human-readable explanation for a failed dispatch."""
    if result.error is ErrorKind.RATE_LIMITED:
        return RATE_LIMIT_REPLY
    if result.error is ErrorKind.UNAUTHORIZED:
        return UNAUTHORIZED_REPLY
    detail = result.detail or "Unknown error"
    return f"Sorry, I encountered an error: {detail}"


def user_display_text(text: str, documents: Sequence[CapturedDocument]) -> str:
    """Text shown in the log for a user turn, listing attachment names."""
    if not documents:
        return text
    names = ", ".join(doc.name for doc in documents)
    return f"{text}\n\n📎 Attached: {names}"


class ChatService:
    """Runs assembly, dispatch and logging for chat messages."""

    def __init__(
        self,
        dispatcher: RetryingDispatcher,
        system_prompt: str = SYSTEM_PROMPT,
        max_request_bytes: int | None = None,
    ) -> None:
        """Initialize the chat service.

        Args:
            dispatcher: Delivers requests to the model.
            system_prompt: Instruction text sent with every request.
            max_request_bytes: Optional ceiling on the assembled request size.
        """
        self._dispatcher = dispatcher
        self._system_prompt = system_prompt
        self._max_request_bytes = max_request_bytes

    async def send_message(
        self,
        store: ConversationStore,
        text: str,
        documents: Sequence[CapturedDocument] = (),
    ) -> Exchange:
        """Send a user message and record the exchange.

        Args:
            store: The session's conversation log.
            text: The user's message.
            documents: Documents attached to this message only.

        Returns:
            Exchange with the two turns appended to the store.
        """
        prior_turns = store.all_turns()
        request = assemble_request(prior_turns, text, documents, self._system_prompt)

        logger.info(
            f"Sending message with {len(documents)} documents, "
            f"history length {len(request.history)}"
        )
        user_turn = store.add(TurnRole.USER, user_display_text(text, documents))

        size = request_size(request)
        if self._max_request_bytes is not None and size > self._max_request_bytes:
            logger.warning(f"Request of {size} bytes exceeds limit {self._max_request_bytes}")
            reply = TOO_LARGE_REPLY.format(size=size, limit=self._max_request_bytes)
            reply_turn = store.add(TurnRole.ASSISTANT, reply)
            return Exchange(user=user_turn, reply=reply_turn, error=TOO_LARGE_ERROR)

        result = await self._dispatcher.dispatch(request)
        if result.ok:
            reply_turn = store.add(TurnRole.ASSISTANT, result.text or "")
            return Exchange(user=user_turn, reply=reply_turn)

        reply_turn = store.add(TurnRole.ASSISTANT, error_reply(result))
        return Exchange(user=user_turn, reply=reply_turn, error=result.error.value)
