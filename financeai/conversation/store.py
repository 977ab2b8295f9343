"""In-memory conversation logs.

A ConversationStore is owned by one chat session and handed to whoever needs
to read or extend it. Nothing is persisted.
"""

import logging
import uuid
from collections import OrderedDict

from financeai.models.schemas import ConversationTurn, TurnRole
from financeai.prompting.prompts import WELCOME_MESSAGE

logger = logging.getLogger(__name__)


class ConversationStore:
    """Append-only, insertion-ordered log of conversation turns."""

    def __init__(self) -> None:
        self._turns: list[ConversationTurn] = []

    @classmethod
    def seeded(cls, welcome: str = WELCOME_MESSAGE) -> "ConversationStore":
        """Create a store whose first turn is the assistant welcome message."""
        store = cls()
        store.add(TurnRole.ASSISTANT, welcome)
        return store

    def append(self, turn: ConversationTurn) -> None:
        self._turns.append(turn)

    def add(self, role: TurnRole, text: str) -> ConversationTurn:
        """Create a turn, append it and return it."""
        turn = ConversationTurn(role=role, text=text)
        self.append(turn)
        return turn

    def all_turns(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)


class SessionRegistry:
    """Conversation stores keyed by session id, kept in process memory.

    Holds at most ``max_sessions`` stores; starting one more evicts the
    session that was used least recently.
    """

    def __init__(self, welcome: str = WELCOME_MESSAGE, max_sessions: int = 1000) -> None:
        self._welcome = welcome
        self._max_sessions = max_sessions
        self._stores: OrderedDict[str, ConversationStore] = OrderedDict()

    def get(self, session_id: str) -> ConversationStore | None:
        return self._stores.get(session_id)

    def get_or_create(self, session_id: str | None = None) -> tuple[str, ConversationStore]:
        """Return the store for a session, starting a new one when unknown.

        Args:
            session_id: Existing session id, or None for a fresh session.

        Returns:
            The session id and its store.
        """
        session_id = session_id or str(uuid.uuid4())
        store = self._stores.get(session_id)
        if store is not None:
            self._stores.move_to_end(session_id)
            return session_id, store

        while len(self._stores) >= self._max_sessions:
            evicted, _ = self._stores.popitem(last=False)
            logger.info(f"Evicted idle session {evicted}")
        store = ConversationStore.seeded(self._welcome)
        self._stores[session_id] = store
        logger.info(f"Started session {session_id}")
        return session_id, store

    def reset(self, session_id: str) -> bool:
        """Forget a session. Returns False when it did not exist."""
        return self._stores.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._stores)
