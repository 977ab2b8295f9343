"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - fake_client: Scripted stand-in for the remote model
    - sleep_recorder: Backoff sleep that records delays instead of waiting
    - dispatcher / chat_service: Pipeline wired to the fake model
    - store: Conversation log seeded with the welcome turn
    - async_client: HTTPX client for API testing, wired to the fake model
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from financeai.agent.chat_agent import get_chat_service
from financeai.api import app
from financeai.api.chat import get_session_registry
from financeai.conversation.service import ChatService
from financeai.conversation.store import ConversationStore, SessionRegistry
from financeai.dispatch.dispatcher import RetryingDispatcher
from financeai.dispatch.retry import RetryPolicy
from financeai.models.schemas import HistoryEntry


class FakeModelClient:
    """Model client that plays back scripted replies and errors.

    Each call consumes the next outcome: an exception instance is raised,
    anything else is returned. The last outcome repeats once the script
    runs out.
    """

    def __init__(self, *outcomes: object) -> None:
        self.outcomes = list(outcomes) or ["Hello from the model"]
        self.calls: list[tuple[str, list[HistoryEntry], str]] = []

    def script(self, *outcomes: object) -> None:
        self.outcomes = list(outcomes)

    async def generate(
        self,
        system_prompt: str,
        history: list[HistoryEntry],
        message: str,
    ) -> str:
        self.calls.append((system_prompt, history, message))
        index = min(len(self.calls), len(self.outcomes)) - 1
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class SleepRecorder:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_client() -> FakeModelClient:
    """Return a model client that answers with a fixed reply."""
    return FakeModelClient()


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    """Return a sleep that never waits."""
    return SleepRecorder()


@pytest.fixture
def retry_policy() -> RetryPolicy:
    """Default policy: 2 retries, 2 second base delay."""
    return RetryPolicy(max_retries=2, base_delay=2.0)


@pytest.fixture
def dispatcher(
    fake_client: FakeModelClient,
    retry_policy: RetryPolicy,
    sleep_recorder: SleepRecorder,
) -> RetryingDispatcher:
    """Return a dispatcher on the fake model that does not really sleep."""
    return RetryingDispatcher(fake_client, retry_policy, sleep=sleep_recorder)


@pytest.fixture
def chat_service(dispatcher: RetryingDispatcher) -> ChatService:
    """Return a chat service on the fake model."""
    return ChatService(dispatcher)


@pytest.fixture
def store() -> ConversationStore:
    """Return a conversation log holding only the welcome turn."""
    return ConversationStore.seeded()


@pytest.fixture
def session_registry() -> SessionRegistry:
    """Return an empty session registry."""
    return SessionRegistry()


@pytest.fixture
async def async_client(
    chat_service: ChatService,
    session_registry: SessionRegistry,
) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        AsyncClient whose chat endpoint talks to the fake model.
    """
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    app.dependency_overrides[get_session_registry] = lambda: session_registry
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
