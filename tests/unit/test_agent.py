"""Unit tests for AgentConfig and the Agno-backed model client.

Tests configuration validation, message wiring and provider error
classification, with the real Agno chat model talking to an httpx
MockTransport.
"""

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest
import pytest_check as check
from agno.exceptions import ModelProviderError
from pydantic import ValidationError

from financeai.agent.chat_agent import AgnoModelClient
from financeai.agent.config import GEMINI_OPENAI_BASE_URL, AgentConfig
from financeai.dispatch.dispatcher import RetryingDispatcher
from financeai.dispatch.retry import (
    ErrorKind,
    MalformedResponseError,
    RetryPolicy,
    UnauthorizedError,
)
from financeai.models.schemas import HistoryEntry, OutgoingRequest
from financeai.prompting.prompts import SYSTEM_PROMPT
from tests.conftest import SleepRecorder


class TestAgentConfig:
    """Tests for AgentConfig validation."""

    def test_valid_config_with_all_fields(self) -> None:
        """Config accepts valid values for all fields."""
        config = AgentConfig(
            api_key="test-key-12345",
            base_url="https://llm.example.test/v1",
            model_name="gpt-4o",
            temperature=0.5,
            max_tokens=4096,
            max_retries=3,
            base_delay=0.5,
            max_document_bytes=1024,
            max_request_bytes=4096,
        )

        assert config.api_key == "test-key-12345"
        assert config.base_url == "https://llm.example.test/v1"
        assert config.model_name == "gpt-4o"
        assert config.max_retries == 3
        assert config.base_delay == 0.5
        assert config.max_document_bytes == 1024

    def test_config_with_default_values(self) -> None:
        """Config defaults match the Gemini setup and retry policy."""
        with patch.dict(
            "os.environ",
            {"LLM_MODEL": "", "LLM_BASE_URL": ""},
            clear=False,
        ):
            config = AgentConfig(api_key="test-key", model_name="gemini-1.5-flash")

        assert config.base_url == GEMINI_OPENAI_BASE_URL
        assert config.temperature == 0.7
        assert config.max_tokens == 2048

    def test_retry_settings_from_environment(self) -> None:
        """Retry settings are read from the environment."""
        with patch.dict(
            "os.environ",
            {"LLM_MAX_RETRIES": "4", "LLM_RETRY_BASE_DELAY": "0.25"},
        ):
            config = AgentConfig(api_key="test-key")

        assert config.max_retries == 4
        assert config.base_delay == 0.25

    def test_size_limits_unset_by_default(self) -> None:
        """No document or request ceiling unless configured."""
        with patch.dict("os.environ", {"MAX_DOCUMENT_BYTES": "", "MAX_REQUEST_BYTES": ""}):
            config = AgentConfig(api_key="test-key")

        assert config.max_document_bytes is None
        assert config.max_request_bytes is None

    def test_missing_api_key_is_allowed(self) -> None:
        """An empty key is accepted and reported as not configured."""
        config = AgentConfig(api_key="")

        assert config.has_api_key is False

    def test_config_strips_api_key_whitespace(self) -> None:
        """Config strips leading/trailing whitespace from API key."""
        config = AgentConfig(api_key="  test-key  ")

        assert config.api_key == "test-key"
        assert config.has_api_key is True

    def test_config_fails_with_temperature_too_high(self) -> None:
        """Config rejects temperature above 2.0."""
        with pytest.raises(ValidationError) as exc_info:
            AgentConfig(api_key="test", temperature=2.5)

        assert "temperature" in str(exc_info.value).lower()

    def test_config_fails_with_negative_retries(self) -> None:
        """Config rejects a negative retry count."""
        with pytest.raises(ValidationError) as exc_info:
            AgentConfig(api_key="test", max_retries=-1)

        assert "max_retries" in str(exc_info.value).lower()

    def test_config_fails_with_zero_document_limit(self) -> None:
        """A document ceiling must be positive."""
        with pytest.raises(ValidationError):
            AgentConfig(api_key="test", max_document_bytes=0)


def make_config(**overrides) -> AgentConfig:
    values = {
        "api_key": "test-key",
        "base_url": "https://llm.example.test/v1",
        "model_name": "gemini-1.5-flash",
        "temperature": 0.7,
        "max_tokens": 2048,
    }
    values.update(overrides)
    return AgentConfig(**values)


def completion(content: str | None) -> dict:
    """Chat completion body as an OpenAI-compatible endpoint returns it."""
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "gemini-1.5-flash",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2},
    }


class FakeEndpoint:
    """httpx handler playing an OpenAI-compatible chat completions endpoint."""

    def __init__(self, status_code: int = 200, body: dict | None = None) -> None:
        self.status_code = status_code
        self.body = body if body is not None else completion("Reply text")
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        return httpx.Response(self.status_code, json=self.body)

    def client(self, **overrides) -> AgnoModelClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self))
        return AgnoModelClient(make_config(**overrides), http_client=http_client)


class TestAgnoModelClient:
    """Tests for AgnoModelClient over a mocked HTTP transport."""

    @patch("financeai.agent.chat_agent.OpenAIChat")
    def test_model_created_from_config(self, mock_openai_chat: MagicMock) -> None:
        """The chat model gets config values and SDK retries disabled."""
        AgnoModelClient(make_config())

        kwargs = mock_openai_chat.call_args.kwargs
        check.equal(kwargs["id"], "gemini-1.5-flash")
        check.equal(kwargs["api_key"], "test-key")
        check.equal(kwargs["base_url"], "https://llm.example.test/v1")
        check.equal(kwargs["temperature"], 0.7)
        check.equal(kwargs["max_tokens"], 2048)
        check.equal(kwargs["max_retries"], 0)

    async def test_generate_sends_history_and_message(self) -> None:
        """History roles map to user/assistant and the message comes last."""
        endpoint = FakeEndpoint()

        reply = await endpoint.client().generate(
            "System prompt",
            [HistoryEntry(role="user", text="Hi"), HistoryEntry(role="model", text="Hello")],
            "Question",
        )

        assert reply == "Reply text"
        sent = [(m["role"], m["content"]) for m in endpoint.requests[0]["messages"]]
        assert sent == [
            ("system", "System prompt"),
            ("user", "Hi"),
            ("assistant", "Hello"),
            ("user", "Question"),
        ]

    async def test_system_prompt_sent_unchanged(self) -> None:
        """The system prompt reaches the endpoint exactly as given."""
        endpoint = FakeEndpoint()

        await endpoint.client().generate(SYSTEM_PROMPT, [], "Hi")

        first = endpoint.requests[0]["messages"][0]
        check.equal((first["role"], first["content"]), ("system", SYSTEM_PROMPT))

    async def test_missing_api_key_raises_unauthorized(self) -> None:
        """Without an API key no request is made."""
        endpoint = FakeEndpoint()

        with pytest.raises(UnauthorizedError):
            await endpoint.client(api_key="").generate("System", [], "Hi")

        assert endpoint.requests == []

    async def test_empty_content_is_malformed(self) -> None:
        """A completion without text content raises MalformedResponseError."""
        endpoint = FakeEndpoint(body=completion(""))

        with pytest.raises(MalformedResponseError):
            await endpoint.client().generate("System", [], "Hi")

    async def test_provider_error_keeps_status_code(self) -> None:
        """HTTP failures surface with their status code."""
        endpoint = FakeEndpoint(429, {"error": {"message": "boom"}})

        with pytest.raises(ModelProviderError) as exc_info:
            await endpoint.client().generate("System", [], "Hi")

        assert exc_info.value.status_code == 429


class TestAgnoDispatch:
    """Provider failures classified end to end through the dispatcher."""

    @pytest.mark.parametrize(
        ("status", "kind", "attempts", "delays"),
        [
            (429, ErrorKind.RATE_LIMITED, 3, [2.0, 4.0]),
            (401, ErrorKind.UNAUTHORIZED, 1, []),
            (403, ErrorKind.UNAUTHORIZED, 1, []),
            (503, ErrorKind.UNAVAILABLE, 1, []),
        ],
    )
    async def test_status_decides_retry_and_class(
        self,
        status: int,
        kind: ErrorKind,
        attempts: int,
        delays: list[float],
        sleep_recorder: SleepRecorder,
    ) -> None:
        """The status code alone decides the class, whatever the message says."""
        endpoint = FakeEndpoint(status, {"error": {"message": "boom"}})
        dispatcher = RetryingDispatcher(endpoint.client(), RetryPolicy(), sleep=sleep_recorder)

        result = await dispatcher.dispatch(
            OutgoingRequest(system_prompt="System", history=[], message="Hi")
        )

        check.equal(result.error, kind)
        check.equal(result.attempts, attempts)
        check.equal(len(endpoint.requests), attempts)
        check.equal(sleep_recorder.delays, delays)

    async def test_success_after_rate_limit(self, sleep_recorder: SleepRecorder) -> None:
        """A rate limit followed by a completion returns the reply."""
        responses = [
            httpx.Response(429, json={"error": {"message": "boom"}}),
            httpx.Response(200, json=completion("Recovered")),
        ]
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: responses.pop(0))
        )
        client = AgnoModelClient(make_config(), http_client=http_client)
        dispatcher = RetryingDispatcher(client, RetryPolicy(), sleep=sleep_recorder)

        result = await dispatcher.dispatch(
            OutgoingRequest(system_prompt="System", history=[], message="Hi")
        )

        check.equal(result.text, "Recovered")
        check.equal(result.attempts, 2)
        check.equal(sleep_recorder.delays, [2.0])


class TestGetChatService:
    """Tests for get_chat_service singleton function."""

    def test_singleton_returns_same_instance(self) -> None:
        """get_chat_service returns the same instance on multiple calls."""
        import financeai.agent.chat_agent as chat_agent_module

        # Reset singleton
        chat_agent_module._chat_service = None

        with patch.object(chat_agent_module, "build_chat_service") as mock_build:
            mock_build.return_value = MagicMock()

            first = chat_agent_module.get_chat_service()
            second = chat_agent_module.get_chat_service()

            assert first is second
            mock_build.assert_called_once()

        chat_agent_module._chat_service = None

    @patch("financeai.agent.chat_agent.OpenAIChat")
    def test_build_uses_configured_retry_policy(self, mock_openai_chat: MagicMock) -> None:
        """The dispatcher gets the retry settings from configuration."""
        from financeai.agent.chat_agent import build_chat_service

        service = build_chat_service(make_config(max_retries=5, base_delay=0.1))

        assert service._dispatcher.policy.max_retries == 5
        assert service._dispatcher.policy.base_delay == 0.1
