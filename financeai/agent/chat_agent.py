"""Agno-backed model client and chat service wiring.

Architecture decisions:

1. **Model layer, not Agent runs** - ``Agent.arun`` turns provider failures
   into a run with an error status and drops the HTTP status code. Calling
   the model's ``aresponse`` directly lets agno's ``ModelProviderError``
   (with ``status_code``) reach the dispatcher, which needs it to tell a
   rate limit from a credential failure.

2. **Exact system prompt** - The system prompt goes out as a plain
   ``system`` message, with nothing appended by the framework.

3. **No SDK retries** - The OpenAI client's built-in retries are disabled;
   RetryingDispatcher owns the retry policy so backoff stays predictable.

4. **Singleton service** - The model client and dispatcher are created once
   and reused across requests, like any other expensive client.
"""

import logging

import httpx
from agno.models.message import Message
from agno.models.openai import OpenAIChat

from financeai.agent.config import AgentConfig, get_agent_config
from financeai.conversation.service import ChatService
from financeai.dispatch.dispatcher import RetryingDispatcher
from financeai.dispatch.retry import MalformedResponseError, RetryPolicy, UnauthorizedError
from financeai.models.schemas import HistoryEntry

logger = logging.getLogger(__name__)

# Gemini calls the assistant role "model"; OpenAI-compatible APIs call it "assistant"
_HISTORY_ROLES = {"user": "user", "model": "assistant"}

# OpenAIChat sends system messages as "developer" by default, which
# OpenAI-compatible endpoints other than OpenAI's own may reject
_WIRE_ROLES = {
    "system": "system",
    "user": "user",
    "assistant": "assistant",
    "tool": "tool",
    "model": "assistant",
}


class AgnoModelClient:
    """ModelClient implementation on top of an Agno chat model.

    Wraps Agno's OpenAIChat with:
    - An OpenAI-compatible endpoint (Gemini by default)
    - Per-call history passed as explicit messages
    - Credential and empty-response checks
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the model client.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
            http_client: Optional HTTP client for the OpenAI SDK.
        """
        self._config = config or get_agent_config()
        self._http_client = http_client
        self._model = self._create_model()

    def _create_model(self) -> OpenAIChat:
        """Create the chat model for the configured endpoint.

        Returns:
            Configured OpenAIChat instance.
        """
        return OpenAIChat(
            id=self._config.model_name,
            api_key=self._config.api_key or None,
            base_url=self._config.base_url,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
            max_retries=0,
            role_map=_WIRE_ROLES,
            http_client=self._http_client,
        )

    @staticmethod
    def _to_messages(
        system_prompt: str,
        history: list[HistoryEntry],
        message: str,
    ) -> list[Message]:
        messages = [Message(role="system", content=system_prompt)]
        messages.extend(
            Message(role=_HISTORY_ROLES[entry.role], content=entry.text) for entry in history
        )
        messages.append(Message(role="user", content=message))
        return messages

    async def generate(
        self,
        system_prompt: str,
        history: list[HistoryEntry],
        message: str,
    ) -> str:
        """Get the model's reply to a message.

        Args:
            system_prompt: Instruction text for the model.
            history: Prior turns, starting with a user turn.
            message: The new user message.

        Returns:
            Complete response text.

        Raises:
            UnauthorizedError: If no API key is configured.
            MalformedResponseError: If the model returned no text.
            ModelProviderError: Provider failures, with the HTTP status when
                there was one, are passed through for classification.
        """
        if not self._config.has_api_key:
            raise UnauthorizedError(
                "LLM API key is not configured. Set LLM_API_KEY or GEMINI_API_KEY in .env"
            )

        logger.info(f"Sending message to {self._config.model_name}...")
        response = await self._model.aresponse(
            messages=self._to_messages(system_prompt, history, message)
        )

        content = response.content
        if not isinstance(content, str) or not content.strip():
            raise MalformedResponseError("No text content in model response")
        return content


def build_chat_service(config: AgentConfig | None = None) -> ChatService:
    """Wire the model client, dispatcher and chat service from configuration."""
    config = config or get_agent_config()
    dispatcher = RetryingDispatcher(
        AgnoModelClient(config),
        RetryPolicy(max_retries=config.max_retries, base_delay=config.base_delay),
    )
    return ChatService(dispatcher, max_request_bytes=config.max_request_bytes)


# Module-level singleton instance
_chat_service: ChatService | None = None


def get_chat_service() -> ChatService:
    """Get or create the global chat service.

    Uses singleton pattern for resource efficiency.

    Returns:
        The ChatService instance.
    """
    global _chat_service
    if _chat_service is None:
        _chat_service = build_chat_service()
    return _chat_service
