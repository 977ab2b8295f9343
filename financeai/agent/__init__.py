"""Agno agent logic for the remote model call.

Responsibilities:
    - Configuration loading from environment (.env)
    - Chat model initialization for an OpenAI-compatible endpoint
    - Mapping projected history onto chat messages
    - Wiring the chat service singleton used by the API

Leverages the Agno framework for the model call itself.
Maintains clean separation from the HTTP layer.
"""

from financeai.agent.chat_agent import (
    AgnoModelClient,
    build_chat_service,
    get_chat_service,
)
from financeai.agent.config import AgentConfig, get_agent_config

__all__ = [
    "AgentConfig",
    "AgnoModelClient",
    "build_chat_service",
    "get_agent_config",
    "get_chat_service",
]
