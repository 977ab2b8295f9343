"""Agent configuration with environment variable loading.

Pydantic-based configuration for the model client, retry policy and
attachment limits. Targets any OpenAI-compatible API via a custom base URL;
the default points at Gemini's OpenAI-compatible endpoint.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, PositiveInt, field_validator

# Load environment variables from .env file
load_dotenv()

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


def _optional_int(name: str) -> int | None:
    value = os.getenv(name)
    return int(value) if value else None


class AgentConfig(BaseModel):
    """Configuration for the model client.

    Attributes:
        api_key: API key for model access (empty means not configured).
        base_url: OpenAI-compatible API base URL.
        model_name: Model identifier to use.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response.
        max_retries: Rate-limit retries after the first attempt.
        base_delay: Seconds before the first retry, doubled for each next one.
        max_document_bytes: Optional ceiling for one attached document.
        max_request_bytes: Optional ceiling for one assembled request.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv(
            "LLM_API_KEY", os.getenv("GEMINI_API_KEY", os.getenv("OPENAI_API_KEY", ""))
        ),
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or GEMINI_OPENAI_BASE_URL,
        description="API base URL",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "gemini-1.5-flash"),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default=2048,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )
    max_retries: int = Field(
        default_factory=lambda: int(os.getenv("LLM_MAX_RETRIES", "2")),
        ge=0,
        le=10,
        description="Retries after a rate-limited first attempt",
    )
    base_delay: float = Field(
        default_factory=lambda: float(os.getenv("LLM_RETRY_BASE_DELAY", "2.0")),
        ge=0.0,
        description="Initial backoff delay in seconds",
    )
    max_document_bytes: PositiveInt | None = Field(
        default_factory=lambda: _optional_int("MAX_DOCUMENT_BYTES"),
        description="Largest accepted attachment, unlimited when unset",
    )
    max_request_bytes: PositiveInt | None = Field(
        default_factory=lambda: _optional_int("MAX_REQUEST_BYTES"),
        description="Largest assembled request, unlimited when unset",
    )

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Strip surrounding whitespace from the API key.

        A missing key is not rejected here: each send reports it to the user
        as a credential error so the rest of the app keeps working.
        """
        return v.strip()

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Returns:
        Configured AgentConfig instance.
    """
    return AgentConfig()
