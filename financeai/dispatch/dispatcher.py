"""Delivery of assembled requests to the remote model.

Retries rate-limited calls with exponential backoff (tenacity drives the
loop, decide_retry makes every decision) and turns any failure into a
classified DispatchResult. Nothing is shared between dispatches.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from pydantic import BaseModel, Field
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt

from financeai.dispatch.retry import (
    ErrorKind,
    MalformedResponseError,
    RetryDecision,
    RetryPolicy,
    classify_error,
    decide_retry,
)
from financeai.models.schemas import HistoryEntry, OutgoingRequest

logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    """The remote language model."""

    async def generate(
        self,
        system_prompt: str,
        history: list[HistoryEntry],
        message: str,
    ) -> str: ...


class DispatchResult(BaseModel):
    """Outcome of delivering one request.

    Attributes:
        text: Model reply on success.
        error: Error class on failure.
        detail: Message of the last error observed.
        attempts: Number of calls made to the model.
    """

    text: str | None = None
    error: ErrorKind | None = None
    detail: str = ""
    attempts: int = Field(default=0, ge=0)

    @property
    def ok(self) -> bool:
        return self.error is None


class RetryingDispatcher:
    """Send requests to a ModelClient, retrying rate limits."""

    def __init__(
        self,
        client: ModelClient,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            client: Model collaborator to call.
            policy: Retry bounds, defaults to 2 retries from a 2 second base.
            sleep: Coroutine used for backoff waits.
        """
        self._client = client
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def _decision(self, retry_state: RetryCallState) -> RetryDecision:
        exc = retry_state.outcome.exception()
        return decide_retry(retry_state.attempt_number - 1, classify_error(exc), self._policy)

    def _should_retry(self, retry_state: RetryCallState) -> bool:
        if not retry_state.outcome.failed:
            return False
        return self._decision(retry_state).retry

    def _wait(self, retry_state: RetryCallState) -> float:
        return self._decision(retry_state).delay

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            f"Rate limit hit, retrying in {retry_state.upcoming_sleep}s "
            f"(attempt {retry_state.attempt_number}/{self._policy.max_retries + 1})"
        )

    async def dispatch(self, request: OutgoingRequest) -> DispatchResult:
        """Deliver a request and classify the outcome.

        Args:
            request: The assembled request.

        Returns:
            DispatchResult with the reply text or the last classified error.
        """
        attempts = 0
        retrying = AsyncRetrying(
            retry=self._should_retry,
            stop=stop_after_attempt(self._policy.max_retries + 1),
            wait=self._wait,
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts += 1
                    text = await self._client.generate(
                        request.system_prompt,
                        list(request.history),
                        request.message,
                    )
                    if not isinstance(text, str) or not text.strip():
                        raise MalformedResponseError("No text content in model response")
        except Exception as e:
            kind = classify_error(e)
            logger.error(f"Model call failed after {attempts} attempt(s) ({kind.value}): {e}")
            return DispatchResult(error=kind, detail=str(e), attempts=attempts)

        logger.info(f"Response received, length: {len(text)}")
        return DispatchResult(text=text, attempts=attempts)
