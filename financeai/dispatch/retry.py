"""Error classification and retry policy for model calls.

Everything here is pure: the dispatcher asks decide_retry what to do after
each failed attempt, so the policy can be tested without a network.
"""

from enum import Enum

from pydantic import BaseModel, Field

RATE_LIMIT_MARKERS = ("429", "quota", "rate limit", "resource exhausted", "resource_exhausted")
UNAUTHORIZED_MARKERS = (
    "api key",
    "api_key_invalid",
    "401",
    "unauthorized",
    "permission denied",
)


class ErrorKind(str, Enum):
    """Failure classes surfaced to the caller."""

    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    UNAVAILABLE = "unavailable"
    MALFORMED = "malformed"


class DispatchError(Exception):
    """Base class for classified model call failures."""

    kind: ErrorKind = ErrorKind.UNAVAILABLE

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class RateLimitedError(DispatchError):
    """Provider rejected the call because of rate limits or quota."""

    kind = ErrorKind.RATE_LIMITED


class UnauthorizedError(DispatchError):
    """Credential is missing or rejected."""

    kind = ErrorKind.UNAUTHORIZED


class UnavailableError(DispatchError):
    """Any other provider failure."""

    kind = ErrorKind.UNAVAILABLE


class MalformedResponseError(DispatchError):
    """Provider answered without usable text."""

    kind = ErrorKind.MALFORMED


def _status_code(exc: BaseException) -> int | None:
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(getattr(exc, "response", None), "status_code", None)
    return status if isinstance(status, int) else None


def classify_error(exc: BaseException) -> ErrorKind:
    """Map any exception raised by a model call to an ErrorKind.

    Args:
        exc: The exception raised by the model client.

    Returns:
        The error class, UNAVAILABLE when nothing more specific matches.
    """
    if isinstance(exc, DispatchError):
        return exc.kind

    status = _status_code(exc)
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status in (401, 403):
        return ErrorKind.UNAUTHORIZED

    text = str(exc).lower()
    if any(marker in text for marker in RATE_LIMIT_MARKERS):
        return ErrorKind.RATE_LIMITED
    if any(marker in text for marker in UNAUTHORIZED_MARKERS):
        return ErrorKind.UNAUTHORIZED
    return ErrorKind.UNAVAILABLE


class RetryPolicy(BaseModel):
    """Bounded exponential backoff for rate-limited calls.

    Attributes:
        max_retries: Retries after the first attempt (2 means 3 attempts).
        base_delay: Seconds to wait before the first retry.
    """

    max_retries: int = Field(default=2, ge=0)
    base_delay: float = Field(default=2.0, ge=0.0)


class RetryDecision(BaseModel):
    """What to do after a failed attempt."""

    retry: bool
    delay: float = 0.0


def backoff_delay(policy: RetryPolicy, attempt_index: int) -> float:
    """Delay before the retry that follows attempt ``attempt_index`` (0-based)."""
    return policy.base_delay * 2**attempt_index


def decide_retry(attempt_index: int, kind: ErrorKind, policy: RetryPolicy) -> RetryDecision:
    """Decide whether a failed attempt is retried.

    Only rate limits are retried, and only while retries remain.

    Args:
        attempt_index: 0-based index of the attempt that just failed.
        kind: Classification of its failure.
        policy: Retry bounds.

    Returns:
        RetryDecision with the backoff delay when retrying.
    """
    if kind is ErrorKind.RATE_LIMITED and attempt_index < policy.max_retries:
        return RetryDecision(retry=True, delay=backoff_delay(policy, attempt_index))
    return RetryDecision(retry=False)
