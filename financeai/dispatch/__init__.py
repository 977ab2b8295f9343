"""Resilient delivery of requests to the remote model.

Responsibilities:
    - Classifying provider failures (rate limit, credentials, other, malformed)
    - Bounded exponential backoff for rate-limited calls
    - Returning every failure as a value instead of raising past the send
"""

from financeai.dispatch.dispatcher import DispatchResult, ModelClient, RetryingDispatcher
from financeai.dispatch.retry import (
    DispatchError,
    ErrorKind,
    MalformedResponseError,
    RateLimitedError,
    RetryDecision,
    RetryPolicy,
    UnauthorizedError,
    UnavailableError,
    backoff_delay,
    classify_error,
    decide_retry,
)

__all__ = [
    "DispatchError",
    "DispatchResult",
    "ErrorKind",
    "MalformedResponseError",
    "ModelClient",
    "RateLimitedError",
    "RetryDecision",
    "RetryPolicy",
    "RetryingDispatcher",
    "UnauthorizedError",
    "UnavailableError",
    "backoff_delay",
    "classify_error",
    "decide_retry",
]
