"""stream-retry: retry wrapper for lazily-started async streams."""

from stream_retry.retry import (
    InvalidRetryTransition,
    NotAStreamError,
    RetryPhase,
    RetryPolicy,
    RetryState,
    RetryWrapper,
    retry_on_error,
    wrap,
)

__all__ = [
    "RetryPolicy",
    "RetryPhase",
    "RetryState",
    "InvalidRetryTransition",
    "RetryWrapper",
    "NotAStreamError",
    "wrap",
    "retry_on_error",
]
