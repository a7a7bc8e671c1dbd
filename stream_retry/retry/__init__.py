"""Retry orchestration for lazily-started stream operations.

Architecture:
- RetryPolicy: Immutable retry ceiling, delay, error filter and observer
- RetryState: Per-invocation state machine (attempting, delaying, terminal)
- RetryWrapper: Applies a policy to operations returning async iterators
  or awaitables
- retry_on_error: Decorator factory seeded from RetryOnErrorSettings

Usage:
    from stream_retry.retry import retry_on_error

    class Inventory:
        @retry_on_error(max_retries=2, retry_delay=100)
        async def stock_levels(self, sku):
            async for level in self.api.stream_levels(sku):
                yield level
"""

from stream_retry.retry.policy import RetryPolicy
from stream_retry.retry.state import InvalidRetryTransition, RetryPhase, RetryState
from stream_retry.retry.wrapper import (
    NotAStreamError,
    RetryWrapper,
    retry_on_error,
    wrap,
)

__all__ = [
    # Policy
    "RetryPolicy",
    # State
    "RetryPhase",
    "RetryState",
    "InvalidRetryTransition",
    # Wrapper
    "RetryWrapper",
    "NotAStreamError",
    "wrap",
    "retry_on_error",
]
