"""Shared fixtures for retry wrapper tests."""

import asyncio
from typing import Any, List

import pytest

from stream_retry.retry import RetryPolicy


class FlakyOperation:
    """Stream operation that fails a fixed number of times before succeeding.

    Each call records its arguments so tests can check what every attempt saw.
    """

    def __init__(self, failures: int, values=(42,), error_factory=None):
        self.failures = failures
        self.values = list(values)
        self.error_factory = error_factory or (lambda n: RuntimeError("Test error"))
        self.calls: List[tuple] = []
        self.errors: List[BaseException] = []
        self.events: List[Any] = []

    async def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        self.events.append(("start", len(self.calls)))
        if len(self.calls) <= self.failures:
            error = self.error_factory(len(self.calls))
            self.errors.append(error)
            raise error
        for value in self.values:
            yield value

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def flaky_factory():
    """Factory for FlakyOperation instances."""

    def _factory(failures: int = 1, values=(42,), error_factory=None) -> FlakyOperation:
        return FlakyOperation(failures, values=values, error_factory=error_factory)

    return _factory


@pytest.fixture
def policy_factory():
    """Factory for RetryPolicy instances with test-friendly defaults."""

    def _factory(
        max_retries: int = 3,
        retry_delay: float = 0,
        error_filter=None,
        on_retry=None,
    ) -> RetryPolicy:
        return RetryPolicy.from_options(
            max_retries=max_retries,
            retry_delay=retry_delay,
            error_filter=error_filter,
            on_retry=on_retry,
        )

    return _factory


@pytest.fixture
def recorded_sleeps(monkeypatch):
    """Record requested retry delays while sleeping for zero seconds."""
    delays: List[float] = []
    real_sleep = asyncio.sleep

    async def _sleep(seconds, *args, **kwargs):
        delays.append(seconds)
        await real_sleep(0)

    monkeypatch.setattr("stream_retry.retry.wrapper.asyncio.sleep", _sleep)
    return delays
