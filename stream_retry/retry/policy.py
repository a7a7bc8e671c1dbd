"""Retry policy for wrapped stream operations.

A RetryPolicy is built once per wrap and never changes afterwards. It holds
the retry ceiling, the inter-attempt delay, the eligibility filter and the
retry observer.
"""

from dataclasses import dataclass, fields
from numbers import Real
from typing import Any, Callable, Mapping, Optional

from stream_retry.configuration import RetryOnErrorSettings

ErrorFilter = Callable[[BaseException], bool]
RetryCallback = Callable[[BaseException, int], None]

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 1000

# camelCase keys accepted for parity with option objects written elsewhere
OPTION_ALIASES = {
    "maxRetries": "max_retries",
    "retryDelay": "retry_delay",
    "errorFilter": "error_filter",
    "onRetry": "on_retry",
}


def always_retry(error: BaseException) -> bool:
    return True


def ignore_retry(error: BaseException, retry_count: int) -> None:
    return None


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry configuration.

    Attributes:
        max_retries: Additional attempts allowed after the first failure.
            Total attempts never exceed ``max_retries + 1``.
        retry_delay: Milliseconds to wait before each retry attempt starts.
            Never applied before the first attempt.
        error_filter: Predicate deciding whether an error is retry-eligible.
        on_retry: Observer called as ``on_retry(error, retry_number)`` once per
            retry that will actually happen, before its delay begins.

    Example:
        policy = RetryPolicy(max_retries=5, retry_delay=250)

        policy = RetryPolicy.from_options(
            {"errorFilter": lambda e: isinstance(e, TimeoutError)}
        )
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY_MS
    error_filter: ErrorFilter = always_retry
    on_retry: RetryCallback = ignore_retry

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise TypeError("max_retries must be an integer")
        if self.max_retries < 0:
            raise ValueError("max_retries must be at least 0")
        if isinstance(self.retry_delay, bool) or not isinstance(self.retry_delay, Real):
            raise TypeError("retry_delay must be a number of milliseconds")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be at least 0")
        if not callable(self.error_filter):
            raise TypeError("error_filter must be callable")
        if not callable(self.on_retry):
            raise TypeError("on_retry must be callable")

    @property
    def retry_delay_seconds(self) -> float:
        """Delay converted for ``asyncio.sleep``."""
        return self.retry_delay / 1000

    @property
    def max_attempts(self) -> int:
        """Upper bound on the number of times the operation is started."""
        return self.max_retries + 1

    @classmethod
    def from_settings(cls, retry_settings: RetryOnErrorSettings) -> "RetryPolicy":
        """Build the default policy from environment-driven settings.

        Args:
            retry_settings: RetryOnErrorSettings (usually ``get_settings().retry``)

        Returns:
            RetryPolicy with the configured ceiling and delay
        """
        return cls(
            max_retries=retry_settings.max_retries,
            retry_delay=retry_settings.retry_delay_ms,
        )

    @classmethod
    def from_options(
        cls,
        options: Optional[Mapping[str, Any]] = None,
        *,
        defaults: Optional["RetryPolicy"] = None,
        **overrides: Any,
    ) -> "RetryPolicy":
        """Merge a partial set of options over a base policy.

        Keys may be snake_case field names or their camelCase aliases.
        Keys whose value is None fall back to the base policy.

        Args:
            options: Optional mapping of policy fields
            defaults: Base policy; RetryPolicy() when not provided
            **overrides: Policy fields, applied after ``options``

        Returns:
            New RetryPolicy

        Raises:
            TypeError: If an option name is not a policy field
            ValueError: If a merged value is out of range
        """
        base = defaults if defaults is not None else cls()
        known = {f.name for f in fields(cls)}

        merged: dict[str, Any] = {}
        for source in (options or {}, overrides):
            for key, value in source.items():
                name = OPTION_ALIASES.get(key, key)
                if name not in known:
                    raise TypeError(f"Unknown retry option: {key}")
                if value is not None:
                    merged[name] = value

        return cls(
            max_retries=merged.get("max_retries", base.max_retries),
            retry_delay=merged.get("retry_delay", base.retry_delay),
            error_filter=merged.get("error_filter", base.error_filter),
            on_retry=merged.get("on_retry", base.on_retry),
        )
