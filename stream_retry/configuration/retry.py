"""Retry wrapper infrastructure settings."""

from pydantic import Field

from stream_retry.configuration.base import InfrastructureSettings


class RetryOnErrorSettings(InfrastructureSettings):
    """Default retry policy for wrapped stream operations.

    These values seed every policy built by ``retry_on_error`` before the
    caller's own options are merged on top.

    Environment Variables:
        RETRY_MAX_RETRIES: Additional attempts after the first failure (default: 3)
        RETRY_DELAY_MS: Wait before each retry attempt, in milliseconds (default: 1000)
        RETRY_LOG_ATTEMPTS: Emit structured log events for retries (default: True)

    Example:
        ```python
        from stream_retry.configuration import get_settings

        settings = get_settings()

        if settings.retry.log_attempts:
            max_retries = settings.retry.max_retries
        ```
    """

    max_retries: int = Field(
        default=3,
        alias="RETRY_MAX_RETRIES",
        description="Maximum number of additional attempts after the first failure",
    )
    retry_delay_ms: float = Field(
        default=1000,
        alias="RETRY_DELAY_MS",
        description="Delay before each retry attempt (milliseconds)",
    )
    log_attempts: bool = Field(
        default=True,
        alias="RETRY_LOG_ATTEMPTS",
        description="Emit retry_scheduled/retry_exhausted log events",
    )
