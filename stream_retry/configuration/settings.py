"""stream-retry configuration settings - main aggregator."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from stream_retry.configuration.retry import RetryOnErrorSettings


class Settings(BaseSettings):
    """stream-retry configuration settings - main aggregator.

    Environment Variables:
        PREFIX: Environment prefix; empty means production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        ```python
        from stream_retry.configuration import get_settings

        settings = get_settings()
        delay = settings.retry.retry_delay_ms

        if settings.is_production:
            # JSON log rendering...
        ```
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"

    retry: RetryOnErrorSettings

    @property
    def is_production(self) -> bool:
        """Check if the library is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        if "retry" not in kwargs:
            kwargs["retry"] = RetryOnErrorSettings()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get process-scoped settings singleton.

    Tests that change environment variables should call
    ``get_settings.cache_clear()`` afterwards.

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()
