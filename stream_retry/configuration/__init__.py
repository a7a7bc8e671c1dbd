"""Configuration module - public API.

Centralized configuration for stream-retry using Pydantic BaseSettings.

Exports:
    Settings: Main settings class (for testing/overrides)
    RetryOnErrorSettings: Default retry policy settings
    get_settings: Cached Settings provider

Example:
    ```python
    from stream_retry.configuration import get_settings

    settings = get_settings()
    max_retries = settings.retry.max_retries
    ```
"""

from stream_retry.configuration.retry import RetryOnErrorSettings
from stream_retry.configuration.settings import Settings, get_settings

__all__ = ["Settings", "RetryOnErrorSettings", "get_settings"]
