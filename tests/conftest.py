"""Root fixtures shared by every test package."""

import pytest
import structlog

from stream_retry.configuration import get_settings
from stream_retry.logging import configure_logging

RETRY_ENV_VARS = ("RETRY_MAX_RETRIES", "RETRY_DELAY_MS", "RETRY_LOG_ATTEMPTS")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Start every test from default settings, silenced logs and an empty logging context."""
    for name in RETRY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    configure_logging()
    structlog.contextvars.clear_contextvars()
    yield
    get_settings.cache_clear()
    structlog.contextvars.clear_contextvars()
