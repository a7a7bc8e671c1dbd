"""Unit tests for stream_retry.configuration module.

Tests cover:
- RetryOnErrorSettings defaults and environment overrides
- Settings aggregation and is_production
- get_settings caching
"""

import pytest

from stream_retry.configuration import RetryOnErrorSettings, Settings, get_settings


@pytest.mark.unit
class TestRetryOnErrorSettings:
    """Test suite for RetryOnErrorSettings configuration."""

    def test_retry_settings_defaults(self):
        """Defaults match the documented retry policy."""
        retry = RetryOnErrorSettings()

        assert retry.max_retries == 3
        assert retry.retry_delay_ms == 1000
        assert retry.log_attempts is True

    def test_retry_settings_custom_values(self, monkeypatch):
        """Environment variables override every field."""
        monkeypatch.setenv("RETRY_MAX_RETRIES", "7")
        monkeypatch.setenv("RETRY_DELAY_MS", "250")
        monkeypatch.setenv("RETRY_LOG_ATTEMPTS", "false")

        retry = RetryOnErrorSettings()

        assert retry.max_retries == 7
        assert retry.retry_delay_ms == 250
        assert retry.log_attempts is False

    def test_retry_settings_partial_override(self, monkeypatch):
        """Unset variables keep their defaults."""
        monkeypatch.setenv("RETRY_DELAY_MS", "50")

        retry = RetryOnErrorSettings()

        assert retry.retry_delay_ms == 50
        assert retry.max_retries == 3

    def test_retry_settings_accepts_alias_kwargs(self):
        """Fields can be set through their environment aliases."""
        retry = RetryOnErrorSettings(RETRY_MAX_RETRIES=1, RETRY_DELAY_MS=5)

        assert retry.max_retries == 1
        assert retry.retry_delay_ms == 5


@pytest.mark.unit
class TestSettings:
    """Test suite for the Settings aggregator."""

    def test_settings_instantiates_retry_section(self):
        """Retry subsettings are created automatically."""
        settings = Settings()

        assert isinstance(settings.retry, RetryOnErrorSettings)
        assert settings.LOG_LEVEL == "INFO"

    def test_settings_accepts_retry_override(self):
        """A provided retry section is used as-is."""
        retry = RetryOnErrorSettings(RETRY_MAX_RETRIES=0)

        settings = Settings(retry=retry)

        assert settings.retry is retry

    def test_is_production_without_prefix(self, monkeypatch):
        """Empty PREFIX means production."""
        monkeypatch.setenv("PREFIX", "")

        assert Settings().is_production is True

    def test_is_not_production_with_prefix(self, monkeypatch):
        """Any PREFIX means a non-production environment."""
        monkeypatch.setenv("PREFIX", "dev-")

        assert Settings().is_production is False


@pytest.mark.unit
class TestGetSettings:
    """Test suite for the get_settings provider."""

    def test_get_settings_returns_singleton(self):
        """Repeated calls return the cached instance."""
        assert get_settings() is get_settings()

    def test_get_settings_reloads_after_cache_clear(self, monkeypatch):
        """Clearing the cache picks up new environment values."""
        first = get_settings()
        monkeypatch.setenv("RETRY_MAX_RETRIES", "9")
        get_settings.cache_clear()

        second = get_settings()

        assert second is not first
        assert second.retry.max_retries == 9
