"""Structured logging infrastructure.

This package provides logging configuration and utilities for stream-retry
using structlog.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_logger(): Get a logger instance with a specific name
    - get_module_logger(): Get a logger for the calling module
    - bind_retry_context(): Context manager binding the current attempt
    - get_retry_attempt(): Read the bound attempt number
    - clear_retry_context(): Remove retry attempt bindings

Example:
    from stream_retry.logging import configure_logging, get_module_logger

    configure_logging()

    logger = get_module_logger()
    logger.info("module_initialized")
"""

from stream_retry.logging.setup import (
    configure_logging,
    get_logger,
    get_module_logger,
)

from stream_retry.logging.context import (
    RETRY_CONTEXT_KEYS,
    bind_retry_context,
    get_retry_attempt,
    clear_retry_context,
)

__all__ = [
    # Setup
    "configure_logging",
    "get_logger",
    "get_module_logger",
    # Context
    "RETRY_CONTEXT_KEYS",
    "bind_retry_context",
    "get_retry_attempt",
    "clear_retry_context",
]
