"""Retry attempt context binding for structured logging.

Binds the wrapped operation name and the current attempt number to
structlog's context variables, so log entries emitted by the operation
itself carry ``retry_operation`` and ``retry_attempt``.

Usage:
    from stream_retry.logging import bind_retry_context

    with bind_retry_context(operation="fetch_pages", attempt=2):
        logger.info("page_fetched")  # includes retry_attempt=2

Dependencies:
    - structlog.contextvars
"""

from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog

RETRY_CONTEXT_KEYS = ("retry_operation", "retry_attempt")


@contextmanager
def bind_retry_context(
    operation: Optional[str] = None,
    attempt: Optional[int] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind retry attempt context to all logs within the context manager.

    Values that were already bound before entering are restored on exit, so
    nested wrapped operations do not clobber the outer attempt number.

    Args:
        operation: Qualified name of the wrapped operation.
        attempt: 1-based attempt number (1 is the first, non-retry attempt).
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars.
    """
    context: dict[str, Any] = {}

    if operation is not None:
        context["retry_operation"] = operation

    if attempt is not None:
        context["retry_attempt"] = attempt

    context.update(extra_context)

    tokens = structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


def get_retry_attempt() -> Optional[int]:
    """Get the attempt number bound by the innermost retry wrapper.

    Returns:
        The 1-based attempt number if inside a wrapped operation, None otherwise.
    """
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("retry_attempt")


def clear_retry_context() -> None:
    """Remove retry attempt keys from the logging context."""
    structlog.contextvars.unbind_contextvars(*RETRY_CONTEXT_KEYS)
