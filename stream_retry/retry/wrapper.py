"""Retry wrapper for lazily-started stream operations.

An operation is any callable returning a stream: an async iterator (usually
an async generator) or an awaitable, which is treated as a stream of exactly
one value. Errors are signaled by the stream raising while it is consumed;
an operation that raises when called fails at once and is never retried.

The wrapper keeps the operation's calling convention. It is a plain function,
so used as a method it receives the live ``self`` as its first positional
argument on every call and threads it unchanged into every restart.

Usage:
    from stream_retry import retry_on_error

    class PageClient:
        @retry_on_error(max_retries=5, retry_delay=250)
        async def pages(self, query):
            async for page in self.session.paginate(query):
                yield page

    async for page in client.pages("status:open"):
        ...
"""

import asyncio
import functools
import inspect
from typing import Any, AsyncIterator, Callable, Mapping, Union

from stream_retry.configuration import get_settings
from stream_retry.logging.context import bind_retry_context
from stream_retry.logging.setup import get_module_logger
from stream_retry.retry.policy import RetryPolicy
from stream_retry.retry.state import RetryState

_EXHAUSTED = object()

PolicyOptions = Union[RetryPolicy, Mapping[str, Any], None]


class NotAStreamError(TypeError):
    """Raised when a wrapped operation returns neither an async iterable nor an awaitable."""


async def _single_value(awaitable) -> AsyncIterator[Any]:
    yield await awaitable


async def _discard(stream) -> None:
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()


def _operation_name(operation: Callable[..., Any]) -> str:
    return getattr(operation, "__qualname__", None) or repr(operation)


class RetryWrapper:
    """Applies a RetryPolicy to stream-returning operations.

    Attributes:
        policy: RetryPolicy shared by every operation this wrapper wraps
        log_attempts: Whether retry events are logged
    """

    def __init__(
        self, policy: RetryPolicy | None = None, log_attempts: bool = True
    ) -> None:
        self.policy = policy or RetryPolicy()
        self.log_attempts = log_attempts
        self.log = get_module_logger().bind(component="retry_wrapper")

    def wrap(self, operation: Callable[..., Any]) -> Callable[..., Any]:
        """Wrap ``operation`` so failures are retried according to the policy.

        Coroutine functions are wrapped into coroutine functions; everything
        else is wrapped into a function returning an async generator.

        Args:
            operation: Callable returning an async iterable or an awaitable

        Returns:
            Callable with the same signature and ``functools.wraps`` metadata.
            The policy is exposed as ``retry_policy``.

        Raises:
            TypeError: If operation is not callable
        """
        if not callable(operation):
            raise TypeError(f"Cannot wrap non-callable {operation!r}")

        if inspect.iscoroutinefunction(operation):

            @functools.wraps(operation)
            async def wrapped_call(*args, **kwargs):
                return await self._retry_call(operation, args, kwargs)

            wrapped = wrapped_call
        else:

            @functools.wraps(operation)
            def wrapped_stream(*args, **kwargs):
                return self._retry_stream(operation, args, kwargs)

            wrapped = wrapped_stream

        wrapped.retry_policy = self.policy  # type: ignore[attr-defined]
        return wrapped

    __call__ = wrap

    async def _retry_stream(self, operation, args, kwargs) -> AsyncIterator[Any]:
        """Run attempts of a stream operation, forwarding every value.

        Values already forwarded are not retracted when a later error causes
        a restart; the restarted stream begins from its first value again.
        """
        name = _operation_name(operation)
        state = RetryState(args=args, kwargs=kwargs)
        stream = None
        try:
            while True:
                if stream is None:
                    stream = self._open(operation, state, name)
                try:
                    with bind_retry_context(operation=name, attempt=state.attempt_number):
                        value = await anext(stream, _EXHAUSTED)
                except Exception as error:
                    await _discard(stream)
                    stream = None
                    await self._recover(error, state, name)
                    continue

                if value is _EXHAUSTED:
                    stream = None
                    self._succeed(state, name)
                    return
                yield value
        finally:
            self._cancel(state, name)
            if stream is not None:
                await _discard(stream)

    async def _retry_call(self, operation, args, kwargs) -> Any:
        """Run attempts of a coroutine operation and return its result."""
        name = _operation_name(operation)
        state = RetryState(args=args, kwargs=kwargs)
        try:
            while True:
                pending = self._start(operation, state, name)
                try:
                    with bind_retry_context(operation=name, attempt=state.attempt_number):
                        result = await pending
                except Exception as error:
                    await self._recover(error, state, name)
                    continue

                self._succeed(state, name)
                return result
        finally:
            self._cancel(state, name)

    def _start(self, operation, state: RetryState, name: str) -> Any:
        """Call ``operation``; a synchronous raise is terminal, never retried."""
        try:
            with bind_retry_context(operation=name, attempt=state.attempt_number):
                return operation(*state.args, **state.kwargs)
        except Exception as error:
            state.fail(error)
            self._emit(
                "error",
                "retry_operation_call_failed",
                operation=name,
                attempt=state.attempt_number,
                error=str(error),
                error_type=type(error).__name__,
            )
            raise

    def _open(self, operation, state: RetryState, name: str) -> AsyncIterator[Any]:
        result = self._start(operation, state, name)

        if hasattr(result, "__aiter__"):
            return aiter(result)
        if inspect.isawaitable(result):
            return _single_value(result)
        error = NotAStreamError(
            f"{name} returned {type(result).__name__}; expected an async iterable or awaitable"
        )
        state.fail(error)
        raise error

    async def _recover(self, error: Exception, state: RetryState, name: str) -> None:
        """Either re-raise ``error`` as final or wait out the delay before a restart.

        Must be called while ``error`` is being handled; exceptions raised by
        the callbacks then chain to it through ``__context__``.
        """
        policy = self.policy

        try:
            eligible = policy.error_filter(error)
        except Exception as callback_error:
            self._callback_failed(state, name, "error_filter", callback_error)
            raise

        if not eligible:
            state.fail(error)
            self._emit(
                "info",
                "retry_error_filtered",
                operation=name,
                attempt=state.attempt_number,
                error=str(error),
                error_type=type(error).__name__,
            )
            raise error

        if state.attempt_count >= policy.max_retries:
            state.fail(error)
            self._emit(
                "error",
                "retry_exhausted",
                operation=name,
                attempts=state.attempt_number,
                max_retries=policy.max_retries,
                error=str(error),
                error_type=type(error).__name__,
            )
            raise error

        try:
            policy.on_retry(error, state.attempt_count + 1)
        except Exception as callback_error:
            self._callback_failed(state, name, "on_retry", callback_error)
            raise

        retry_number = state.schedule_retry(error)
        self._emit(
            "warning",
            "retry_scheduled",
            operation=name,
            retry=retry_number,
            max_retries=policy.max_retries,
            delay_ms=policy.retry_delay,
            error=str(error),
            error_type=type(error).__name__,
        )

        await asyncio.sleep(policy.retry_delay_seconds)
        state.restart()

    def _succeed(self, state: RetryState, name: str) -> None:
        state.succeed()
        if state.attempt_count:
            self._emit(
                "info",
                "retry_succeeded_after_retries",
                operation=name,
                retries=state.attempt_count,
            )

    def _cancel(self, state: RetryState, name: str) -> None:
        if state.phase.is_terminal:
            return
        phase = state.phase
        state.cancel()
        self._emit(
            "debug",
            "retry_cancelled",
            operation=name,
            phase=phase.value,
            attempt=state.attempt_number,
        )

    def _callback_failed(
        self, state: RetryState, name: str, callback: str, error: Exception
    ) -> None:
        state.fail(error)
        self._emit(
            "error",
            "retry_callback_failed",
            operation=name,
            callback=callback,
            attempt=state.attempt_number,
            error=str(error),
            exc_info=True,
        )

    def _emit(self, level: str, event: str, **kw: Any) -> None:
        if self.log_attempts:
            getattr(self.log, level)(event, **kw)


def wrap(policy: PolicyOptions, operation: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap ``operation`` with a retry policy.

    Args:
        policy: RetryPolicy, or a partial mapping of policy options merged over
            the defaults (3 retries, 1000 ms delay), or None for the defaults
        operation: Callable returning an async iterable or an awaitable

    Returns:
        The wrapped operation

    Example:
        fetch = wrap({"max_retries": 2, "retry_delay": 50}, fetch_rows)
        rows = [row async for row in fetch("orders")]
    """
    if not isinstance(policy, RetryPolicy):
        policy = RetryPolicy.from_options(policy)
    return RetryWrapper(policy).wrap(operation)


def retry_on_error(options: PolicyOptions | Callable[..., Any] = None, **overrides: Any):
    """Decorator factory retrying a stream-returning function or method.

    Options are merged over the defaults from ``RetryOnErrorSettings``
    (``RETRY_MAX_RETRIES``, ``RETRY_DELAY_MS``) once, when the decorator is
    applied.

    Args:
        options: Optional RetryPolicy or mapping of policy options. May also be
            the decorated function itself when used without parentheses.
        **overrides: Policy fields (max_retries, retry_delay, error_filter, on_retry)

    Returns:
        Decorator producing the wrapped operation

    Raises:
        TypeError: On unknown option names or wrong value types
        ValueError: On negative max_retries or retry_delay

    Example:
        class Feed:
            @retry_on_error(error_filter=lambda e: isinstance(e, ConnectionError))
            async def events(self, since):
                ...
    """
    if callable(options) and not isinstance(options, (RetryPolicy, Mapping)):
        return retry_on_error(**overrides)(options)

    retry_settings = get_settings().retry
    if isinstance(options, RetryPolicy):
        policy = RetryPolicy.from_options(defaults=options, **overrides)
    else:
        policy = RetryPolicy.from_options(
            options,
            defaults=RetryPolicy.from_settings(retry_settings),
            **overrides,
        )

    return RetryWrapper(policy, log_attempts=retry_settings.log_attempts).wrap
