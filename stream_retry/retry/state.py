"""Per-invocation retry state machine.

Each call of a wrapped operation owns one RetryState for as long as the
resulting stream is active:

    ATTEMPTING -> SUCCEEDED
    ATTEMPTING -> DELAYING -> ATTEMPTING
    ATTEMPTING -> FAILED
    ATTEMPTING | DELAYING -> CANCELLED
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RetryPhase(Enum):
    """Lifecycle phase of a single wrapped invocation.

    Values:
        ATTEMPTING: The underlying operation's stream is running
        DELAYING: Waiting out retry_delay before the next attempt
        SUCCEEDED: The current attempt completed without error
        FAILED: A final error was forwarded to the consumer
        CANCELLED: The consumer stopped before a terminal event
    """

    ATTEMPTING = "attempting"
    DELAYING = "delaying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_PHASES


TERMINAL_PHASES = frozenset(
    {RetryPhase.SUCCEEDED, RetryPhase.FAILED, RetryPhase.CANCELLED}
)

ALLOWED_TRANSITIONS = {
    RetryPhase.ATTEMPTING: frozenset(
        {
            RetryPhase.SUCCEEDED,
            RetryPhase.DELAYING,
            RetryPhase.FAILED,
            RetryPhase.CANCELLED,
        }
    ),
    RetryPhase.DELAYING: frozenset({RetryPhase.ATTEMPTING, RetryPhase.CANCELLED}),
    RetryPhase.SUCCEEDED: frozenset(),
    RetryPhase.FAILED: frozenset(),
    RetryPhase.CANCELLED: frozenset(),
}


class InvalidRetryTransition(RuntimeError):
    """Raised when a RetryState is moved along an edge it does not have."""

    def __init__(self, current: RetryPhase, target: RetryPhase):
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid retry transition: {current.value} -> {target.value}"
        )


@dataclass
class RetryState:
    """Bookkeeping for one top-level invocation of a wrapped operation.

    Fields:
        args: Positional arguments of the top-level call, re-supplied as-is
        kwargs: Keyword arguments of the top-level call, re-supplied as-is
        attempt_count: Restarts performed so far (0 during the first attempt)
        phase: Current RetryPhase
        last_error: Most recent error signaled by the operation
    """

    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)
    attempt_count: int = 0
    phase: RetryPhase = RetryPhase.ATTEMPTING
    last_error: Optional[BaseException] = None

    @property
    def bound_context(self) -> Any:
        """First positional argument of the call, or None without one.

        For a wrapped method this is the live receiver (``self``). For a plain
        function it is just the first argument and carries no special meaning.
        """
        return self.args[0] if self.args else None

    @property
    def attempt_number(self) -> int:
        """1-based number of the attempt in progress."""
        return self.attempt_count + 1

    def transition(self, target: RetryPhase) -> None:
        """Move to ``target``.

        Raises:
            InvalidRetryTransition: If the edge does not exist
        """
        if target not in ALLOWED_TRANSITIONS[self.phase]:
            raise InvalidRetryTransition(self.phase, target)
        self.phase = target

    def schedule_retry(self, error: BaseException) -> int:
        """Record a retry-eligible error and enter DELAYING.

        Returns:
            The 1-based retry number that is now pending
        """
        self.last_error = error
        self.transition(RetryPhase.DELAYING)
        self.attempt_count += 1
        return self.attempt_count

    def restart(self) -> None:
        self.transition(RetryPhase.ATTEMPTING)

    def succeed(self) -> None:
        self.transition(RetryPhase.SUCCEEDED)

    def fail(self, error: BaseException) -> None:
        self.last_error = error
        self.transition(RetryPhase.FAILED)

    def cancel(self) -> None:
        """Enter CANCELLED unless a terminal phase was already reached."""
        if not self.phase.is_terminal:
            self.transition(RetryPhase.CANCELLED)
