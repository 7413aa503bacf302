"""
Caller-supplied deadline and cancellation signal.

A Deadline is passed into service calls and checked by the access
gate at the points where work can still be abandoned cleanly:
before acquiring a session, after acquiring it, and right before
commit. Once a commit has gone through the operation reports success,
whatever the deadline says afterwards.
"""

import threading
import time

from tenant_ledger.errors import DeadlineExceededError, OperationCancelledError


class Deadline:

    def __init__(self, timeout: float | None = None):
        self._expires_at = (
            time.monotonic() + timeout if timeout is not None else None
        )
        self._cancelled = threading.Event()

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(timeout=seconds)

    @classmethod
    def none(cls) -> "Deadline":
        """A deadline that never expires (still cancellable)."""
        return cls(timeout=None)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def remaining(self) -> float | None:
        """Seconds left, or None when there is no time limit."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self, stage: str = "operation") -> None:
        """Raise if the caller has cancelled or the deadline has passed."""
        if self.cancelled:
            raise OperationCancelledError(f"{stage} cancelled by caller")
        if self.expired:
            raise DeadlineExceededError(f"deadline exceeded during {stage}")
