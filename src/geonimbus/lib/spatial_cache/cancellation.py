"""Cooperative cancellation for store fallbacks.

A :class:`Deadline` travels with one logical operation. The orchestrator
checks it before every fallback call and between batch items, and runs
each fallback under ``asyncio.timeout`` so an expired deadline abandons
the in-flight await.
"""

import asyncio
import inspect
import time
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class OperationCancelledError(Exception):
    """Raised when an operation's deadline expires or it is cancelled explicitly."""


class Deadline:
    """Cancellation token with an optional expiry.

    ``cancel()`` must be called from the event loop thread that runs the
    guarded operation.

    Args:
        timeout: Seconds until expiry, or None for no expiry.
    """

    def __init__(self, timeout: float | None = None) -> None:
        if timeout is not None and timeout < 0:
            msg = f"timeout must be non-negative, got {timeout}"
            raise ValueError(msg)
        self._expires_at = None if timeout is None else time.monotonic() + timeout
        self._cancelled = False
        self._scopes: set[asyncio.Timeout] = set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled:
            return True
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def remaining(self) -> float | None:
        """Seconds left before expiry, or None when the deadline never expires."""
        if self._cancelled:
            return 0.0
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def cancel(self) -> None:
        """Cancel now, interrupting any fallback currently running under this deadline."""
        self._cancelled = True
        loop_time = asyncio.get_running_loop().time() if self._scopes else 0.0
        for scope in list(self._scopes):
            scope.reschedule(loop_time)

    def check(self) -> None:
        """Raise OperationCancelledError if the deadline has fired.

        Raises:
            OperationCancelledError: If cancelled or expired.
        """
        if self._cancelled:
            raise OperationCancelledError("Operation was cancelled")
        if self.cancelled:
            raise OperationCancelledError("Operation deadline expired")

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable``, abandoning it when the deadline fires.

        Args:
            awaitable: The fallback call to guard.

        Returns:
            Whatever the awaitable returns.

        Raises:
            OperationCancelledError: If the deadline fired before or during the call.
        """
        try:
            self.check()
        except OperationCancelledError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise

        scope = asyncio.timeout(self.remaining())
        try:
            async with scope:
                self._scopes.add(scope)
                try:
                    return await awaitable
                finally:
                    self._scopes.discard(scope)
        except TimeoutError as e:
            if not scope.expired():
                raise
            self.check()
            raise OperationCancelledError("Operation deadline expired") from e
