"""
Cancellation signals for storage calls.

An ``AbortSignal`` is passed to the façade (and on to adapters) through the
``abort_signal`` option. Signals abort explicitly through an
``AbortController``, implicitly when a deadline passes, or when any of the
signals they were combined from aborts.
"""
import asyncio
import time
import weakref
from typing import Iterable


class OperationAborted(Exception):
    """Default reason for an aborted operation."""

    def __init__(self, message: str = "The operation was aborted"):
        super().__init__(message)


class OperationTimedOut(OperationAborted):
    """Reason used when a deadline-based signal expires."""

    def __init__(self, timeout_ms: float):
        self.timeout_ms = timeout_ms
        super().__init__(f"The operation timed out after {timeout_ms:g}ms")


class AbortSignal:
    """
    Read side of a cancellation handle.

    Args:
        deadline: Optional ``time.monotonic()`` value after which the signal
            counts as aborted with ``OperationTimedOut``
        timeout_ms: Timeout used for the ``OperationTimedOut`` message
    """

    def __init__(self, deadline: float | None = None, timeout_ms: float | None = None):
        self._event = asyncio.Event()
        self._reason: BaseException | None = None
        self._deadline = deadline
        self._timeout_ms = timeout_ms
        self._sources: list["AbortSignal"] = []
        # combined signals are per call; sources must not keep them alive
        self._dependents: weakref.WeakSet["AbortSignal"] = weakref.WeakSet()

    @classmethod
    def timeout(cls, timeout_ms: float) -> "AbortSignal":
        """Create a signal that aborts ``timeout_ms`` milliseconds from now."""
        return cls(deadline=time.monotonic() + timeout_ms / 1000, timeout_ms=timeout_ms)

    @classmethod
    def any(cls, signals: Iterable["AbortSignal | None"]) -> "AbortSignal":
        """Combine signals; the result aborts as soon as any of them does."""
        combined = cls()
        for signal in signals:
            if signal is None:
                continue
            if signal.aborted:
                combined._abort(signal.reason)
                return combined
            combined._sources.append(signal)
            signal._dependents.add(combined)
            if signal._deadline is not None:
                deadline, timeout_ms = signal._deadline, signal._timeout_ms
                if combined._deadline is None or deadline < combined._deadline:
                    combined._deadline = deadline
                    combined._timeout_ms = timeout_ms
        return combined

    def _abort(self, reason: BaseException | None) -> None:
        if self._event.is_set():
            return
        self._reason = reason if reason is not None else OperationAborted()
        self._event.set()
        for dependent in list(self._dependents):
            dependent._abort(self._reason)

    def _check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._abort(OperationTimedOut(self._timeout_ms or 0))

    @property
    def aborted(self) -> bool:
        if not self._event.is_set():
            self._check_deadline()
        if not self._event.is_set():
            for source in self._sources:
                if source.aborted:
                    self._abort(source.reason)
                    break
        return self._event.is_set()

    @property
    def reason(self) -> BaseException | None:
        return self._reason if self.aborted else None

    def throw_if_aborted(self) -> None:
        if self.aborted:
            raise self._reason

    async def wait(self) -> BaseException:
        """Suspend until the signal aborts and return the abort reason."""
        if self.aborted:
            return self._reason

        if self._deadline is None:
            await self._event.wait()
        else:
            remaining = max(self._deadline - time.monotonic(), 0)
            try:
                await asyncio.wait_for(self._event.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                self._abort(OperationTimedOut(self._timeout_ms or 0))

        return self._reason


class AbortController:
    """Write side of a cancellation handle."""

    def __init__(self):
        self.signal = AbortSignal()

    def abort(self, reason: BaseException | None = None) -> None:
        self.signal._abort(reason)


def maybe_abort(signal: AbortSignal | None) -> None:
    """Raise the abort reason when ``signal`` has been aborted."""
    if signal is not None:
        signal.throw_if_aborted()
