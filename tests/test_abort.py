"""
Unit tests for cancellation signals.
"""
import asyncio
import gc

import pytest

from filestorage.utils.abort import (
    AbortController,
    AbortSignal,
    OperationAborted,
    OperationTimedOut,
    maybe_abort,
)


class TestAbortController:
    """Test suite for explicit aborts."""

    def test_signal_starts_untriggered(self):
        controller = AbortController()
        assert controller.signal.aborted is False
        assert controller.signal.reason is None

    def test_abort_uses_default_reason(self):
        controller = AbortController()
        controller.abort()

        assert controller.signal.aborted is True
        assert isinstance(controller.signal.reason, OperationAborted)

    def test_abort_keeps_custom_reason(self):
        controller = AbortController()
        reason = RuntimeError("user went away")
        controller.abort(reason)

        with pytest.raises(RuntimeError, match="user went away"):
            controller.signal.throw_if_aborted()

    def test_first_reason_wins(self):
        controller = AbortController()
        controller.abort(ValueError("first"))
        controller.abort(ValueError("second"))

        assert str(controller.signal.reason) == "first"

    def test_maybe_abort_accepts_none(self):
        maybe_abort(None)


class TestAbortSignal:
    """Test suite for timeouts and combined signals."""

    @pytest.mark.asyncio
    async def test_timeout_signal_aborts_after_deadline(self):
        signal = AbortSignal.timeout(10)
        assert signal.aborted is False

        await asyncio.sleep(0.05)

        assert signal.aborted is True
        assert isinstance(signal.reason, OperationTimedOut)
        assert signal.reason.timeout_ms == 10

    @pytest.mark.asyncio
    async def test_wait_returns_reason_on_timeout(self):
        signal = AbortSignal.timeout(10)

        reason = await asyncio.wait_for(signal.wait(), timeout=1)

        assert isinstance(reason, OperationTimedOut)

    @pytest.mark.asyncio
    async def test_any_follows_the_first_aborted_source(self):
        controller = AbortController()
        combined = AbortSignal.any([controller.signal, AbortSignal.timeout(60_000), None])

        waiter = asyncio.create_task(combined.wait())
        await asyncio.sleep(0)
        controller.abort()

        reason = await asyncio.wait_for(waiter, timeout=1)
        assert isinstance(reason, OperationAborted)
        assert not isinstance(reason, OperationTimedOut)

    @pytest.mark.asyncio
    async def test_any_fires_on_the_earliest_deadline(self):
        controller = AbortController()
        combined = AbortSignal.any([controller.signal, AbortSignal.timeout(10)])

        reason = await asyncio.wait_for(combined.wait(), timeout=1)

        assert isinstance(reason, OperationTimedOut)

    def test_any_of_an_aborted_signal_is_aborted(self):
        controller = AbortController()
        controller.abort()

        combined = AbortSignal.any([controller.signal])

        assert combined.aborted is True

    def test_discarded_combined_signals_are_released(self):
        controller = AbortController()

        for _ in range(100):
            AbortSignal.any([controller.signal, AbortSignal.timeout(60_000)])

        gc.collect()

        assert len(controller.signal._dependents) == 0

    def test_live_combined_signals_still_follow_their_source(self):
        controller = AbortController()
        combined = AbortSignal.any([controller.signal])
        gc.collect()

        controller.abort()

        assert combined._event.is_set()
        assert isinstance(combined.reason, OperationAborted)
