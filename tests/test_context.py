"""Tests for inventory/context.py: cancellation, deadlines and best-effort calls."""

import time

import pytest

from inventory.context import RunContext
from inventory.exceptions import CollectionCancelled


# ---------------------------------------------------------------------------
# RunContext
# ---------------------------------------------------------------------------
class TestRunContext:
    def test_not_cancelled_initially(self):
        ctx = RunContext()
        assert not ctx.cancelled
        assert ctx.reason is None
        ctx.check()

    def test_cancel_sets_reason_once(self):
        ctx = RunContext()
        ctx.cancel("first")
        ctx.cancel("second")
        assert ctx.cancelled
        assert ctx.reason == "first"

    def test_check_raises_after_cancel(self):
        ctx = RunContext()
        ctx.cancel("user abort")
        with pytest.raises(CollectionCancelled, match="user abort"):
            ctx.check()

    def test_deadline_cancels(self):
        ctx = RunContext(timeout=0.01)
        time.sleep(0.05)
        assert ctx.cancelled
        assert ctx.reason == "deadline exceeded"

    def test_wait_returns_early_on_cancel(self):
        ctx = RunContext()
        ctx.cancel()
        start = time.monotonic()
        assert ctx.wait(5) is True
        assert time.monotonic() - start < 1

    def test_wait_bounded_by_deadline(self):
        ctx = RunContext(timeout=0.05)
        start = time.monotonic()
        assert ctx.wait(5) is True
        assert time.monotonic() - start < 1


# ---------------------------------------------------------------------------
# PairContext
# ---------------------------------------------------------------------------
class TestPairContext:
    def test_warn_records_pair(self, pair_ctx):
        warning = pair_ctx.warn("list aliases: AccessDenied")
        assert pair_ctx.warnings == [warning]
        assert str(warning) == "test [us-east-1]: list aliases: AccessDenied"

    def test_shares_run_cancellation(self, run_ctx, pair_ctx):
        run_ctx.cancel("stop")
        assert pair_ctx.cancelled
        with pytest.raises(CollectionCancelled):
            pair_ctx.check()

    def test_best_effort_success(self, pair_ctx):
        result = pair_ctx.best_effort("describe", lambda x, y=0: x + y, 1, y=2)
        assert result.value == 3
        assert not result.degraded
        assert pair_ctx.warnings == []

    def test_best_effort_failure_uses_fallback(self, pair_ctx):
        def fail():
            raise RuntimeError("AccessDenied")

        result = pair_ctx.best_effort("describe key", fail, fallback={})
        assert result.value == {}
        assert result.degraded
        assert result.warning == "describe key: AccessDenied"
        assert [w.message for w in pair_ctx.warnings] == ["describe key: AccessDenied"]

    def test_best_effort_propagates_cancellation(self, run_ctx, pair_ctx):
        def cancel_midway():
            run_ctx.cancel("stop")
            run_ctx.check()

        with pytest.raises(CollectionCancelled):
            pair_ctx.best_effort("describe", cancel_midway)
        assert pair_ctx.warnings == []

    def test_best_effort_checks_before_calling(self, run_ctx, pair_ctx):
        calls = []
        run_ctx.cancel()
        with pytest.raises(CollectionCancelled):
            pair_ctx.best_effort("describe", calls.append, 1)
        assert calls == []
