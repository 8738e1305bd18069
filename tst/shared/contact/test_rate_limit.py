"""Tests for the sliding-window rate limit ledger."""

import asyncio

import pytest

from landing_service.shared.contact.rate_limit import RateLimitLedger, run_periodic_sweep


class TestCheckAndRecord:

    def test_accepts_up_to_limit_then_rejects(self, clock):
        ledger = RateLimitLedger(max_requests=3, window_seconds=900, clock=clock)

        assert [ledger.check_and_record("1.2.3.4") for _ in range(4)] == [True, True, True, False]

    def test_rejection_does_not_record(self, clock):
        ledger = RateLimitLedger(max_requests=1, window_seconds=60, clock=clock)
        assert ledger.check_and_record("ip")
        clock.advance(30)
        assert not ledger.check_and_record("ip")

        # Only the first request counts, so it expires 60s after it was made
        clock.advance(31)
        assert ledger.check_and_record("ip")

    def test_window_slides(self, clock):
        ledger = RateLimitLedger(max_requests=2, window_seconds=100, clock=clock)
        assert ledger.check_and_record("ip")
        clock.advance(50)
        assert ledger.check_and_record("ip")
        clock.advance(49)
        assert not ledger.check_and_record("ip")

        # First timestamp leaves the window, second is still inside
        clock.advance(1)
        assert ledger.check_and_record("ip")
        assert not ledger.check_and_record("ip")

    def test_identifiers_are_independent(self, clock):
        ledger = RateLimitLedger(max_requests=1, window_seconds=60, clock=clock)
        assert ledger.check_and_record("a")
        assert ledger.check_and_record("b")
        assert not ledger.check_and_record("a")

    def test_separate_instances_do_not_share_state(self, clock):
        first = RateLimitLedger(max_requests=1, window_seconds=60, clock=clock)
        second = RateLimitLedger(max_requests=1, window_seconds=60, clock=clock)
        assert first.check_and_record("ip")
        assert second.check_and_record("ip")


class TestRetryAfter:

    def test_counts_down_to_oldest_expiry(self, clock):
        ledger = RateLimitLedger(max_requests=2, window_seconds=900, clock=clock)
        ledger.check_and_record("ip")
        clock.advance(100)
        ledger.check_and_record("ip")
        clock.advance(200)

        assert ledger.retry_after("ip") == 601

    def test_at_least_one_second(self, clock):
        ledger = RateLimitLedger(max_requests=1, window_seconds=10, clock=clock)
        assert ledger.retry_after("nobody") == 1


class TestSweep:

    def test_drops_idle_identifiers(self, clock):
        ledger = RateLimitLedger(max_requests=3, window_seconds=60, clock=clock)
        ledger.check_and_record("old")
        clock.advance(30)
        ledger.check_and_record("recent")
        clock.advance(31)

        assert ledger.sweep() == 1
        assert "old" not in ledger
        assert "recent" in ledger
        assert len(ledger) == 1

    def test_lookup_removes_empty_identifier(self, clock):
        ledger = RateLimitLedger(max_requests=3, window_seconds=60, clock=clock)
        ledger.check_and_record("ip")
        clock.advance(61)
        ledger.retry_after("ip")
        assert "ip" not in ledger

    def test_periodic_sweep_runs_until_cancelled(self, clock):
        ledger = RateLimitLedger(max_requests=3, window_seconds=60, clock=clock)
        ledger.check_and_record("ip")
        clock.advance(61)

        async def run():
            task = asyncio.create_task(run_periodic_sweep(ledger, interval_seconds=0.01))
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run())
        assert len(ledger) == 0
