"""Unit tests for the batch scheduler."""

import asyncio

import pytest

from repolens.analysis.batching import chunked, run_in_batches
from repolens.state.registry import AnalysisCancelledError, CancellationToken


class TestChunked:
    """Tests for contiguous chunking."""

    def test_chunks_preserve_order(self):
        assert chunked([1, 2, 3, 4, 5, 6, 7], 3) == [[1, 2, 3], [4, 5, 6], [7]]

    def test_empty_input(self):
        assert chunked([], 5) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            chunked([1], 0)


class TestRunInBatches:
    """Tests for run_in_batches."""

    @pytest.mark.asyncio
    async def test_results_follow_input_order(self, no_sleep):
        """Later items finishing first must not reorder results."""

        async def process(n):
            await asyncio.sleep(0.01 * (5 - n))
            return n * 10

        results = await run_in_batches(
            [1, 2, 3, 4, 5], process, batch_size=5, delay=1.0, sleep=no_sleep
        )

        assert results == [10, 20, 30, 40, 50]

    @pytest.mark.asyncio
    async def test_two_chunks_with_failures_keep_input_order(self, no_sleep):
        """Seven items at size five: two chunks, one pause, ordered output."""
        latencies = {1: 0.05, 2: 0.01, 3: 0.04, 4: 0.0, 5: 0.02, 6: 0.03, 7: 0.0}
        finished = []
        started_after = {}

        async def process(n):
            started_after[n] = len(finished)
            await asyncio.sleep(latencies[n])
            finished.append(n)
            if n in (3, 6):
                raise RuntimeError(f"failed {n}")
            return n * 10

        results = await run_in_batches(
            list(range(1, 8)),
            process,
            batch_size=5,
            delay=1.0,
            on_error=lambda item, exc: f"fallback {item}",
            sleep=no_sleep,
        )

        assert results == [10, 20, "fallback 3", 40, 50, "fallback 6", 70]
        assert finished[:5] != [1, 2, 3, 4, 5]
        assert set(finished[:5]) == {1, 2, 3, 4, 5}
        assert all(started_after[n] == 0 for n in range(1, 6))
        assert started_after[6] == started_after[7] == 5
        assert no_sleep.await_count == 1
        no_sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_sleeps_between_batches_only(self, no_sleep):
        async def process(n):
            return n

        await run_in_batches(list(range(12)), process, batch_size=5, delay=1.0, sleep=no_sleep)

        assert no_sleep.await_count == 2
        no_sleep.assert_awaited_with(1.0)

    @pytest.mark.asyncio
    async def test_batch_concurrency_is_bounded(self, no_sleep):
        in_flight = 0
        peak = 0

        async def process(n):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return n

        await run_in_batches(list(range(7)), process, batch_size=3, delay=0, sleep=no_sleep)

        assert peak == 3

    @pytest.mark.asyncio
    async def test_on_error_fills_failed_slot(self, no_sleep):
        async def process(n):
            if n == 2:
                raise RuntimeError("boom")
            return n

        results = await run_in_batches(
            [1, 2, 3],
            process,
            batch_size=5,
            delay=0,
            on_error=lambda item, exc: -item,
            sleep=no_sleep,
        )

        assert results == [1, -2, 3]

    @pytest.mark.asyncio
    async def test_error_without_handler_propagates(self, no_sleep):
        async def process(n):
            raise RuntimeError(f"failed {n}")

        with pytest.raises(RuntimeError, match="failed 1"):
            await run_in_batches([1, 2], process, batch_size=2, delay=0, sleep=no_sleep)

    @pytest.mark.asyncio
    async def test_cancellation_checked_before_each_batch(self, no_sleep):
        token = CancellationToken()
        seen = []

        async def process(n):
            seen.append(n)
            token.cancel()
            return n

        with pytest.raises(AnalysisCancelledError, match="Analysis was cancelled"):
            await run_in_batches(
                [1, 2, 3, 4], process, batch_size=2, delay=0, cancel_token=token, sleep=no_sleep
            )

        assert seen == [1, 2]

    @pytest.mark.asyncio
    async def test_empty_items(self, no_sleep):
        async def process(n):
            return n

        assert await run_in_batches([], process, batch_size=5, delay=1.0, sleep=no_sleep) == []
        no_sleep.assert_not_awaited()
