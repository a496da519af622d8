"""
Unit tests for chunk sizing and the tier batch executor.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from uniguide.infrastructure.exceptions import PredictionServiceError
from uniguide.infrastructure.services.batching import (
    BatchPolicy,
    TierBatchExecutor,
    calculate_dynamic_batch_concurrency,
    chunk_list,
    get_optimal_chunk_size,
)

ZERO_DELAY = BatchPolicy(
    retry_base_delay=0,
    retry_max_delay=0,
    request_delay=0,
    chunk_delay=0,
    retry_iteration_delay=0,
)


def service_error(message="boom"):
    return PredictionServiceError(message, tier="L1")


# =============================================================================
# Helpers
# =============================================================================

class TestConcurrencyHelpers:

    @pytest.mark.parametrize("count,expected", [(1, 1), (3, 1), (4, 2), (10, 4), (100, 8)])
    def test_dynamic_batch_concurrency(self, count, expected):
        assert calculate_dynamic_batch_concurrency(count, 3, 8) == expected

    def test_dynamic_batch_concurrency_without_max(self):
        assert calculate_dynamic_batch_concurrency(100, 3) == 34

    def test_chunk_list(self):
        assert chunk_list([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
        assert chunk_list([], 3) == []

    def test_chunk_list_rejects_zero(self):
        with pytest.raises(ValueError):
            chunk_list([1], 0)


class TestOptimalChunkSize:

    def test_small_inputs_use_single_item_chunks(self):
        assert get_optimal_chunk_size(4, server_concurrency=2) == 1

    def test_large_inputs_capped_by_max(self):
        assert get_optimal_chunk_size(30, max_chunk_size=10) == 10

    def test_capped_by_total_when_below_max(self):
        assert get_optimal_chunk_size(8, max_chunk_size=10, server_concurrency=2) == 4

    def test_high_complexity_shrinks_chunks(self):
        assert get_optimal_chunk_size(10, max_chunk_size=10, processing_complexity="high") == 3

    def test_memory_limit(self):
        assert get_optimal_chunk_size(100, max_chunk_size=10, memory_limit=100) == 2

    def test_never_below_one(self):
        assert get_optimal_chunk_size(100, memory_limit=10) == 1


class TestBatchPolicy:

    def test_from_settings(self):
        policy = BatchPolicy.from_settings()
        assert policy.server_batch_concurrency >= 1
        assert policy.max_retries >= 0


# =============================================================================
# Executor
# =============================================================================

def make_executor(single_call, batch_call, policy=ZERO_DELAY, max_chunk_size=10):
    return TierBatchExecutor(
        "L1",
        single_call=single_call,
        batch_call=batch_call,
        policy=policy,
        max_chunk_size=max_chunk_size,
    )


class TestPlanChunks:

    def test_chunks_never_mix_groups(self):
        executor = make_executor(AsyncMock(), AsyncMock())
        chunks = executor.plan_chunks({"A01": [1, 2, 3, 4, 5, 6], "D01": [7, 8]})
        assert all(set(chunk) <= {1, 2, 3, 4, 5, 6} or set(chunk) <= {7, 8} for chunk in chunks)
        assert sorted(x for chunk in chunks for x in chunk) == list(range(1, 9))

    def test_empty_groups(self):
        executor = make_executor(AsyncMock(), AsyncMock())
        assert executor.plan_chunks({}) == []


class TestExecutorRun:

    async def test_batch_success(self):
        batch_call = AsyncMock(side_effect=lambda chunk, concurrency: [x * 10 for x in chunk])
        single_call = AsyncMock()
        executor = make_executor(single_call, batch_call)

        results = await executor.run({"g": [1, 2, 3, 4, 5, 6]})

        assert sorted(results) == [10, 20, 30, 40, 50, 60]
        single_call.assert_not_awaited()

    async def test_batch_receives_concurrency_hint(self):
        batch_call = AsyncMock(return_value=[])
        executor = make_executor(AsyncMock(), batch_call)
        await executor.run({"g": list(range(9))})
        for call in batch_call.await_args_list:
            chunk, concurrency = call.args
            assert concurrency == calculate_dynamic_batch_concurrency(len(chunk), 3, 8)

    async def test_falls_back_to_individual_calls(self):
        batch_call = AsyncMock(side_effect=service_error())
        single_call = AsyncMock(side_effect=lambda payload: [payload])
        executor = make_executor(single_call, batch_call)

        results = await executor.run({"g": [1, 2]})

        assert sorted(results) == [1, 2]
        assert single_call.await_count == 2

    async def test_retries_failed_inputs(self):
        attempts = {}

        async def single_call(payload):
            attempts[payload] = attempts.get(payload, 0) + 1
            if payload == 2 and attempts[payload] < 3:
                raise service_error()
            return [payload]

        executor = make_executor(single_call, AsyncMock(side_effect=service_error()))
        results = await executor.run({"g": [1, 2]})

        assert sorted(results) == [1, 2]
        assert attempts == {1: 1, 2: 3}

    async def test_all_timeouts_produce_empty_result(self):
        batch_call = AsyncMock(side_effect=service_error("timed out"))
        single_call = AsyncMock(side_effect=service_error("timed out"))
        executor = make_executor(single_call, batch_call)

        results = await executor.run({"g": [1]})

        assert results == []
        assert single_call.await_count == 1 + ZERO_DELAY.max_retries

    async def test_unexpected_error_skips_only_that_chunk(self):
        async def batch_call(chunk, concurrency):
            if 1 in chunk:
                raise RuntimeError("bad chunk")
            return list(chunk)

        executor = make_executor(AsyncMock(), batch_call)
        results = await executor.run({"a": [1], "b": [2]})
        assert results == [2]

    async def test_non_service_error_in_individual_call_fails_chunk(self):
        executor = make_executor(
            AsyncMock(side_effect=ValueError("bad payload")),
            AsyncMock(side_effect=service_error()),
        )
        assert await executor.run({"g": [1]}) == []

    async def test_cancellation_propagates(self):
        executor = make_executor(AsyncMock(), AsyncMock(side_effect=asyncio.CancelledError()))
        with pytest.raises(asyncio.CancelledError):
            await executor.run({"g": [1]})
