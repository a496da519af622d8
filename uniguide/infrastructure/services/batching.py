"""
Batch execution for prediction tiers

Sends a tier's payloads to the prediction service in chunks:

1. Payloads are grouped by the caller, then chunked with an adaptive size
2. Chunks run under a semaphore (server batch concurrency); every chunk after
   the first waits `chunk_delay` before starting
3. Each chunk is sent as one batch call
4. If the batch call fails, the chunk falls back to individual calls under a
   second semaphore
5. Inputs that still fail are retried one by one with linear backoff

A chunk that fails outright is logged and contributes no results; it never
aborts the other chunks.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import (
    Awaitable,
    Callable,
    Generic,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

from uniguide.config.settings import Settings, settings as default_settings
from uniguide.infrastructure.exceptions import PredictionServiceError

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
ResultT = TypeVar("ResultT")
ItemT = TypeVar("ItemT")

COMPLEXITY_MULTIPLIERS = {
    "high": 0.7,
    "medium": 1.0,
    "low": 1.5,
}


def calculate_dynamic_batch_concurrency(
    input_count: int,
    inputs_per_worker: int = 3,
    max_concurrency: Optional[int] = None,
    min_concurrency: int = 1,
) -> int:
    """Workers needed for `input_count` inputs, clamped to [min, max]."""
    needed_workers = math.ceil(input_count / inputs_per_worker)
    concurrency = max(needed_workers, min_concurrency)
    if max_concurrency:
        concurrency = min(concurrency, max_concurrency)
    return concurrency


def chunk_list(items: Sequence[ItemT], chunk_size: int) -> List[List[ItemT]]:
    """Split `items` into consecutive chunks of at most `chunk_size`."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    return [list(items[i:i + chunk_size]) for i in range(0, len(items), chunk_size)]


def get_optimal_chunk_size(
    total_inputs: int,
    max_chunk_size: int = 10,
    memory_limit: int = 1000,
    network_latency: int = 100,
    processing_complexity: str = "medium",
    server_concurrency: int = 2,
) -> int:
    """
    Chunk size balancing parallelism against per-request overhead.

    Small inputs (at most twice the server concurrency) use chunks of one for
    maximum parallelism. Otherwise the size is the smallest of the
    concurrency-based size (scaled by complexity), the latency-based size,
    the memory-based size and `max_chunk_size`.
    """
    if total_inputs <= server_concurrency * 2:
        return 1

    concurrency_based = math.ceil(total_inputs / server_concurrency)
    multiplier = COMPLEXITY_MULTIPLIERS[processing_complexity]
    network_optimal = max(3, min(max_chunk_size, network_latency / 10))
    memory_based = memory_limit // 50

    optimal = math.floor(min(
        concurrency_based * multiplier,
        network_optimal,
        memory_based,
        max_chunk_size,
    ))
    optimal = max(optimal, 1)

    if total_inputs <= max_chunk_size:
        optimal = min(optimal, total_inputs)
    return optimal


@dataclass(frozen=True)
class BatchPolicy:
    """Concurrency, delay and retry knobs for one tier run."""
    server_batch_concurrency: int = 2
    max_batch_concurrency: int = 8
    inputs_per_worker: int = 3
    individual_concurrency: int = 3
    max_retries: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0
    request_delay: float = 0.1
    chunk_delay: float = 0.2
    retry_iteration_delay: float = 0.5
    network_latency_ms: int = 100
    memory_limit_mb: int = 1000

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "BatchPolicy":
        config = config or default_settings
        return cls(
            server_batch_concurrency=config.prediction_server_batch_concurrency,
            max_batch_concurrency=config.prediction_max_batch_concurrency,
            inputs_per_worker=config.prediction_inputs_per_worker,
            individual_concurrency=config.prediction_concurrency,
            max_retries=config.max_retries,
            retry_base_delay=config.retry_base_delay,
            retry_max_delay=config.retry_max_delay,
            request_delay=config.prediction_request_delay,
            chunk_delay=config.prediction_chunk_delay,
            retry_iteration_delay=config.prediction_retry_iteration_delay,
            network_latency_ms=config.prediction_network_latency_ms,
            memory_limit_mb=config.prediction_memory_limit_mb,
        )


class TierBatchExecutor(Generic[InputT, ResultT]):
    """
    Runs one tier's payloads against the prediction service.

    Args:
        tier: Label used in logs ("L1", "L2", "L3")
        single_call: Sends one payload, returns its results
        batch_call: Sends a list of payloads with a concurrency hint
        policy: Concurrency, delay and retry configuration
        max_chunk_size: Upper bound for a chunk
        complexity: "high", "medium" or "low" processing cost per payload
    """

    def __init__(
        self,
        tier: str,
        single_call: Callable[[InputT], Awaitable[List[ResultT]]],
        batch_call: Callable[[List[InputT], int], Awaitable[List[ResultT]]],
        policy: BatchPolicy,
        max_chunk_size: int = 10,
        complexity: str = "medium",
    ):
        self.tier = tier
        self._single_call = single_call
        self._batch_call = batch_call
        self.policy = policy
        self.max_chunk_size = max_chunk_size
        self.complexity = complexity

    def plan_chunks(self, groups: Mapping[object, Sequence[InputT]]) -> List[List[InputT]]:
        """Chunks for every group; a chunk never mixes two groups."""
        total = sum(len(group) for group in groups.values())
        if total == 0:
            return []
        chunk_size = get_optimal_chunk_size(
            total,
            max_chunk_size=self.max_chunk_size,
            memory_limit=self.policy.memory_limit_mb,
            network_latency=self.policy.network_latency_ms,
            processing_complexity=self.complexity,
            server_concurrency=self.policy.server_batch_concurrency,
        )
        chunks: List[List[InputT]] = []
        for group in groups.values():
            chunks.extend(chunk_list(group, chunk_size))
        return chunks

    async def run(self, groups: Mapping[object, Sequence[InputT]]) -> List[ResultT]:
        """Execute every chunk and return the results of those that succeeded."""
        chunks = self.plan_chunks(groups)
        if not chunks:
            return []

        logger.info(
            f"[{self.tier}] Processing {sum(len(c) for c in chunks)} inputs in "
            f"{len(chunks)} chunk(s) across {len(groups)} group(s)"
        )
        semaphore = asyncio.Semaphore(self.policy.server_batch_concurrency)

        async def run_chunk(index: int, chunk: List[InputT]) -> List[ResultT]:
            async with semaphore:
                if index > 0 and self.policy.chunk_delay > 0:
                    await asyncio.sleep(self.policy.chunk_delay)
                return await self._process_chunk(index, chunk)

        outcomes = await asyncio.gather(
            *(run_chunk(index, chunk) for index, chunk in enumerate(chunks)),
            return_exceptions=True,
        )

        results: List[ResultT] = []
        failed_chunks = 0
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, Exception):
                failed_chunks += 1
                logger.error(
                    f"[{self.tier}] Chunk {index + 1}/{len(chunks)} failed and was skipped: {outcome}"
                )
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            results.extend(outcome)

        logger.info(
            f"[{self.tier}] Completed {len(chunks) - failed_chunks}/{len(chunks)} chunk(s), "
            f"{len(results)} result(s)"
        )
        return results

    async def _process_chunk(self, index: int, chunk: List[InputT]) -> List[ResultT]:
        concurrency = calculate_dynamic_batch_concurrency(
            len(chunk),
            inputs_per_worker=self.policy.inputs_per_worker,
            max_concurrency=self.policy.max_batch_concurrency,
        )
        try:
            return await self._batch_call(chunk, concurrency)
        except PredictionServiceError as e:
            logger.warning(
                f"[{self.tier}] Batch call for chunk {index + 1} ({len(chunk)} inputs) failed, "
                f"falling back to individual calls: {e.message}"
            )

        if self.policy.retry_base_delay > 0:
            await asyncio.sleep(self.policy.retry_base_delay)

        results, failed_inputs = await self._run_individually(chunk)
        if failed_inputs:
            results.extend(await self._retry_sequentially(failed_inputs))
        return results

    async def _run_individually(
        self,
        chunk: List[InputT],
    ) -> Tuple[List[ResultT], List[InputT]]:
        semaphore = asyncio.Semaphore(self.policy.individual_concurrency)

        async def call(position: int, payload: InputT) -> List[ResultT]:
            async with semaphore:
                if position > 0 and self.policy.request_delay > 0:
                    await asyncio.sleep(self.policy.request_delay)
                return await self._single_call(payload)

        outcomes = await asyncio.gather(
            *(call(position, payload) for position, payload in enumerate(chunk)),
            return_exceptions=True,
        )

        results: List[ResultT] = []
        failed_inputs: List[InputT] = []
        for payload, outcome in zip(chunk, outcomes):
            if isinstance(outcome, PredictionServiceError):
                failed_inputs.append(payload)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.extend(outcome)

        if failed_inputs:
            logger.warning(
                f"[{self.tier}] {len(failed_inputs)}/{len(chunk)} individual call(s) failed, "
                f"retrying sequentially"
            )
        return results, failed_inputs

    async def _retry_sequentially(self, failed_inputs: List[InputT]) -> List[ResultT]:
        recovered: List[ResultT] = []
        gave_up = 0

        for position, payload in enumerate(failed_inputs):
            if position > 0 and self.policy.retry_iteration_delay > 0:
                await asyncio.sleep(self.policy.retry_iteration_delay)

            last_error: Optional[PredictionServiceError] = None
            for attempt in range(1, self.policy.max_retries + 1):
                delay = min(self.policy.retry_base_delay * attempt, self.policy.retry_max_delay)
                if delay > 0:
                    await asyncio.sleep(delay)
                try:
                    recovered.extend(await self._single_call(payload))
                    last_error = None
                    break
                except PredictionServiceError as e:
                    last_error = e
                    logger.warning(
                        f"[{self.tier}] Retry {attempt}/{self.policy.max_retries} failed: {e.message}"
                    )

            if last_error is not None:
                gave_up += 1

        if gave_up:
            logger.error(f"[{self.tier}] {gave_up} input(s) failed after {self.policy.max_retries} retries")
        return recovered
