"""Chunk orchestrator.

Runs chunks through the pipeline in waves of bounded concurrency and merges
their results back into source order.
"""

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, List, Sequence

from .models.chunk import Chunk
from .models.result import AggregateResult, ChunkOutcome, ResultMode
from .pipeline import TranslationPipeline

logger = logging.getLogger(__name__)

# Async delay used between waves; tests inject a recording fake.
Sleeper = Callable[[float], Awaitable[None]]

MAX_CONCURRENT = 2
WAVE_DELAY_SECONDS = 0.3


class ChunkOrchestrator:
    """Drives a bounded-concurrency pipeline over a chunk list.

    Chunks are dispatched in waves of at most ``max_concurrent``. A wave is
    launched together and awaited together; the next wave starts only after
    every member resolved, followed by a fixed delay. Each chunk's failure
    is isolated by the pipeline, so a wave always resolves to one outcome
    per chunk. The wave barrier serializes access to the collected results,
    so no locking is needed.
    """

    def __init__(
        self,
        pipeline: TranslationPipeline,
        max_concurrent: int = MAX_CONCURRENT,
        wave_delay: float = WAVE_DELAY_SECONDS,
        sleep: Sleeper = asyncio.sleep,
    ):
        if max_concurrent <= 0:
            raise ValueError("max_concurrent must be positive")
        self.pipeline = pipeline
        self.max_concurrent = max_concurrent
        self.wave_delay = wave_delay
        self._sleep = sleep

    def plan_waves(self, chunks: Sequence[Chunk]) -> List[List[Chunk]]:
        """Group chunks into consecutive waves of at most max_concurrent."""
        return [
            list(chunks[i:i + self.max_concurrent])
            for i in range(0, len(chunks), self.max_concurrent)
        ]

    async def run_waves(self, chunks: Sequence[Chunk]) -> AsyncIterator[List[ChunkOutcome]]:
        """Yield each wave's outcomes, in source order, as the wave resolves."""
        waves = self.plan_waves(chunks)
        for wave_number, wave in enumerate(waves):
            if wave_number > 0 and self.wave_delay > 0:
                await self._sleep(self.wave_delay)

            logger.info(
                "Wave %d/%d: dispatching %d chunks",
                wave_number + 1, len(waves), len(wave),
            )
            outcomes = await asyncio.gather(
                *(self.pipeline.translate_chunk(chunk) for chunk in wave)
            )
            failed = sum(1 for o in outcomes if not o.succeeded)
            if failed:
                logger.warning("Wave %d: %d/%d chunks fell back", wave_number + 1, failed, len(wave))
            yield list(outcomes)

    async def run(self, chunks: Sequence[Chunk]) -> List[ChunkOutcome]:
        """Process every chunk and return outcomes sorted by chunk index."""
        outcomes: List[ChunkOutcome] = []
        async for wave_outcomes in self.run_waves(chunks):
            outcomes.extend(wave_outcomes)
        # Completion order is nondeterministic; output order is source order.
        outcomes.sort(key=lambda o: o.chunk_index)
        return outcomes

    async def translate(self, chunks: Sequence[Chunk]) -> AggregateResult:
        """Process every chunk and merge the results into one aggregate."""
        outcomes = await self.run(chunks)
        return self.merge(outcomes)

    def merge(self, outcomes: Sequence[ChunkOutcome]) -> AggregateResult:
        """Concatenate chunk results in ascending chunk order."""
        config = self.pipeline.config
        mode = config.result_mode
        ordered = sorted(outcomes, key=lambda o: o.chunk_index)

        units = [unit for o in ordered for unit in o.result.units]
        if mode == ResultMode.DIFFERENTIAL:
            full_original, full_translated = None, None
        else:
            full_original = "".join(o.result.full_original_text or "" for o in ordered)
            full_translated = "".join(o.result.full_translated_text or "" for o in ordered)

        return AggregateResult(
            units=units,
            full_original_text=full_original,
            full_translated_text=full_translated,
            mode=mode,
            source_language=config.source_language,
            target_language=config.target_language,
        )
