"""Translation service.

Wires chunking, the per-chunk pipeline and the orchestrator together for
one request. A service is built per request around an injected model
client; nothing here holds process-wide state.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional, Sequence

from ...config import Settings
from ..errors import ValidationError
from .delivery import batch_response, chunk_event
from .models.chunk import Chunk, ProcessingMode
from .models.prompt import CompletionOptions
from .models.result import AggregateResult
from .orchestrator import ChunkOrchestrator, Sleeper
from .pipeline import (
    ModelClient,
    PipelineConfig,
    TranslationPipeline,
    chunk_paragraph_text,
    split_segments,
)

logger = logging.getLogger(__name__)


@dataclass
class TranslationOptions:
    """Per-request translation options."""

    source_language: str = "zh-CN"
    target_language: str = "ko"
    need_pinyin: bool = True
    mode: ProcessingMode = ProcessingMode.SEGMENT
    differential: bool = False


@dataclass
class PageInput:
    """Segments belonging to one logical page of a stream request."""

    page_id: Optional[str]
    segments: List[str]


@dataclass
class StreamPlan:
    """Chunks of a stream request, computed once before streaming starts."""

    chunks: List[Chunk] = field(default_factory=list)
    pages: Dict[Optional[str], int] = field(default_factory=dict)

    @property
    def total_chunks(self) -> int:
        return len(self.chunks)


class TranslationService:
    """Request-level entry point to the chunk translation engine."""

    def __init__(
        self,
        client: ModelClient,
        chunk_size: int = 3,
        max_concurrent: int = 2,
        wave_delay: float = 0.3,
        short_threshold: int = 300,
        max_chunk_chars: int = 200,
        completion_options: Optional[CompletionOptions] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.client = client
        self.chunk_size = chunk_size
        self.max_concurrent = max_concurrent
        self.wave_delay = wave_delay
        self.short_threshold = short_threshold
        self.max_chunk_chars = max_chunk_chars
        self.completion_options = completion_options or CompletionOptions()
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        client: ModelClient,
        settings: Settings,
        sleep: Sleeper = asyncio.sleep,
    ) -> "TranslationService":
        """Build a service from application settings."""
        return cls(
            client,
            chunk_size=settings.segment_chunk_size,
            max_concurrent=settings.max_concurrent_chunks,
            wave_delay=settings.wave_delay_seconds,
            short_threshold=settings.paragraph_short_threshold,
            max_chunk_chars=settings.paragraph_max_chunk_chars,
            completion_options=CompletionOptions(
                model=settings.llm_model,
                temperature=settings.llm_temperature,
                max_tokens=settings.llm_max_tokens,
                timeout_ms=int(settings.llm_timeout_seconds * 1000),
            ),
            sleep=sleep,
        )

    def build_chunks(
        self,
        segments: Sequence[str],
        mode: ProcessingMode,
        page_id: Optional[str] = None,
    ) -> List[Chunk]:
        """Split a request's segments according to its processing mode.

        Paragraph mode treats the segments as lines of one long text.
        """
        if mode == ProcessingMode.PARAGRAPH:
            return chunk_paragraph_text(
                "\n".join(segments),
                short_threshold=self.short_threshold,
                max_chunk_chars=self.max_chunk_chars,
                page_id=page_id,
            )
        return split_segments(segments, self.chunk_size, page_id=page_id)

    def _orchestrator(self, options: TranslationOptions, streaming: bool) -> ChunkOrchestrator:
        config = PipelineConfig(
            mode=options.mode,
            source_language=options.source_language,
            target_language=options.target_language,
            need_pinyin=options.need_pinyin,
            differential=options.differential,
            streaming=streaming,
            options=self.completion_options,
        )
        return ChunkOrchestrator(
            TranslationPipeline(self.client, config),
            max_concurrent=self.max_concurrent,
            wave_delay=self.wave_delay,
            sleep=self._sleep,
        )

    async def translate(
        self,
        segments: Sequence[str],
        options: TranslationOptions,
    ) -> AggregateResult:
        """Translate all segments and return the merged result.

        Chunk failures degrade to fallback units; this only raises for
        request-level errors.
        """
        orchestrator = self._orchestrator(options, streaming=False)
        chunks = self.build_chunks(segments, options.mode)
        if not chunks:
            return orchestrator.merge([])

        logger.info(
            "Translating %d segments in %d chunks (mode=%s)",
            len(segments), len(chunks), options.mode.value,
        )
        return await orchestrator.translate(chunks)

    async def translate_batch(
        self,
        segments: Sequence[str],
        options: TranslationOptions,
    ) -> tuple[AggregateResult, dict]:
        """Translate and build the batch response payload."""
        start_time = time.time()
        aggregate = await self.translate(segments, options)
        processing_time_ms = int((time.time() - start_time) * 1000)
        logger.info("Translation completed in %dms", processing_time_ms)
        return aggregate, batch_response(aggregate, segments, processing_time_ms)

    def plan_stream(
        self,
        pages: Sequence[PageInput],
        options: TranslationOptions,
    ) -> StreamPlan:
        """Chunk every page once; the plan fixes totalChunks for the stream.

        Raises:
            ValidationError: If the request has no text at all
        """
        plan = StreamPlan()
        for page in pages:
            page_chunks = self.build_chunks(page.segments, options.mode, page_id=page.page_id)
            plan.chunks.extend(page_chunks)
            plan.pages[page.page_id] = len(page_chunks)

        if not plan.chunks:
            raise ValidationError("No text segments to translate")
        return plan

    async def stream(
        self,
        plan: StreamPlan,
        options: TranslationOptions,
    ) -> AsyncIterator[dict]:
        """Yield one event per chunk as soon as the chunk's wave resolves."""
        orchestrator = self._orchestrator(options, streaming=True)
        total = plan.total_chunks
        emitted = 0
        logger.info("Streaming %d chunks across %d pages", total, len(plan.pages))

        async for outcomes in orchestrator.run_waves(plan.chunks):
            for outcome in outcomes:
                emitted += 1
                yield chunk_event(outcome, total, is_complete=emitted == total)
