"""Per-chunk translation pipeline.

This module provides the TranslationPipeline class that runs one chunk
through prompt building, the model call and output processing, and turns
every chunk-level failure into a fallback result.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from ..models.chunk import Chunk, ChunkStatus, ProcessingMode
from ..models.prompt import CompletionOptions
from ..models.result import ChunkOutcome, ResultMode
from ...errors import ModelCallError, ParseError
from .llm_gateway import ModelClient
from .output_processor import MODEL_CALL_FAILURE, PARSE_FAILURE, OutputProcessor
from .prompt_engine import PromptEngine

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Request-scoped configuration for chunk translation."""

    mode: ProcessingMode = ProcessingMode.SEGMENT
    source_language: str = "zh-CN"
    target_language: str = "ko"
    need_pinyin: bool = True
    differential: bool = False
    streaming: bool = False
    options: CompletionOptions = field(default_factory=CompletionOptions)

    @property
    def result_mode(self) -> ResultMode:
        return ResultMode.resolve(self.mode, self.differential, self.streaming)


class TranslationPipeline:
    """Runs single chunks against the model client.

    Coordinates the flow:
    Chunk -> PromptEngine -> ModelClient -> OutputProcessor -> ChunkResult
    """

    def __init__(self, client: ModelClient, config: PipelineConfig):
        """Initialize translation pipeline.

        Args:
            client: Model client used for completions
            config: Pipeline configuration
        """
        self.client = client
        self.config = config
        self.output_processor = OutputProcessor(
            source_language=config.source_language,
            target_language=config.target_language,
            need_pinyin=config.need_pinyin and config.mode == ProcessingMode.SEGMENT,
        )

    async def call_model(self, chunk: Chunk) -> str:
        """Send one chunk to the model, racing the call against a timeout.

        Raises:
            ModelCallError: If the call fails or exceeds the timeout
        """
        bundle = PromptEngine.build(
            chunk,
            self.config.mode,
            need_pinyin=self.config.need_pinyin,
            differential=self.config.differential,
            source_language=self.config.source_language,
            target_language=self.config.target_language,
            options=self.config.options,
        )
        timeout = self.config.options.timeout_seconds
        try:
            return await asyncio.wait_for(
                self.client.complete(bundle.system_prompt, bundle.user_prompt, bundle.options),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise ModelCallError(
                f"Model call timed out after {timeout:g}s", timed_out=True
            ) from e
        except ModelCallError:
            raise
        except Exception as e:
            raise ModelCallError(f"Model call failed: {e}") from e

    async def translate_chunk(self, chunk: Chunk) -> ChunkOutcome:
        """Translate one chunk; never raises for chunk-level failures.

        Args:
            chunk: Chunk to translate

        Returns:
            ChunkOutcome that is SUCCEEDED with parsed units, or FAILED
            with a fallback result built from the chunk's own segments
        """
        mode = self.config.result_mode
        first = chunk.segments[0][:50] if chunk.segments else ""
        logger.info(
            "Chunk %d (%s) started: %d segments, first=%r",
            chunk.chunk_index, chunk.page_id or "-", len(chunk), first,
        )
        try:
            raw_text = await self.call_model(chunk)
            result = self.output_processor.process(raw_text, chunk, mode)
        except ModelCallError as e:
            logger.error("Chunk %d model call failed: %s", chunk.chunk_index, e)
            return self._failed(chunk, mode, MODEL_CALL_FAILURE, str(e))
        except ParseError as e:
            logger.warning(
                "Chunk %d output unparseable: %s; raw=%r",
                chunk.chunk_index, e, (e.raw_text or "")[:200],
            )
            return self._failed(chunk, mode, PARSE_FAILURE, f"Parse error: {e}")
        except Exception as e:
            logger.exception("Chunk %d failed unexpectedly", chunk.chunk_index)
            return self._failed(chunk, mode, MODEL_CALL_FAILURE, str(e))

        logger.info("Chunk %d succeeded: %d units", chunk.chunk_index, len(result.units))
        return ChunkOutcome(chunk=chunk, status=ChunkStatus.SUCCEEDED, result=result)

    def _failed(self, chunk: Chunk, mode: ResultMode, sentinel: str, error: str) -> ChunkOutcome:
        return ChunkOutcome(
            chunk=chunk,
            status=ChunkStatus.FAILED,
            result=self.output_processor.fallback(chunk, mode, sentinel),
            error=error,
        )
