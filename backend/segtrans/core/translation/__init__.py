"""Translation package.

This package provides the chunk translation engine.

Architecture:
- models/: Data models (Chunk, units, ChunkResult, AggregateResult, ...)
- pipeline/: Chunking, prompting, model client, parsing, per-chunk pipeline
- orchestrator.py: Bounded-concurrency waves and ordered merging
- delivery.py: Batch response and stream event shapes
- service.py: Request-level wiring
"""

from .models import (
    AggregateResult,
    BlockType,
    Chunk,
    ChunkOutcome,
    ChunkResult,
    ChunkStatus,
    CompletionOptions,
    DifferentialUnit,
    ParagraphUnit,
    ProcessingMode,
    PromptBundle,
    ResultMode,
    SegmentUnit,
)
from .orchestrator import ChunkOrchestrator
from .pipeline import (
    GatewayFactory,
    ModelClient,
    PipelineConfig,
    TranslationPipeline,
)
from .service import PageInput, StreamPlan, TranslationOptions, TranslationService

__all__ = [
    # Models
    "AggregateResult",
    "BlockType",
    "Chunk",
    "ChunkOutcome",
    "ChunkResult",
    "ChunkStatus",
    "CompletionOptions",
    "DifferentialUnit",
    "ParagraphUnit",
    "ProcessingMode",
    "PromptBundle",
    "ResultMode",
    "SegmentUnit",
    # Engine
    "ChunkOrchestrator",
    "GatewayFactory",
    "ModelClient",
    "PipelineConfig",
    "TranslationPipeline",
    # Service
    "PageInput",
    "StreamPlan",
    "TranslationOptions",
    "TranslationService",
]
