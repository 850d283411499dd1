"""Translation engine data models.

This module provides structured data models for the translation engine,
ensuring type safety and clear contracts between components.
"""

from .chunk import Chunk, ChunkStatus, ProcessingMode
from .prompt import CompletionOptions, Message, PromptBundle
from .result import AggregateResult, ChunkOutcome, ChunkResult, ResultMode
from .unit import (
    BlockType,
    DifferentialUnit,
    ParagraphUnit,
    SegmentUnit,
    TranslationUnit,
)

__all__ = [
    # Chunk models
    "Chunk",
    "ChunkStatus",
    "ProcessingMode",
    # Prompt models
    "CompletionOptions",
    "Message",
    "PromptBundle",
    # Unit models
    "BlockType",
    "DifferentialUnit",
    "ParagraphUnit",
    "SegmentUnit",
    "TranslationUnit",
    # Result models
    "AggregateResult",
    "ChunkOutcome",
    "ChunkResult",
    "ResultMode",
]
