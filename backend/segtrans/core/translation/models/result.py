"""Chunk and aggregate result models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .chunk import Chunk, ChunkStatus, ProcessingMode
from .unit import TranslationUnit


class ResultMode(str, Enum):
    """Encoding tag shared by a chunk result and its units."""

    SEGMENT = "segment"  # Batch segment mode, original inlined
    PARAGRAPH = "paragraph"  # Typed blocks, original inlined
    DIFFERENTIAL = "differential"  # Index-only, original omitted
    FULL = "full"  # Streamed segment mode, original inlined

    @classmethod
    def resolve(
        cls,
        mode: ProcessingMode,
        differential: bool = False,
        streaming: bool = False,
    ) -> "ResultMode":
        """Pick the encoding for a request.

        Paragraph mode always inlines the original because the model may
        re-segment the text, so there is no client-side original to index.
        """
        if mode == ProcessingMode.PARAGRAPH:
            return cls.PARAGRAPH
        if differential:
            return cls.DIFFERENTIAL
        return cls.FULL if streaming else cls.SEGMENT

    @property
    def includes_original(self) -> bool:
        return self != ResultMode.DIFFERENTIAL


class ChunkResult(BaseModel):
    """Units and accumulated text produced for one chunk."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    units: List[TranslationUnit] = Field(default_factory=list)
    full_original_text: Optional[str] = None
    full_translated_text: Optional[str] = None
    mode: ResultMode


class ChunkOutcome(BaseModel):
    """Terminal state of one chunk after its wave resolved.

    A failed chunk still carries a fallback result, so every outcome can be
    merged without special casing.
    """

    chunk: Chunk
    status: ChunkStatus
    result: ChunkResult
    error: Optional[str] = None

    @property
    def chunk_index(self) -> int:
        return self.chunk.chunk_index

    @property
    def succeeded(self) -> bool:
        return self.status == ChunkStatus.SUCCEEDED


class AggregateResult(BaseModel):
    """All chunk results merged in ascending chunk order."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    units: List[TranslationUnit] = Field(default_factory=list)
    full_original_text: Optional[str] = ""
    full_translated_text: Optional[str] = ""
    mode: ResultMode = ResultMode.SEGMENT
    source_language: str
    target_language: str

    def to_response(self) -> dict:
        """Serialize for the wire (camelCase, unset texts dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
