"""Chunk models.

A chunk is a bounded, ordered group of segments sent to the model in one
request. It carries enough position information to rebuild global order
after concurrent chunk requests complete in arbitrary order.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ...errors import ValidationError


class ProcessingMode(str, Enum):
    """How a request's text is chunked, prompted and encoded."""

    SEGMENT = "segment"  # Discrete segments, fixed-count chunks, pinyin
    PARAGRAPH = "paragraph"  # One long text, smart split, typed blocks

    @classmethod
    def parse(cls, value: Optional[str]) -> "ProcessingMode":
        """Resolve a request's mode string, defaulting to segment mode.

        Raises:
            ValidationError: If the mode is not a known processing mode
        """
        if not value or not value.strip():
            return cls.SEGMENT
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unknown processing mode: {value!r} (expected 'segment' or 'paragraph')"
            ) from None


class ChunkStatus(str, Enum):
    """Terminal state of a single chunk request."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Chunk(BaseModel):
    """Ordered sub-sequence of segments plus its position."""

    model_config = ConfigDict(frozen=True)

    chunk_index: int = Field(..., ge=0, description="Position among sibling chunks")
    start_index: int = Field(
        ..., ge=0, description="Global offset of the first segment"
    )
    segments: Tuple[str, ...] = Field(..., description="Segments in source order")
    page_id: Optional[str] = Field(
        default=None, description="Grouping tag when pages are interleaved"
    )

    def __len__(self) -> int:
        return len(self.segments)

