"""Segment chunking and paragraph smart splitting.

Both splitters are pure functions: they never drop or reorder text, and
every chunk records where it sits in the source so results can be merged
back in order regardless of completion order.
"""

import re
from typing import List, Optional, Sequence

from ..models.chunk import Chunk
from ...errors import ValidationError

# Texts shorter than this are not worth splitting.
SHORT_TEXT_THRESHOLD = 300
MAX_CHUNK_CHARS = 200

_BLANK_LINES = re.compile(r"\n\s*\n")
# Split after sentence-terminal punctuation, keeping it on the sentence.
_SENTENCE_END = re.compile(r"(?<=[。！？.!?])")


def split_segments(
    segments: Sequence[str],
    chunk_size: int,
    page_id: Optional[str] = None,
) -> List[Chunk]:
    """Split segments into consecutive chunks of at most ``chunk_size``.

    Args:
        segments: Ordered source segments
        chunk_size: Maximum segments per chunk (must be positive)
        page_id: Optional grouping tag copied onto every chunk

    Returns:
        Chunks in source order; only the last may be short

    Raises:
        ValidationError: If chunk_size is not a positive integer
    """
    if not isinstance(chunk_size, int) or isinstance(chunk_size, bool) or chunk_size <= 0:
        raise ValidationError(f"chunk_size must be a positive integer, got {chunk_size!r}")

    return [
        Chunk(
            chunk_index=chunk_index,
            start_index=start,
            segments=tuple(segments[start:start + chunk_size]),
            page_id=page_id,
        )
        for chunk_index, start in enumerate(range(0, len(segments), chunk_size))
    ]


def split_sentences(text: str) -> List[str]:
    """Split text after each sentence-terminal mark (CJK and Latin).

    Whitespace stays attached to the following sentence, so joining the
    result with an empty string reproduces ``text`` exactly.
    """
    return [s for s in _SENTENCE_END.split(text) if s]


def _pack_sentences(paragraph: str, max_chars: int) -> List[str]:
    pieces: List[str] = []
    buffer = ""
    for sentence in split_sentences(paragraph):
        if buffer and len(buffer) + len(sentence) > max_chars:
            pieces.append(buffer.strip())
            buffer = sentence
        else:
            buffer += sentence
    if buffer.strip():
        pieces.append(buffer.strip())
    return [p for p in pieces if p]


def split_for_paragraph(
    text: str,
    short_threshold: int = SHORT_TEXT_THRESHOLD,
    max_chunk_chars: int = MAX_CHUNK_CHARS,
) -> List[str]:
    """Split one long text into semantically bounded pieces.

    Short texts come back unchanged as a single piece. Longer texts are
    split on blank lines; any paragraph longer than ``max_chunk_chars`` is
    packed greedily sentence by sentence. A single sentence longer than the
    limit becomes its own oversized piece rather than being truncated.

    Args:
        text: Source text
        short_threshold: Texts shorter than this are returned as-is
        max_chunk_chars: Soft size limit for a piece

    Returns:
        Ordered list of pieces
    """
    if len(text) < short_threshold:
        return [text]

    pieces: List[str] = []
    for paragraph in _BLANK_LINES.split(text):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        if len(paragraph) <= max_chunk_chars:
            pieces.append(paragraph)
        else:
            pieces.extend(_pack_sentences(paragraph, max_chunk_chars))
    return pieces


def chunk_paragraph_text(
    text: str,
    short_threshold: int = SHORT_TEXT_THRESHOLD,
    max_chunk_chars: int = MAX_CHUNK_CHARS,
    page_id: Optional[str] = None,
) -> List[Chunk]:
    """Smart-split ``text`` and wrap every piece as a one-segment chunk."""
    if not text.strip():
        return []
    pieces = split_for_paragraph(text, short_threshold, max_chunk_chars)
    return [
        Chunk(chunk_index=i, start_index=i, segments=(piece,), page_id=page_id)
        for i, piece in enumerate(pieces)
    ]
