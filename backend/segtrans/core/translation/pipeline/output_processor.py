"""Output processor for chunk results.

This module maps parsed model output back onto the chunk that produced it
and builds the fallback results used when a chunk fails.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..models.chunk import Chunk
from ..models.result import ChunkResult, ResultMode
from ..models.unit import (
    BlockType,
    DifferentialUnit,
    ParagraphUnit,
    SegmentUnit,
    TranslationUnit,
)
from .response_parser import parse_model_output

logger = logging.getLogger(__name__)

# Sentinels let callers tell failure causes apart.
MISSING_TRANSLATION = "[번역 실패]"
PARSE_FAILURE = "[번역 파싱 실패]"
MODEL_CALL_FAILURE = "[API 호출 실패]"


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value)


class OutputProcessor:
    """Turns raw model output into a structured ChunkResult.

    Responsibilities:
    1. Parse the model's JSON (strict, then salvage)
    2. Map entries positionally onto the chunk's segments
    3. Build fallback results for failed chunks
    """

    def __init__(
        self,
        source_language: str = "zh-CN",
        target_language: str = "ko",
        need_pinyin: bool = True,
    ):
        self.source_language = source_language
        self.target_language = target_language
        self.need_pinyin = need_pinyin

    def process(self, raw_text: str, chunk: Chunk, mode: ResultMode) -> ChunkResult:
        """Parse raw output and build the chunk's result.

        Raises:
            ParseError: If the output cannot be parsed at all
        """
        parsed = parse_model_output(raw_text)
        if len(parsed) != len(chunk) and mode != ResultMode.PARAGRAPH:
            logger.warning(
                "Chunk %d: model returned %d entries for %d segments",
                chunk.chunk_index, len(parsed), len(chunk),
            )
        units = self.map_units(parsed, chunk.segments, mode, chunk.start_index)
        return self.build_result(units, mode)

    def map_units(
        self,
        parsed: Sequence[Dict[str, Any]],
        segments: Sequence[str],
        mode: ResultMode,
        start_index: int = 0,
    ) -> List[TranslationUnit]:
        """Map parsed entries back onto the originating segments.

        Segment encodings always produce exactly ``len(segments)`` units:
        extra entries are ignored, missing ones are synthesized from the
        segment with an empty translation. Paragraph mode produces one unit
        per returned block because the model may re-segment the text, and
        falls back to one unit per segment when nothing came back.

        Args:
            parsed: Entries decoded from the model output
            segments: The chunk's source segments
            mode: Result encoding
            start_index: Global offset of the first segment

        Returns:
            List of units in source order
        """
        if mode == ResultMode.PARAGRAPH:
            return self._map_paragraph(parsed, segments)

        units: List[TranslationUnit] = []
        for i, segment in enumerate(segments):
            entry: Optional[Dict[str, Any]] = parsed[i] if i < len(parsed) else None
            if entry is None:
                translated, pinyin, original = "", "", segment
            else:
                translated = _text(entry.get("translation")) or MISSING_TRANSLATION
                pinyin = _text(entry.get("pinyin")) if self.need_pinyin else ""
                original = _text(entry.get("original")) or segment

            if mode == ResultMode.DIFFERENTIAL:
                units.append(
                    DifferentialUnit(
                        index=start_index + i,
                        translated_text=translated,
                        pinyin=pinyin,
                    )
                )
            else:
                units.append(
                    SegmentUnit(
                        original_text=original,
                        translated_text=translated,
                        pinyin=pinyin,
                        source_language=self.source_language,
                        target_language=self.target_language,
                    )
                )
        return units

    def _map_paragraph(
        self,
        parsed: Sequence[Dict[str, Any]],
        segments: Sequence[str],
    ) -> List[TranslationUnit]:
        if not parsed:
            return [self._paragraph_unit(segment, "") for segment in segments]

        units: List[TranslationUnit] = []
        for i, entry in enumerate(parsed):
            fallback_original = segments[i] if i < len(segments) else ""
            units.append(
                ParagraphUnit(
                    type=BlockType.coerce(entry.get("type")),
                    original_text=_text(entry.get("original")) or fallback_original,
                    translated_text=_text(entry.get("translation")) or MISSING_TRANSLATION,
                    source_language=self.source_language,
                    target_language=self.target_language,
                )
            )
        return units

    def _paragraph_unit(self, original: str, translated: str) -> ParagraphUnit:
        return ParagraphUnit(
            original_text=original,
            translated_text=translated,
            source_language=self.source_language,
            target_language=self.target_language,
        )

    def build_result(
        self,
        units: List[TranslationUnit],
        mode: ResultMode,
        full_translated_text: Optional[str] = None,
    ) -> ChunkResult:
        """Wrap units into a ChunkResult with accumulated texts.

        Differential results carry no accumulated text since the originals
        are not part of the payload.
        """
        if not mode.includes_original:
            return ChunkResult(units=units, mode=mode)

        if full_translated_text is None:
            full_translated_text = "".join(u.translated_text for u in units)
        return ChunkResult(
            units=units,
            full_original_text="".join(u.original_text for u in units),
            full_translated_text=full_translated_text,
            mode=mode,
        )

    def fallback(self, chunk: Chunk, mode: ResultMode, sentinel: str) -> ChunkResult:
        """Build a result purely from the chunk's own segments.

        Every segment is kept with ``sentinel`` as its translation, so a
        failed chunk never loses or reorders input.
        """
        units: List[TranslationUnit]
        if mode == ResultMode.PARAGRAPH:
            units = [self._paragraph_unit(segment, sentinel) for segment in chunk.segments]
        else:
            units = self.map_units([], chunk.segments, mode, chunk.start_index)
            for unit in units:
                unit.translated_text = sentinel
        return self.build_result(units, mode, full_translated_text=sentinel)
