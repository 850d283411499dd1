"""Prompt engine for chunk translation.

This module builds the system/user prompt pair for one chunk. Each
processing mode has its own prompt strategy; every system prompt embeds an
explicit example of the JSON array the model must return.
"""

import json
from typing import Dict, Optional, Type

from ..models.chunk import Chunk, ProcessingMode
from ..models.prompt import CompletionOptions, Message, PromptBundle

LANGUAGE_NAMES = {
    "zh": "Chinese",
    "zh-cn": "Chinese",
    "zh-tw": "Traditional Chinese",
    "en": "English",
    "ja": "Japanese",
    "ko": "Korean",
}

BLOCK_TYPES = (
    "title",
    "instruction",
    "passage",
    "vocabulary",
    "question",
    "choices",
    "answer",
    "dialogue",
    "unknown",
)

OUTPUT_RULES = (
    "Output rules:\n"
    "- Return ONLY a JSON array, nothing before or after it.\n"
    "- Do not wrap the array in markdown code fences.\n"
    "- Use straight double quotes (\"), never smart quotes.\n"
    "- No trailing commas."
)


def language_name(code: str) -> str:
    """Human-readable language name for a language code."""
    return LANGUAGE_NAMES.get(code.lower(), code)


class PromptStrategy:
    """Builds prompts for one processing mode."""

    def build(
        self,
        chunk: Chunk,
        source_language: str,
        target_language: str,
        need_pinyin: bool,
        differential: bool,
    ) -> tuple[str, str]:
        raise NotImplementedError


class SegmentPromptStrategy(PromptStrategy):
    """One result object per input segment, same order and count."""

    def build(self, chunk, source_language, target_language, need_pinyin, differential):
        source = language_name(source_language)
        target = language_name(target_language)

        example: Dict[str, str] = {}
        if not differential:
            example["original"] = "cleaned source text"
        if need_pinyin:
            example["pinyin"] = "pinyin with tone marks"
        example["translation"] = f"{target} translation"
        schema = json.dumps([example], ensure_ascii=False)

        system_prompt = (
            f"You are a {source} language teacher. "
            f"Translate {source} text segments to {target}"
            f"{' and provide pinyin' if need_pinyin else ''}.\n"
            f"Return a JSON array with exactly this format: {schema}\n"
            f"Return exactly one object per input segment, "
            f"in the same order as the input ({len(chunk)} objects).\n"
            f"{OUTPUT_RULES}"
        )
        user_prompt = (
            f"Translate these {source} text segments to {target}"
            f"{' with pinyin' if need_pinyin else ''}:\n"
            f"{json.dumps(list(chunk.segments), ensure_ascii=False)}\n\n"
            "Return as JSON array maintaining the exact same order."
        )
        return system_prompt, user_prompt


class ParagraphPromptStrategy(PromptStrategy):
    """Typed educational blocks; the model may re-segment the text."""

    def build(self, chunk, source_language, target_language, need_pinyin, differential):
        source = language_name(source_language)
        target = language_name(target_language)
        text = "\n".join(chunk.segments)
        schema = json.dumps(
            [{"type": "passage", "original": "source block", "translation": f"{target} translation"}],
            ensure_ascii=False,
        )

        system_prompt = (
            f"You are a {source} language teacher preparing study material. "
            f"Split the given {source} text into semantically meaningful blocks "
            f"and translate each block to {target}.\n"
            f"Classify every block with one type from: {', '.join(BLOCK_TYPES)}.\n"
            "You may return a different number of blocks than input lines; "
            "keep the blocks in reading order and do not drop any text.\n"
            f"Return a JSON array with exactly this format: {schema}\n"
            f"{OUTPUT_RULES}"
        )
        user_prompt = (
            f"Split and translate the following {source} text to {target}:\n\n"
            f"{text}\n\n"
            "Return as JSON array of blocks in reading order."
        )
        return system_prompt, user_prompt


class PromptEngine:
    """Router from processing mode to prompt strategy."""

    # Strategy registry: mode -> strategy class
    _strategies: Dict[ProcessingMode, Type[PromptStrategy]] = {
        ProcessingMode.SEGMENT: SegmentPromptStrategy,
        ProcessingMode.PARAGRAPH: ParagraphPromptStrategy,
    }

    @classmethod
    def get_strategy(cls, mode: ProcessingMode) -> PromptStrategy:
        """Get strategy instance for a mode.

        Raises:
            ValueError: If no strategy is registered for the mode
        """
        strategy_class = cls._strategies.get(mode)
        if not strategy_class:
            raise ValueError(f"No strategy registered for mode: {mode}")
        return strategy_class()

    @classmethod
    def build(
        cls,
        chunk: Chunk,
        mode: ProcessingMode,
        need_pinyin: bool = True,
        differential: bool = False,
        source_language: str = "zh-CN",
        target_language: str = "ko",
        options: Optional[CompletionOptions] = None,
    ) -> PromptBundle:
        """Build the prompt bundle for one chunk.

        Deterministic for the same inputs. Paragraph mode never asks for
        pinyin and ignores ``differential``.

        Args:
            chunk: Chunk to translate
            mode: Processing mode selecting the output schema
            need_pinyin: Whether segment-mode results should carry pinyin
            differential: Whether to leave the original text out of the schema
            source_language: Source language code
            target_language: Target language code
            options: Completion options attached to the bundle

        Returns:
            PromptBundle ready for the model client
        """
        strategy = cls.get_strategy(mode)
        if mode == ProcessingMode.PARAGRAPH:
            need_pinyin, differential = False, False

        system_prompt, user_prompt = strategy.build(
            chunk, source_language, target_language, need_pinyin, differential
        )
        return PromptBundle(
            messages=[
                Message(role="system", content=system_prompt),
                Message(role="user", content=user_prompt),
            ],
            options=options or CompletionOptions(),
            mode=mode.value,
            estimated_input_tokens=(len(system_prompt) + len(user_prompt)) // 3,
        )
