"""Translation unit models.

One unit describes the outcome for one segment (or, in paragraph mode, one
model-defined block). Each encoding has its own statically enumerated shape;
responses are serialized with camelCase keys.
"""

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BlockType(str, Enum):
    """Educational block tag assigned to paragraph-mode units."""

    TITLE = "title"
    INSTRUCTION = "instruction"
    PASSAGE = "passage"
    VOCABULARY = "vocabulary"
    QUESTION = "question"
    CHOICES = "choices"
    ANSWER = "answer"
    DIALOGUE = "dialogue"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: object) -> "BlockType":
        """Map a model-supplied tag onto the enumeration."""
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.UNKNOWN


class UnitModel(BaseModel):
    """Base for all unit shapes (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class SegmentUnit(UnitModel):
    """Full encoding: original text inlined with the translation."""

    original_text: str
    translated_text: str = ""
    pinyin: str = ""
    source_language: str
    target_language: str


class ParagraphUnit(UnitModel):
    """Paragraph-mode block: typed, never carries pinyin."""

    type: BlockType = BlockType.UNKNOWN
    original_text: str
    translated_text: str = ""
    source_language: str
    target_language: str


class DifferentialUnit(UnitModel):
    """Differential encoding: global index instead of the original text."""

    index: int = Field(..., ge=0)
    translated_text: str = ""
    pinyin: str = ""


TranslationUnit = Union[SegmentUnit, ParagraphUnit, DifferentialUnit]
