"""Lenient JSON parsing of model output.

Models regularly wrap JSON in markdown fences, use typographic quotes or
leave trailing commas. Parsing is staged: a strict parse of the
fence-stripped text, the same parse after repairing those slips, then a
salvage parse of the outermost bracket span. Repairs only run once the
strict parse has failed, so valid JSON is never rewritten. All functions
here are pure so they can be exercised without a model.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from ...errors import ParseError

logger = logging.getLogger(__name__)

_FENCE_START = re.compile(r"^```[a-zA-Z0-9_-]*\s*")
_FENCE_END = re.compile(r"\s*```$")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")
_BLANK_LINES = re.compile(r"\n(?:[ \t]*\n)+")

# A smart double quote acting as a JSON delimiter sits next to structural
# punctuation; quotes inside prose do not.
_SMART_DOUBLE = "\u201c\u201d\u201e\u201f"  # “ ” „ ‟
_DELIMITER_QUOTE = re.compile(
    rf"(?<=[\[{{:,])(\s*)[{_SMART_DOUBLE}]"
    rf"|[{_SMART_DOUBLE}](?=\s*[:,\]}}])"
)

_CLOSERS = {"[": "]", "{": "}"}


def strip_code_fence(text: str) -> str:
    """Remove a leading ```/```json marker and a trailing ``` marker."""
    text = text.strip()
    if text.startswith("```"):
        text = _FENCE_START.sub("", text, count=1)
        text = _FENCE_END.sub("", text)
    return text.strip()


def replace_delimiter_quotes(text: str) -> str:
    """Straighten smart double quotes used as JSON string delimiters."""
    return _DELIMITER_QUOTE.sub(lambda m: (m.group(1) or "") + '"', text)


def normalize_json_text(text: str) -> str:
    """Repair common model formatting slips.

    Strips code fences, straightens smart quotes that delimit strings,
    drops trailing commas before ``]``/``}`` and collapses blank lines.
    Only meant for text that already failed a strict parse.
    """
    text = strip_code_fence(text)
    text = replace_delimiter_quotes(text)
    text = _TRAILING_COMMA.sub(r"\1", text)
    text = _BLANK_LINES.sub("\n", text)
    return text.strip()


def salvage_json_span(text: str) -> Optional[str]:
    """Slice ``text`` to the outermost bracket pair.

    Starts at the first ``[`` or ``{`` and ends at the last matching closer.
    Returns None when no such span exists.
    """
    starts = [i for i in (text.find("["), text.find("{")) if i >= 0]
    if not starts:
        return None
    start = min(starts)
    end = text.rfind(_CLOSERS[text[start]])
    if end <= start:
        return None
    return text[start:end + 1]


def coerce_object_list(data: Any) -> List[Dict[str, Any]]:
    """Shape a decoded JSON value into a list of objects.

    A top-level object is unwrapped when it holds a list (e.g.
    ``{"results": [...]}``), otherwise treated as a one-element list.
    Non-object entries become empty objects so positions are preserved.

    Raises:
        ParseError: If the value is neither a list nor an object
    """
    if isinstance(data, dict):
        for value in data.values():
            if isinstance(value, list):
                data = value
                break
        else:
            return [data]
    if not isinstance(data, list):
        raise ParseError(f"Expected a JSON array, got {type(data).__name__}")
    return [item if isinstance(item, dict) else {} for item in data]


def _loads(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def parse_model_output(raw_text: str) -> List[Dict[str, Any]]:
    """Parse raw model output into a list of result objects.

    Args:
        raw_text: Text returned by the model

    Returns:
        Decoded list of objects

    Raises:
        ParseError: If the strict, repaired and salvage parses all fail;
            the message is the strict parse's error
    """
    stripped = strip_code_fence(raw_text or "")
    try:
        return coerce_object_list(json.loads(stripped))
    except json.JSONDecodeError as first_error:
        strict_error = first_error

    repaired = normalize_json_text(stripped)
    candidates = [repaired]
    for text in (stripped, repaired):
        span = salvage_json_span(text)
        if span is not None:
            candidates.append(span)
            candidates.append(normalize_json_text(span))

    logger.debug("Strict parse failed (%s), trying repairs", strict_error)
    for candidate in candidates:
        data = _loads(candidate)
        if data is not None:
            return coerce_object_list(data)

    raise ParseError(str(strict_error), raw_text) from strict_error
