"""Error taxonomy for the translation engine.

Request-level errors (configuration, validation) propagate to the caller.
Chunk-level errors (model call, parse) are recovered by the pipeline into
fallback results and never escape a chunk boundary.
"""

from typing import Optional


class TranslationError(Exception):
    """Base class for all translation engine errors."""


class ConfigurationError(TranslationError):
    """The model client cannot be built (e.g. missing credential)."""


class ValidationError(TranslationError):
    """A request is missing required fields or carries invalid values."""


class ModelCallError(TranslationError):
    """A model completion failed (network, timeout or vendor error)."""

    def __init__(self, message: str, *, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out


class ParseError(TranslationError):
    """Model output could not be parsed into a list of objects."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text
