"""Result persistence."""

from .page_store import PageStore

__all__ = ["PageStore"]
