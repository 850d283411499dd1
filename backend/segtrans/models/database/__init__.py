"""Database models package."""

from segtrans.models.database.base import Base, async_session_maker, init_db
from segtrans.models.database.page_translation import PageTranslation

__all__ = [
    "Base",
    "async_session_maker",
    "init_db",
    "PageTranslation",
]
