"""Translated page record."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from segtrans.models.database.base import Base


class PageTranslation(Base):
    """Final translation of one page, written once per request."""

    __tablename__ = "page_translations"

    page_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    note_id: Mapped[Optional[str]] = mapped_column(String(128))

    # Translation content
    translated_text: Mapped[str] = mapped_column(Text, default="")
    pinyin: Mapped[str] = mapped_column(Text, default="")
    units: Mapped[list] = mapped_column(JSON, default=list)

    # Metadata
    mode: Mapped[str] = mapped_column(String(20), default="segment")
    status: Mapped[str] = mapped_column(String(20), default="completed")
    processed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
