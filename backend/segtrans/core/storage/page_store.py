"""Best-effort persistence of finished page translations."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from segtrans.core.translation.models.result import AggregateResult
from segtrans.models.database.page_translation import PageTranslation

logger = logging.getLogger(__name__)


class PageStore:
    """Writes a request's final result to the page it belongs to."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def persist(
        self,
        page_id: str,
        aggregate: AggregateResult,
        note_id: Optional[str] = None,
    ) -> bool:
        """Upsert the page's translation.

        Failures are logged and reported as False; they never affect the
        translation response that was already computed.

        Returns:
            True if the page was written
        """
        units = [unit.to_dict() for unit in aggregate.units]
        pinyin = " ".join(u["pinyin"] for u in units if u.get("pinyin"))
        try:
            async with self._session_maker() as session:
                await session.merge(
                    PageTranslation(
                        page_id=page_id,
                        note_id=note_id,
                        translated_text=aggregate.full_translated_text or "",
                        pinyin=pinyin,
                        units=units,
                        mode=aggregate.mode.value,
                        status="completed",
                        processed_at=datetime.utcnow(),
                    )
                )
                await session.commit()
        except Exception as e:
            logger.error(f"Failed to update page {page_id}: {e}")
            return False

        logger.info(f"Page {page_id} updated with translation")
        return True

    async def get(self, page_id: str) -> Optional[PageTranslation]:
        """Load a stored page translation."""
        async with self._session_maker() as session:
            return await session.get(PageTranslation, page_id)
