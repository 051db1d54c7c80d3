"""
PurchaseRecordStore: durable entitlement records (user_chapter_access).
The unique (user_id, chapter_id) constraint is the final arbiter of duplicates.
"""
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from herstories.models.chapter_access import ChapterAccess

logger = logging.getLogger(__name__)


class PurchaseRecordStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_purchased_chapter_ids(self, user_id: str, story_id: str) -> set[str]:
        result = await self.db.execute(
            select(ChapterAccess.chapter_id).where(
                ChapterAccess.user_id == user_id,
                ChapterAccess.story_id == story_id,
            )
        )
        return set(result.scalars().all())

    async def has_purchase(self, user_id: str, chapter_id: str) -> bool:
        result = await self.db.execute(
            select(ChapterAccess.id).where(
                ChapterAccess.user_id == user_id,
                ChapterAccess.chapter_id == chapter_id,
            )
        )
        return result.first() is not None

    async def insert(
        self,
        user_id: str,
        story_id: str,
        chapter_id: str,
        *,
        purchased_at: datetime,
        blockchain_tx_hash: str | None,
    ) -> ChapterAccess:
        """
        Insert and commit one record; re-raises on failure. The insert runs in a
        savepoint: a duplicate (user_id, chapter_id) rolls back the savepoint only
        and leaves objects loaded in this session unexpired.
        """
        record = ChapterAccess(
            user_id=user_id,
            story_id=story_id,
            chapter_id=chapter_id,
            purchased_at=purchased_at,
            blockchain_tx_hash=blockchain_tx_hash,
        )
        async with self.db.begin_nested():
            self.db.add(record)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(record)
        return record
