from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from herstories.models.chapter import Chapter
from herstories.schemas.stories import ChapterRead


class ChapterService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_published(self, story_id: str) -> list[ChapterRead]:
        """Published chapters of a story, chapter_number ascending."""
        result = await self.db.execute(
            select(Chapter)
            .where(Chapter.story_id == story_id, Chapter.published.is_(True))
            .order_by(Chapter.chapter_number.asc())
        )
        return [ChapterRead.model_validate(c) for c in result.scalars().all()]
