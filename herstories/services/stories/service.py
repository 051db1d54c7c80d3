from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from herstories.models.profile import Profile
from herstories.models.story import Story
from herstories.schemas.stories import StoryHeader


class StoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_header(self, story_id: str) -> StoryHeader | None:
        result = await self.db.execute(
            select(Story.id, Story.title, Story.price_per_chapter, Story.author_id).where(Story.id == story_id)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return StoryHeader(
            id=row.id,
            title=row.title,
            price_per_chapter=row.price_per_chapter,
            author_id=row.author_id,
        )

    async def get_author_wallet(self, author_id: str) -> str | None:
        result = await self.db.execute(
            select(Profile.wallet_address).where(Profile.user_id == author_id)
        )
        return result.scalar_one_or_none() or None
