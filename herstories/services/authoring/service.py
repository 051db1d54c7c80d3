"""
StoryAuthoringService: stories and chapters in the database only (no chain calls).

add_chapter writes the chapter and the story counter in two commits. A failure
between them leaves the chapter stored and total_chapters one short.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from herstories.core.errors import ErrorKind, HerStoriesError, Result
from herstories.models.category import Category
from herstories.models.chapter import Chapter
from herstories.models.story import Story
from herstories.schemas.stories import ChapterCreate, StoryCreate
from herstories.services.purchases.store import PurchaseRecordStore

logger = logging.getLogger(__name__)


class StoryAuthoringService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_story(self, data: StoryCreate, author_id: str) -> Result[Story]:
        try:
            result = await self.db.execute(select(Category.id).where(Category.name == data.category))
            category_id = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            return Result.failure(HerStoriesError(ErrorKind.PERSISTENCE_FAILURE, "Failed to load categories", cause=e))

        if category_id is None:
            logger.warning("story_category_not_found", extra={"category": data.category, "author_id": author_id})
            return Result.failure(
                HerStoriesError(
                    ErrorKind.CATEGORY_NOT_FOUND,
                    f'Category "{data.category}" not found in database',
                )
            )

        story = Story(
            title=data.title,
            description=data.description,
            author_id=author_id,
            category_id=category_id,
            price_per_chapter=data.price_per_chapter,
            impact_percentage=data.impact_percentage,
            is_anonymous=data.is_anonymous,
            cover_image_url=data.cover_image_url,
            published=True,
            total_chapters=0,
        )
        self.db.add(story)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            return Result.failure(HerStoriesError(ErrorKind.PERSISTENCE_FAILURE, "Failed to save story", cause=e))

        logger.info(
            "story_created",
            extra={"story_id": story.id, "author_id": author_id, "category": data.category},
        )
        return Result.success(story)

    async def add_chapter(self, story_id: str, data: ChapterCreate, author_id: str) -> Result[Chapter]:
        try:
            story = await self.db.get(Story, story_id)
        except SQLAlchemyError as e:
            return Result.failure(HerStoriesError(ErrorKind.PERSISTENCE_FAILURE, "Failed to load story", cause=e))
        if story is None:
            return Result.failure(HerStoriesError(ErrorKind.STORY_NOT_FOUND, "Story not found"))
        if story.author_id != author_id:
            return Result.failure(
                HerStoriesError(ErrorKind.NOT_STORY_AUTHOR, "Only the story author can add chapters")
            )

        chapter_number = (story.total_chapters or 0) + 1
        chapter = Chapter(
            story_id=story_id,
            chapter_number=chapter_number,
            title=data.title,
            content=data.content,
            # 0 and None both fall back to the story price
            price=data.price or story.price_per_chapter,
            is_free=data.is_free,
            published=True,
        )
        self.db.add(chapter)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            return Result.failure(HerStoriesError(ErrorKind.PERSISTENCE_FAILURE, "Failed to create chapter", cause=e))

        chapter_id = chapter.id

        story.total_chapters = chapter_number
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            # chapter is stored, counter stays one short
            await self.db.rollback()
            logger.error(
                "story_chapter_count_update_failed",
                extra={"story_id": story_id, "chapter_id": chapter_id, "error": str(e)},
            )
            try:
                await self.db.refresh(chapter)
            except SQLAlchemyError as refresh_error:
                return Result.failure(
                    HerStoriesError(
                        ErrorKind.PERSISTENCE_FAILURE,
                        "Chapter saved but could not be reloaded",
                        cause=refresh_error,
                        detail={"chapter_id": chapter_id},
                    )
                )
        else:
            logger.info(
                "chapter_added",
                extra={"story_id": story_id, "chapter_id": chapter_id, "chapter_number": chapter_number},
            )
        return Result.success(chapter)

    async def check_chapter_access(self, chapter_id: str, user_id: str) -> Result[bool]:
        """Access check against the store, for callers without a view-layer purchase set."""
        try:
            chapter = await self.db.get(Chapter, chapter_id)
            if chapter is None:
                return Result.failure(HerStoriesError(ErrorKind.CHAPTER_NOT_FOUND, "Chapter not found"))
            if chapter.is_free:
                return Result.success(True)
            has_purchase = await PurchaseRecordStore(self.db).has_purchase(user_id, chapter_id)
        except SQLAlchemyError as e:
            return Result.failure(
                HerStoriesError(ErrorKind.PERSISTENCE_FAILURE, "Failed to check purchase status", cause=e)
            )
        return Result.success(has_purchase)
