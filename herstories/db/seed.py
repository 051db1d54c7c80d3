"""
Default story categories. create_story resolves categories by name, so a fresh
database needs these rows before any story can be created.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from herstories.models.category import Category

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (
    ("Survivor Stories", "Stories of resilience and overcoming challenges"),
    ("Life Lessons", "Wisdom and insights from lived experiences"),
    ("Fiction & Novels", "Creative fiction and storytelling"),
    ("Poetry & Reflections", "Poetry and personal reflections"),
)


async def seed_categories(db: AsyncSession) -> int:
    """Insert missing default categories; returns how many were added."""
    result = await db.execute(select(Category.name))
    existing = set(result.scalars().all())
    added = 0
    for name, description in DEFAULT_CATEGORIES:
        if name in existing:
            continue
        db.add(Category(name=name, description=description))
        added += 1
    if added:
        await db.commit()
    logger.info("categories_seeded", extra={"count": added})
    return added
