from herstories.models.category import Category
from herstories.models.chapter import Chapter
from herstories.models.chapter_access import ChapterAccess
from herstories.models.profile import Profile
from herstories.models.story import Story

__all__ = ["Category", "Chapter", "ChapterAccess", "Profile", "Story"]
