"""
ChapterViewController: state behind one chapter list view of one story.

Holds the published chapters, the purchased-id cache, the expanded-id set and the
per-chapter in-flight purchase guard. The purchased set is refreshed from the
store and appended after a successful purchase; the store stays the source of truth.
One instance per page view, never shared.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from herstories.chain.config import tx_explorer_url
from herstories.core.config import settings
from herstories.core.errors import ErrorKind, HerStoriesError, Result
from herstories.paywall.access import can_access, decide_access
from herstories.paywall.models import AccessDecision
from herstories.reader.notifications import LoggingNotifier, Notification, NotificationLevel, Notifier
from herstories.reader.state import ChapterIdSet
from herstories.schemas.stories import ChapterRead, StoryHeader
from herstories.schemas.users import UserSession
from herstories.services.chapters.service import ChapterService
from herstories.services.purchases.service import PurchaseOrchestrator, PurchaseResult
from herstories.services.purchases.store import PurchaseRecordStore
from herstories.services.stories.service import StoryService

logger = logging.getLogger(__name__)


class ChapterView(BaseModel):
    """One rendered row; content is None unless expanded and readable."""

    id: str
    chapter_number: int
    title: str
    access: AccessDecision
    expanded: bool
    purchasing: bool
    content: str | None = None

    model_config = {"frozen": True}


class ChapterViewController:
    def __init__(
        self,
        story_id: str,
        user: UserSession | None,
        *,
        chapters: ChapterService,
        purchases: PurchaseRecordStore,
        stories: StoryService,
        orchestrator: PurchaseOrchestrator,
        notifier: Notifier | None = None,
        reconcile_on_refresh: bool | None = None,
    ) -> None:
        self.story_id = story_id
        self.user = user
        self.chapter_service = chapters
        self.purchase_store = purchases
        self.story_service = stories
        self.orchestrator = orchestrator
        self.notifier = notifier or LoggingNotifier()
        self.reconcile_on_refresh = (
            settings.reconcile_on_refresh if reconcile_on_refresh is None else reconcile_on_refresh
        )

        self.story: StoryHeader | None = None
        self.chapters: list[ChapterRead] = []
        self.purchased = ChapterIdSet()
        self.expanded = ChapterIdSet()
        self.purchasing = ChapterIdSet()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Mount: story header, chapter list, then the user's purchases."""
        await self.refresh_story()
        await self.refresh_chapters()
        await self.refresh_purchases()

    async def set_user(self, user: UserSession | None) -> None:
        self.user = user
        self.purchased.replace(())
        await self.refresh_purchases()

    async def refresh_story(self) -> bool:
        try:
            story = await self.story_service.get_header(self.story_id)
        except SQLAlchemyError as e:
            self._notify_error(HerStoriesError(ErrorKind.PERSISTENCE_FAILURE, "Failed to load story", cause=e))
            return False
        if story is None:
            self._notify_error(HerStoriesError(ErrorKind.STORY_NOT_FOUND, "Story information not available"))
            return False
        self.story = story
        return True

    async def refresh_chapters(self) -> bool:
        try:
            chapters = await self.chapter_service.list_published(self.story_id)
        except SQLAlchemyError as e:
            self._notify_error(HerStoriesError(ErrorKind.PERSISTENCE_FAILURE, "Failed to load chapters", cause=e))
            return False
        self.chapters = chapters
        return True

    async def refresh_purchases(self) -> bool:
        if self.user is None:
            self.purchased.replace(())
            return True
        try:
            ids = await self.purchase_store.list_purchased_chapter_ids(self.user.user_id, self.story_id)
        except SQLAlchemyError as e:
            self._notify_error(HerStoriesError(ErrorKind.PERSISTENCE_FAILURE, "Failed to load purchases", cause=e))
            return False

        if self.reconcile_on_refresh and self.story is not None:
            restored = await self.orchestrator.reconcile(self.user, self.story, self.chapters, ids)
            ids |= {r.chapter_id for r in restored}

        self.purchased.replace(ids)
        return True

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get_chapter(self, chapter_id: str) -> ChapterRead | None:
        return next((c for c in self.chapters if c.id == chapter_id), None)

    def can_access(self, chapter: ChapterRead) -> bool:
        return can_access(chapter, self.purchased)

    def access_decision(self, chapter: ChapterRead) -> AccessDecision:
        price = self.story.price_per_chapter if self.story else None
        return decide_access(chapter, self.purchased, price)

    def is_purchasing(self, chapter_id: str) -> bool:
        return chapter_id in self.purchasing

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def request_purchase(self, chapter_id: str) -> PurchaseResult | None:
        """
        Returns None when the request is ignored: a purchase for this chapter is
        still outstanding or the chapter is already readable.
        """
        if chapter_id in self.purchasing:
            return None
        chapter = self.get_chapter(chapter_id)
        if chapter is None:
            error = HerStoriesError(ErrorKind.CHAPTER_NOT_FOUND, "Chapter not found")
            self._notify_error(error)
            return Result.failure(error)
        if self.can_access(chapter):
            return None
        if self.story is None:
            error = HerStoriesError(ErrorKind.STORY_NOT_FOUND, "Story information not available")
            self._notify_error(error)
            return Result.failure(error)

        self.purchasing.add(chapter_id)
        try:
            result = await self.orchestrator.purchase(
                self.user, self.story, chapter, self._price_quote(chapter)
            )
        finally:
            self.purchasing.discard(chapter_id)

        if not result.ok:
            self._notify_error(result.error)
            return result

        self.purchased.add(chapter_id)
        tx_hash = result.value.blockchain_tx_hash or ""
        self.notifier.notify(
            Notification(
                level=NotificationLevel.SUCCESS,
                title="Chapter purchased on blockchain",
                description=f"Transaction: {tx_hash[:10]}...",
                url=tx_explorer_url(tx_hash) if tx_hash else None,
            )
        )
        return result

    def toggle_expanded(self, chapter_id: str) -> bool:
        """No access check: locked chapters stay hidden in render()."""
        return self.expanded.toggle(chapter_id)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def visible_content(self, chapter: ChapterRead) -> str | None:
        if chapter.id in self.expanded and self.can_access(chapter):
            return chapter.content
        return None

    def render(self) -> list[ChapterView]:
        return [
            ChapterView(
                id=chapter.id,
                chapter_number=chapter.chapter_number,
                title=chapter.title,
                access=self.access_decision(chapter),
                expanded=chapter.id in self.expanded,
                purchasing=chapter.id in self.purchasing,
                content=self.visible_content(chapter),
            )
            for chapter in self.chapters
        ]

    def counts(self) -> tuple[int, int]:
        """(free, paid) chapter counts for the list header."""
        free = sum(1 for c in self.chapters if c.is_free)
        return free, len(self.chapters) - free

    def _price_quote(self, chapter: ChapterRead) -> Decimal:
        return Decimal(str(chapter.price or self.story.price_per_chapter))

    def _notify_error(self, error: HerStoriesError) -> None:
        self.notifier.notify(Notification.from_error(error))
