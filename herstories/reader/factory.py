from sqlalchemy.ext.asyncio import AsyncSession

from herstories.chain.base import PaymentBridge
from herstories.reader.controller import ChapterViewController
from herstories.reader.notifications import Notifier
from herstories.schemas.users import UserSession
from herstories.services.chapters.service import ChapterService
from herstories.services.purchases.lock import get_purchase_lock
from herstories.services.purchases.service import PurchaseOrchestrator
from herstories.services.purchases.store import PurchaseRecordStore
from herstories.services.stories.service import StoryService


def create_chapter_view(
    db: AsyncSession,
    story_id: str,
    user: UserSession | None,
    bridge: PaymentBridge,
    notifier: Notifier | None = None,
) -> ChapterViewController:
    """Wire a controller for one page view; call load() on it before rendering."""
    store = PurchaseRecordStore(db)
    stories = StoryService(db)
    orchestrator = PurchaseOrchestrator(store, bridge, stories, lock=get_purchase_lock())
    return ChapterViewController(
        story_id,
        user,
        chapters=ChapterService(db),
        purchases=store,
        stories=stories,
        orchestrator=orchestrator,
        notifier=notifier,
    )
