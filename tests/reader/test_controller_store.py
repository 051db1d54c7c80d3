"""ChapterViewController on a real session: a record inserted behind the view's back."""
import unittest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from herstories.chain.base import PaymentBridge, PaymentReceipt
from herstories.core.errors import ErrorKind
from herstories.db.base import Base
from herstories.db.session import build_engine
from herstories.models import Chapter, Profile, Story
from herstories.reader.factory import create_chapter_view
from herstories.reader.notifications import Notifier
from herstories.schemas.users import UserSession
from herstories.services.purchases.store import PurchaseRecordStore

STORY_ID = "0000000a-0000-4000-8000-000000000000"
FREE_ID = "00000001-0000-4000-8000-000000000000"
PAID_ID = "00000002-0000-4000-8000-000000000000"
TX_HASH = "0x" + "34" * 32
BUYER = "0x" + "ab" * 20


class PaidBridge(PaymentBridge):
    def __init__(self, purchased=()):
        self.purchased = set(purchased)
        self.payments = 0

    def is_ready(self):
        return True

    @property
    def buyer_address(self):
        return BUYER

    async def submit_payment(self, story_ledger_id, chapter_ledger_id, author_address, value):
        self.payments += 1
        return PaymentReceipt(transaction_hash=TX_HASH, block_number=1)

    async def is_chapter_purchased(self, story_ledger_id, chapter_ledger_id, buyer_address):
        return chapter_ledger_id in self.purchased


class RecordingNotifier(Notifier):
    def __init__(self):
        self.sent = []

    def notify(self, notification):
        self.sent.append(notification)


USER = UserSession(user_id="reader-1")


@patch("herstories.reader.factory.get_purchase_lock", return_value=None)
class TestControllerWithStore(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = build_engine("sqlite+aiosqlite://", poolclass=StaticPool)
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.db = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)()
        self.db.add_all(
            [
                Profile(user_id="author-1", display_name="A", wallet_address="0x" + "cd" * 20),
                Story(
                    id=STORY_ID,
                    author_id="author-1",
                    title="Rising",
                    price_per_chapter=Decimal("5"),
                    published=True,
                    total_chapters=2,
                ),
                Chapter(
                    id=FREE_ID, story_id=STORY_ID, chapter_number=1, title="One",
                    content="free text", is_free=True, published=True,
                ),
                Chapter(
                    id=PAID_ID, story_id=STORY_ID, chapter_number=2, title="Two",
                    content="paid text", is_free=False, published=True, price=Decimal("0.001"),
                ),
            ]
        )
        await self.db.commit()
        self.notifier = RecordingNotifier()

    async def asyncTearDown(self):
        await self.db.close()
        await self.engine.dispose()

    async def _record_elsewhere(self):
        # same (user, chapter) recorded by another tab after this view loaded
        await PurchaseRecordStore(self.db).insert(
            USER.user_id,
            STORY_ID,
            PAID_ID,
            purchased_at=datetime.now(timezone.utc),
            blockchain_tx_hash="0x" + "56" * 32,
        )

    async def test_duplicate_record_returns_persist_failure(self, _):
        bridge = PaidBridge()
        controller = create_chapter_view(self.db, STORY_ID, USER, bridge, self.notifier)
        await controller.load()
        self.assertNotIn(PAID_ID, controller.purchased)
        await self._record_elsewhere()

        result = await controller.request_purchase(PAID_ID)

        self.assertFalse(result.ok)
        self.assertEqual(result.error.kind, ErrorKind.RECORD_PERSIST_FAILED)
        self.assertEqual(result.error.detail["tx_hash"], TX_HASH)
        self.assertEqual(bridge.payments, 1)
        self.assertNotIn(PAID_ID, controller.purchased)
        self.assertFalse(controller.is_purchasing(PAID_ID))
        self.assertEqual(self.notifier.sent[-1].error_kind, "record_persist_failed")

        views = controller.render()
        self.assertEqual([v.id for v in views], [FREE_ID, PAID_ID])
        self.assertEqual(views[1].title, "Two")

        self.assertTrue(await controller.refresh_purchases())
        self.assertIn(PAID_ID, controller.purchased)

    async def test_reconcile_skips_duplicate_insert(self, _):
        bridge = PaidBridge(purchased={2})
        controller = create_chapter_view(self.db, STORY_ID, USER, bridge, self.notifier)
        await controller.load()
        await self._record_elsewhere()

        restored = await controller.orchestrator.reconcile(USER, controller.story, controller.chapters, set())

        self.assertEqual(restored, [])
        self.assertEqual(len(controller.render()), 2)
        self.assertEqual(
            await PurchaseRecordStore(self.db).list_purchased_chapter_ids(USER.user_id, STORY_ID), {PAID_ID}
        )
