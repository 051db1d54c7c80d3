"""Tests for ChapterViewController: access, purchase flow, refresh, rendering."""
import asyncio
import unittest
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import OperationalError

from herstories.chain.base import PaymentBridge, PaymentReceipt
from herstories.core.errors import ErrorKind
from herstories.models.chapter_access import ChapterAccess
from herstories.paywall.models import AccessBadge
from herstories.reader.controller import ChapterViewController
from herstories.reader.notifications import NotificationLevel, Notifier
from herstories.schemas.stories import StoryHeader
from herstories.schemas.users import UserSession
from herstories.services.purchases.service import PurchaseOrchestrator

STORY_ID = "0000000a-0000-4000-8000-000000000000"
FREE_ID = "00000001-0000-4000-8000-000000000000"
PAID_ID = "00000002-0000-4000-8000-000000000000"
TX_HASH = "0x" + "12" * 32
BUYER = "0x" + "ab" * 20


class FakeBridge(PaymentBridge):
    def __init__(self, ready=True, gate=None, purchased=()):
        self.ready = ready
        self.gate = gate
        self.purchased = set(purchased)
        self.payments = []

    def is_ready(self):
        return self.ready

    @property
    def buyer_address(self):
        return BUYER if self.ready else None

    async def submit_payment(self, story_ledger_id, chapter_ledger_id, author_address, value):
        self.payments.append((story_ledger_id, chapter_ledger_id, value))
        if self.gate is not None:
            await self.gate.wait()
        return PaymentReceipt(transaction_hash=TX_HASH)

    async def is_chapter_purchased(self, story_ledger_id, chapter_ledger_id, buyer_address):
        return chapter_ledger_id in self.purchased


class RecordingNotifier(Notifier):
    def __init__(self):
        self.sent = []

    def notify(self, notification):
        self.sent.append(notification)


def _chapters():
    return [
        SimpleNamespace(id=FREE_ID, chapter_number=1, title="One", content="free text", is_free=True, price=None),
        SimpleNamespace(
            id=PAID_ID, chapter_number=2, title="Two", content="paid text", is_free=False, price=Decimal("0.001")
        ),
    ]


def _store(purchased=()):
    store = MagicMock()
    store.list_purchased_chapter_ids = AsyncMock(side_effect=lambda user_id, story_id: set(purchased))

    async def insert(user_id, story_id, chapter_id, *, purchased_at, blockchain_tx_hash):
        return ChapterAccess(
            user_id=user_id,
            story_id=story_id,
            chapter_id=chapter_id,
            purchased_at=purchased_at,
            blockchain_tx_hash=blockchain_tx_hash,
        )

    store.insert = AsyncMock(side_effect=insert)
    return store


def _stories():
    stories = MagicMock()
    stories.get_header = AsyncMock(
        return_value=StoryHeader(id=STORY_ID, title="Rising", price_per_chapter=Decimal("5"), author_id="author-1")
    )
    stories.get_author_wallet = AsyncMock(return_value="0x" + "cd" * 20)
    return stories


def _controller(user, bridge, store=None, reconcile=False):
    store = store or _store()
    stories = _stories()
    chapters = MagicMock()
    chapters.list_published = AsyncMock(return_value=_chapters())
    notifier = RecordingNotifier()
    controller = ChapterViewController(
        STORY_ID,
        user,
        chapters=chapters,
        purchases=store,
        stories=stories,
        orchestrator=PurchaseOrchestrator(store, bridge, stories),
        notifier=notifier,
        reconcile_on_refresh=reconcile,
    )
    return controller, store, notifier


USER = UserSession(user_id="reader-1")


class TestAnonymousReader(unittest.IsolatedAsyncioTestCase):
    async def test_free_readable_paid_locked_purchase_needs_sign_in(self):
        bridge = FakeBridge()
        controller, store, notifier = _controller(None, bridge)
        await controller.load()
        free, paid = controller.chapters

        self.assertTrue(controller.can_access(free))
        self.assertFalse(controller.can_access(paid))

        result = await controller.request_purchase(PAID_ID)

        self.assertEqual(result.error.kind, ErrorKind.NOT_AUTHENTICATED)
        self.assertEqual(bridge.payments, [])
        store.list_purchased_chapter_ids.assert_not_called()
        self.assertEqual(notifier.sent[-1].level, NotificationLevel.ERROR)
        self.assertEqual(notifier.sent[-1].title, "Sign in required")


class TestPurchase(unittest.IsolatedAsyncioTestCase):
    async def test_wallet_disconnected(self):
        controller, store, notifier = _controller(USER, FakeBridge(ready=False))
        await controller.load()

        result = await controller.request_purchase(PAID_ID)

        self.assertEqual(result.error.kind, ErrorKind.WALLET_NOT_READY)
        self.assertEqual(len(controller.purchased), 0)
        self.assertFalse(controller.is_purchasing(PAID_ID))
        store.insert.assert_not_called()

    async def test_success_unlocks_and_blocks_second_purchase(self):
        bridge = FakeBridge()
        controller, store, notifier = _controller(USER, bridge)
        await controller.load()
        paid = controller.get_chapter(PAID_ID)

        result = await controller.request_purchase(PAID_ID)

        self.assertTrue(result.ok)
        self.assertIn(PAID_ID, controller.purchased)
        self.assertTrue(controller.can_access(paid))
        self.assertEqual(bridge.payments, [(10, 2, Decimal("0.001"))])
        self.assertEqual(notifier.sent[-1].level, NotificationLevel.SUCCESS)
        self.assertEqual(notifier.sent[-1].description, f"Transaction: {TX_HASH[:10]}...")
        self.assertTrue(notifier.sent[-1].url.endswith(f"/tx/{TX_HASH}"))

        self.assertIsNone(await controller.request_purchase(PAID_ID))
        self.assertEqual(len(bridge.payments), 1)
        self.assertEqual(store.insert.await_count, 1)

    async def test_free_chapter_never_purchased(self):
        bridge = FakeBridge()
        controller, _, _ = _controller(USER, bridge)
        await controller.load()

        self.assertIsNone(await controller.request_purchase(FREE_ID))
        self.assertEqual(bridge.payments, [])

    async def test_in_flight_guard(self):
        gate = asyncio.Event()
        bridge = FakeBridge(gate=gate)
        controller, _, _ = _controller(USER, bridge)
        await controller.load()

        first = asyncio.create_task(controller.request_purchase(PAID_ID))
        await asyncio.sleep(0)
        while not bridge.payments:
            await asyncio.sleep(0)

        self.assertTrue(controller.is_purchasing(PAID_ID))
        self.assertTrue(controller.render()[1].purchasing)
        self.assertIsNone(await controller.request_purchase(PAID_ID))

        gate.set()
        result = await first
        self.assertTrue(result.ok)
        self.assertFalse(controller.is_purchasing(PAID_ID))
        self.assertEqual(len(bridge.payments), 1)

    async def test_unknown_chapter(self):
        controller, _, notifier = _controller(USER, FakeBridge())
        await controller.load()

        result = await controller.request_purchase("ffffffff-0000-4000-8000-000000000000")

        self.assertEqual(result.error.kind, ErrorKind.CHAPTER_NOT_FOUND)
        self.assertEqual(notifier.sent[-1].error_kind, "chapter_not_found")


class TestRefresh(unittest.IsolatedAsyncioTestCase):
    async def test_refresh_purchases_idempotent(self):
        controller, _, _ = _controller(USER, FakeBridge(), store=_store({PAID_ID}))
        await controller.load()

        first = controller.purchased.snapshot()
        self.assertTrue(await controller.refresh_purchases())
        self.assertEqual(controller.purchased.snapshot(), first)
        self.assertEqual(first, frozenset({PAID_ID}))

    async def test_refresh_failure_keeps_state(self):
        controller, store, notifier = _controller(USER, FakeBridge(), store=_store({PAID_ID}))
        await controller.load()
        store.list_purchased_chapter_ids.side_effect = OperationalError("select", {}, Exception("down"))
        controller.chapter_service.list_published.side_effect = OperationalError("select", {}, Exception("down"))

        self.assertFalse(await controller.refresh_purchases())
        self.assertFalse(await controller.refresh_chapters())

        self.assertEqual(controller.purchased.snapshot(), frozenset({PAID_ID}))
        self.assertEqual(len(controller.chapters), 2)
        self.assertEqual(notifier.sent[-1].error_kind, "persistence_failure")

    async def test_missing_story(self):
        controller, _, notifier = _controller(USER, FakeBridge())
        controller.story_service.get_header.return_value = None
        await controller.load()

        self.assertIsNone(controller.story)
        self.assertEqual(notifier.sent[0].error_kind, "story_not_found")
        result = await controller.request_purchase(PAID_ID)
        self.assertEqual(result.error.kind, ErrorKind.STORY_NOT_FOUND)

    async def test_sign_out_clears_purchases(self):
        controller, _, _ = _controller(USER, FakeBridge(), store=_store({PAID_ID}))
        await controller.load()

        await controller.set_user(None)

        self.assertEqual(len(controller.purchased), 0)

    async def test_reconcile_on_refresh(self):
        bridge = FakeBridge(purchased={2})
        controller, store, _ = _controller(USER, bridge, reconcile=True)

        await controller.load()

        self.assertIn(PAID_ID, controller.purchased)
        self.assertIsNone(store.insert.call_args.kwargs["blockchain_tx_hash"])


class TestRender(unittest.IsolatedAsyncioTestCase):
    async def test_locked_content_hidden_when_expanded(self):
        controller, _, _ = _controller(USER, FakeBridge())
        await controller.load()

        self.assertTrue(controller.toggle_expanded(FREE_ID))
        self.assertTrue(controller.toggle_expanded(PAID_ID))
        free_view, paid_view = controller.render()

        self.assertEqual(free_view.content, "free text")
        self.assertEqual(free_view.access.badge, AccessBadge.FREE)
        self.assertTrue(paid_view.expanded)
        self.assertIsNone(paid_view.content)
        self.assertEqual(paid_view.access.badge, AccessBadge.LOCKED)

    async def test_collapse(self):
        controller, _, _ = _controller(USER, FakeBridge())
        await controller.load()

        controller.toggle_expanded(FREE_ID)
        self.assertFalse(controller.toggle_expanded(FREE_ID))
        self.assertIsNone(controller.render()[0].content)

    async def test_counts(self):
        controller, _, _ = _controller(USER, FakeBridge())
        await controller.load()
        self.assertEqual(controller.counts(), (1, 1))
