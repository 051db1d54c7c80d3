"""
PurchaseOrchestrator: on-chain chapter purchase followed by the durable purchase record.

Responsibilities:
- Preconditions (session, wallet, self-purchase, author wallet)
- Payment submission through the PaymentBridge and waiting for the receipt
- Persisting the PurchaseRecord with the transaction hash
- Reconciliation of paid-but-unrecorded chapters

Every failure is returned as a tagged Result; nothing is retried here.
"""
import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Container, Iterable

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from herstories.chain.base import PaymentBridge
from herstories.chain.failure_types import FAILURE_MESSAGES, classify_payment_failure
from herstories.chain.ids import InvalidLedgerId, to_ledger_id
from herstories.core.errors import ErrorKind, HerStoriesError, Result
from herstories.models.chapter_access import ChapterAccess
from herstories.paywall.audit import record_purchase
from herstories.schemas.stories import StoryHeader
from herstories.schemas.users import UserSession
from herstories.services.purchases.lock import PurchaseLock
from herstories.services.purchases.store import PurchaseRecordStore
from herstories.services.stories.service import StoryService

logger = logging.getLogger(__name__)

PurchaseResult = Result[ChapterAccess]


class PurchaseOrchestrator:
    def __init__(
        self,
        store: PurchaseRecordStore,
        bridge: PaymentBridge,
        stories: StoryService,
        *,
        lock: PurchaseLock | None = None,
    ) -> None:
        self.store = store
        self.bridge = bridge
        self.stories = stories
        self.lock = lock

    async def purchase(
        self,
        user: UserSession | None,
        story: StoryHeader,
        chapter: Any,
        price_quote: Decimal,
    ) -> PurchaseResult:
        """
        Caller checks access first (can_access); the store is not re-read before paying.
        """
        started = time.monotonic()
        user_id = user.user_id if user else None
        chapter_id = chapter.id
        try:
            record = await self._purchase(user, story, chapter_id, price_quote)
        except HerStoriesError as e:
            logger.warning(
                "chapter_purchase_failed",
                extra={
                    "user_id": user_id,
                    "story_id": story.id,
                    "chapter_id": chapter_id,
                    "error_kind": e.kind.value,
                    "failure_type": e.detail.get("failure_type"),
                    "tx_hash": e.detail.get("tx_hash"),
                    "error": str(e),
                },
            )
            return Result.failure(e)

        record_purchase(
            user_id,
            story.id,
            chapter_id,
            value=price_quote,
            tx_hash=record.blockchain_tx_hash,
            latency_seconds=round(time.monotonic() - started, 3),
        )
        return Result.success(record)

    async def _purchase(
        self,
        user: UserSession | None,
        story: StoryHeader,
        chapter_id: str,
        price_quote: Decimal,
    ) -> ChapterAccess:
        if user is None:
            raise HerStoriesError(ErrorKind.NOT_AUTHENTICATED, "Please sign in to purchase chapters")
        if not self.bridge.is_ready():
            raise HerStoriesError(ErrorKind.WALLET_NOT_READY, "Connect your wallet to purchase chapters")
        if user.user_id == story.author_id:
            raise HerStoriesError(
                ErrorKind.OWN_CHAPTER, "You cannot purchase chapters from your own story"
            )

        try:
            author_wallet = await self.stories.get_author_wallet(story.author_id)
        except SQLAlchemyError as e:
            raise HerStoriesError(ErrorKind.PERSISTENCE_FAILURE, "Failed to load author profile", cause=e)
        if not author_wallet:
            raise HerStoriesError(
                ErrorKind.AUTHOR_WALLET_MISSING,
                "Author hasn't set their wallet address yet. Please contact the author.",
            )

        try:
            story_ledger_id = to_ledger_id(story.id)
            chapter_ledger_id = to_ledger_id(chapter_id)
        except InvalidLedgerId as e:
            raise HerStoriesError(ErrorKind.PAYMENT_FAILED, str(e), cause=e)

        if self.lock is not None:
            try:
                acquired = await self.lock.acquire(user.user_id, chapter_id)
            except RedisError as e:
                raise HerStoriesError(ErrorKind.PERSISTENCE_FAILURE, "Purchase lock unavailable", cause=e)
            if not acquired:
                raise HerStoriesError(
                    ErrorKind.PURCHASE_IN_PROGRESS,
                    "A purchase of this chapter is already in progress",
                )
        try:
            return await self._pay_and_record(
                user.user_id,
                story.id,
                chapter_id,
                price_quote,
                author_wallet,
                story_ledger_id,
                chapter_ledger_id,
            )
        finally:
            if self.lock is not None:
                await self._release_lock(user.user_id, chapter_id)

    async def _release_lock(self, user_id: str, chapter_id: str) -> None:
        try:
            await self.lock.release(user_id, chapter_id)
        except RedisError as e:
            # key still expires after purchase_lock_ttl
            logger.warning("purchase_lock_release_failed", extra={"chapter_id": chapter_id, "error": str(e)})

    async def _pay_and_record(
        self,
        user_id: str,
        story_id: str,
        chapter_id: str,
        price_quote: Decimal,
        author_wallet: str,
        story_ledger_id: int,
        chapter_ledger_id: int,
    ) -> ChapterAccess:
        submitted_at = datetime.now(timezone.utc)
        try:
            receipt = await self.bridge.submit_payment(
                story_ledger_id, chapter_ledger_id, author_wallet, price_quote
            )
        except Exception as e:
            failure_type = classify_payment_failure(e)
            raise HerStoriesError(
                ErrorKind.PAYMENT_FAILED,
                FAILURE_MESSAGES[failure_type],
                cause=e,
                detail={"failure_type": failure_type.value},
            )

        try:
            return await self.store.insert(
                user_id,
                story_id,
                chapter_id,
                purchased_at=submitted_at,
                blockchain_tx_hash=receipt.transaction_hash,
            )
        except SQLAlchemyError as e:
            # Paid on-chain, no durable entitlement; reconcile() restores it
            logger.error(
                "chapter_purchase_unrecorded",
                extra={
                    "user_id": user_id,
                    "story_id": story_id,
                    "chapter_id": chapter_id,
                    "tx_hash": receipt.transaction_hash,
                },
            )
            raise HerStoriesError(
                ErrorKind.RECORD_PERSIST_FAILED,
                "Payment confirmed but the purchase could not be recorded",
                cause=e,
                detail={"tx_hash": receipt.transaction_hash},
            )

    async def reconcile(
        self,
        user: UserSession | None,
        story: StoryHeader,
        chapters: Iterable[Any],
        purchased_chapter_ids: Container[str],
    ) -> list[ChapterAccess]:
        """
        Insert records for paid chapters the ledger reports as purchased by the
        connected wallet but the store does not know about. Per-chapter errors are
        logged and skipped.
        """
        buyer = self.bridge.buyer_address
        if user is None or not self.bridge.is_ready() or not buyer:
            return []
        try:
            story_ledger_id = to_ledger_id(story.id)
        except InvalidLedgerId:
            logger.warning("reconcile_skipped", extra={"story_id": story.id, "error": "invalid_ledger_id"})
            return []

        user_id, story_id = user.user_id, story.id
        restored: list[ChapterAccess] = []
        for chapter in chapters:
            chapter_id = chapter.id
            if chapter.is_free or chapter_id in purchased_chapter_ids:
                continue
            try:
                paid = await self.bridge.is_chapter_purchased(
                    story_ledger_id, to_ledger_id(chapter_id), buyer
                )
            except Exception as e:
                logger.warning(
                    "reconcile_lookup_failed",
                    extra={"chapter_id": chapter_id, "error": str(e)},
                )
                continue
            if not paid:
                continue
            try:
                record = await self.store.insert(
                    user_id,
                    story_id,
                    chapter_id,
                    purchased_at=datetime.now(timezone.utc),
                    blockchain_tx_hash=None,
                )
            except SQLAlchemyError as e:
                logger.warning(
                    "reconcile_insert_failed",
                    extra={"chapter_id": chapter_id, "error": str(e)},
                )
                continue
            restored.append(record)

        if restored:
            logger.info(
                "purchases_reconciled",
                extra={"user_id": user_id, "story_id": story_id, "count": len(restored)},
            )
        return restored
