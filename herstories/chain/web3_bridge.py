"""
EVM payment bridge: purchaseChapter(storyId, chapterId, author) payable, then wait for the receipt.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from web3 import AsyncWeb3

from herstories.chain.abi import CHAPTER_PAYMENT_ABI
from herstories.chain.base import (
    PaymentBridge,
    PaymentBridgeError,
    PaymentReceipt,
    TransactionReverted,
)
from herstories.chain.config import get_contract_address, get_receipt_poll_latency, get_receipt_timeout
from herstories.chain.connection import WalletConnection

logger = logging.getLogger(__name__)


class Web3PaymentBridge(PaymentBridge):
    def __init__(
        self,
        connection: WalletConnection,
        contract_address: str | None = None,
        *,
        receipt_timeout: float | None = None,
        poll_latency: float | None = None,
    ) -> None:
        self.connection = connection
        self.contract_address = AsyncWeb3.to_checksum_address(contract_address or get_contract_address())
        self.receipt_timeout = receipt_timeout or get_receipt_timeout()
        self.poll_latency = poll_latency or get_receipt_poll_latency()

    def is_ready(self) -> bool:
        return self.connection.is_ready

    @property
    def buyer_address(self) -> str | None:
        return self.connection.account

    def _contract(self):
        return self.connection.w3.eth.contract(address=self.contract_address, abi=CHAPTER_PAYMENT_ABI)

    async def submit_payment(
        self,
        story_ledger_id: int,
        chapter_ledger_id: int,
        author_address: str,
        value: Decimal,
    ) -> PaymentReceipt:
        if not self.is_ready():
            raise PaymentBridgeError("Web3 not initialized")

        w3 = self.connection.w3
        value_wei = AsyncWeb3.to_wei(value, "ether")
        tx_hash = await self._contract().functions.purchaseChapter(
            story_ledger_id,
            chapter_ledger_id,
            AsyncWeb3.to_checksum_address(author_address),
        ).transact({"from": self.connection.account, "value": value_wei})
        tx_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info(
            "chain_tx_sent",
            extra={
                "tx_hash": tx_hex,
                "ledger_story_id": story_ledger_id,
                "ledger_chapter_id": chapter_ledger_id,
                "value": str(value),
            },
        )

        receipt = await w3.eth.wait_for_transaction_receipt(
            tx_hash,
            timeout=self.receipt_timeout,
            poll_latency=self.poll_latency,
        )
        if receipt["status"] != 1:
            raise TransactionReverted(tx_hex)

        logger.info("chain_tx_mined", extra={"tx_hash": tx_hex})
        return PaymentReceipt(
            transaction_hash=AsyncWeb3.to_hex(receipt["transactionHash"]),
            block_number=receipt.get("blockNumber"),
            status=receipt["status"],
        )

    async def is_chapter_purchased(
        self,
        story_ledger_id: int,
        chapter_ledger_id: int,
        buyer_address: str,
    ) -> bool:
        if not self.is_ready():
            raise PaymentBridgeError("Web3 not initialized")
        return bool(
            await self._contract().functions.isChapterPurchased(
                story_ledger_id,
                chapter_ledger_id,
                AsyncWeb3.to_checksum_address(buyer_address),
            ).call()
        )
