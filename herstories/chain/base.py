"""
Base classes and types for payment bridges.
The purchase flow only depends on PaymentBridge; Web3PaymentBridge is the EVM implementation.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class PaymentReceipt:
    """Mined payment."""
    transaction_hash: str
    block_number: int | None = None
    status: int = 1


class PaymentBridgeError(Exception):
    """Raised by bridges; detail holds RPC fields for logging."""
    def __init__(self, message: str, detail: dict[str, Any] | None = None):
        super().__init__(message)
        self.detail = detail or {}


class TransactionReverted(PaymentBridgeError):
    """Transaction was mined with status 0."""
    def __init__(self, transaction_hash: str):
        super().__init__(f"transaction failed: {transaction_hash}", {"tx_hash": transaction_hash})
        self.transaction_hash = transaction_hash


class PaymentBridge(ABC):

    @abstractmethod
    def is_ready(self) -> bool:
        """True when the wallet is connected and the contract can be called."""
        pass

    @property
    @abstractmethod
    def buyer_address(self) -> str | None:
        pass

    @abstractmethod
    async def submit_payment(
        self,
        story_ledger_id: int,
        chapter_ledger_id: int,
        author_address: str,
        value: Decimal,
    ) -> PaymentReceipt:
        """Send the payment and wait until it is mined. Raises on rejection, revert or timeout."""
        pass

    @abstractmethod
    async def is_chapter_purchased(
        self,
        story_ledger_id: int,
        chapter_ledger_id: int,
        buyer_address: str,
    ) -> bool:
        pass
