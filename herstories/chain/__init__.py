"""
Chain payment bridge: wallet connection, payment submission and ledger lookups.
"""
from herstories.chain.base import (
    PaymentBridge,
    PaymentBridgeError,
    PaymentReceipt,
    TransactionReverted,
)
from herstories.chain.connection import ConnectionState, WalletConnection, WalletConnectionError
from herstories.chain.failure_types import PaymentFailureType, classify_payment_failure
from herstories.chain.ids import InvalidLedgerId, to_ledger_id
from herstories.chain.web3_bridge import Web3PaymentBridge

__all__ = [
    "ConnectionState",
    "InvalidLedgerId",
    "PaymentBridge",
    "PaymentBridgeError",
    "PaymentFailureType",
    "PaymentReceipt",
    "TransactionReverted",
    "WalletConnection",
    "WalletConnectionError",
    "Web3PaymentBridge",
    "classify_payment_failure",
    "to_ledger_id",
]
