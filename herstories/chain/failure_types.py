"""
Payment failure normalization: classifies bridge exceptions for notifications and logs.
"""
import asyncio
from enum import Enum
from typing import Any

from web3.exceptions import ContractLogicError, TimeExhausted

from herstories.chain.base import TransactionReverted

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001


class PaymentFailureType(str, Enum):
    USER_REJECTED = "user_rejected"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    REVERTED = "reverted"
    TIMEOUT = "timeout"
    NETWORK = "network"
    UNKNOWN = "unknown"


FAILURE_MESSAGES = {
    PaymentFailureType.USER_REJECTED: "The transaction was rejected in the wallet.",
    PaymentFailureType.INSUFFICIENT_FUNDS: "Not enough funds in the wallet to pay for this chapter.",
    PaymentFailureType.REVERTED: "Blockchain transaction failed. The contract rejected the purchase.",
    PaymentFailureType.TIMEOUT: "The transaction was not confirmed in time. Check the explorer before retrying.",
    PaymentFailureType.NETWORK: "Network error while talking to the blockchain. Please try again.",
    PaymentFailureType.UNKNOWN: "Failed to purchase chapter on blockchain. Please try again.",
}


def _rpc_error_code(exc: BaseException) -> Any:
    # web3 surfaces JSON-RPC errors either as args[0] dict or as rpc_response
    if exc.args and isinstance(exc.args[0], dict):
        return exc.args[0].get("code")
    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, dict):
        return (rpc_response.get("error") or {}).get("code")
    return None


def classify_payment_failure(exc: BaseException) -> PaymentFailureType:
    if isinstance(exc, (TimeExhausted, asyncio.TimeoutError)):
        return PaymentFailureType.TIMEOUT
    if isinstance(exc, (TransactionReverted, ContractLogicError)):
        return PaymentFailureType.REVERTED
    if _rpc_error_code(exc) == USER_REJECTED_CODE:
        return PaymentFailureType.USER_REJECTED

    message = str(exc).lower()
    if "user rejected" in message or "user denied" in message:
        return PaymentFailureType.USER_REJECTED
    if "insufficient funds" in message:
        return PaymentFailureType.INSUFFICIENT_FUNDS
    if isinstance(exc, (ConnectionError, OSError)) or "connection" in message:
        return PaymentFailureType.NETWORK
    return PaymentFailureType.UNKNOWN
