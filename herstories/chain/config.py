"""
Chain config: typed wrappers over herstories.core.config.settings.
"""
from __future__ import annotations

from herstories.core.config import settings


def get_rpc_url() -> str:
    return settings.chain_rpc_url


def get_chain_id() -> int:
    return settings.chain_id


def get_network_name() -> str:
    return settings.chain_network_name


def get_contract_address() -> str:
    return settings.chapter_payment_contract


def get_receipt_timeout() -> float:
    return settings.chain_receipt_timeout_seconds


def get_receipt_poll_latency() -> float:
    return settings.chain_receipt_poll_seconds


def tx_explorer_url(tx_hash: str) -> str:
    return f"{settings.chain_block_explorer.rstrip('/')}/tx/{tx_hash}"
