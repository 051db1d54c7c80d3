"""
Purchase audit: record_purchase is called only after the purchase record is stored.
"""
from __future__ import annotations

import logging
from decimal import Decimal

logger = logging.getLogger(__name__)


def record_purchase(
    user_id: str,
    story_id: str,
    chapter_id: str,
    *,
    value: Decimal,
    tx_hash: str | None,
    latency_seconds: float | None = None,
) -> None:
    """Write the successful-purchase event for analytics."""
    logger.info(
        "paywall_purchase",
        extra={
            "user_id": user_id,
            "story_id": story_id,
            "chapter_id": chapter_id,
            "value": str(value),
            "tx_hash": tx_hash,
            "latency_seconds": latency_seconds,
        },
    )
