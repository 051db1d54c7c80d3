"""
Decision only: can_access / decide_access. Pure functions, no I/O.
A chapter is readable when it is free or its id is in the caller's purchased set.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Container

from herstories.paywall.config import get_currency_symbol
from herstories.paywall.models import AccessBadge, AccessDecision


def can_access(chapter: Any, purchased_chapter_ids: Container[str]) -> bool:
    """
    True iff chapter.is_free or chapter.id is in purchased_chapter_ids.
    Anonymous users pass an empty set. Adding ids never revokes access.
    """
    if chapter.is_free:
        return True
    return chapter.id in purchased_chapter_ids


def decide_access(
    chapter: Any,
    purchased_chapter_ids: Container[str],
    price_per_chapter: Decimal | None = None,
) -> AccessDecision:
    if chapter.is_free:
        return AccessDecision(can_read=True, badge=AccessBadge.FREE)
    if can_access(chapter, purchased_chapter_ids):
        return AccessDecision(can_read=True, badge=AccessBadge.PURCHASED)
    price = getattr(chapter, "price", None) or price_per_chapter
    return AccessDecision(
        can_read=False,
        badge=AccessBadge.LOCKED,
        price_label=format_price(price) if price is not None else None,
    )


def format_price(price: Decimal | int | float) -> str:
    amount = Decimal(str(price)).normalize()
    # normalize() turns 10 into 1E+1
    text = format(amount, "f")
    return f"{text} {get_currency_symbol()}"
