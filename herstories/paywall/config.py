"""
Paywall config: typed wrapper over herstories.core.config for price display.
"""
from __future__ import annotations

from decimal import Decimal

from herstories.core.config import settings


def get_currency_symbol() -> str:
    return settings.chain_currency_symbol


def get_default_price() -> Decimal:
    return settings.default_price_per_chapter
