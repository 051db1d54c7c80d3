"""
Paywall for paid chapters (internal library).
Decision (access) is pure; purchases live in herstories.services.purchases.
"""
from herstories.paywall.access import can_access, decide_access, format_price
from herstories.paywall.audit import record_purchase
from herstories.paywall.models import AccessBadge, AccessDecision

__all__ = [
    "AccessBadge",
    "AccessDecision",
    "can_access",
    "decide_access",
    "format_price",
    "record_purchase",
]
