from herstories.services.purchases.lock import PurchaseLock, get_purchase_lock
from herstories.services.purchases.service import PurchaseOrchestrator, PurchaseResult
from herstories.services.purchases.store import PurchaseRecordStore

__all__ = [
    "PurchaseLock",
    "PurchaseOrchestrator",
    "PurchaseRecordStore",
    "PurchaseResult",
    "get_purchase_lock",
]
