import redis.asyncio as redis

from herstories.core.config import settings


class PurchaseLock:
    """Cross-session guard: one outstanding purchase per (user, chapter)."""

    KEY_PREFIX = "purchase_lock:"

    def __init__(self, client: redis.Redis | None = None, ttl_seconds: int | None = None) -> None:
        self.client = client or redis.Redis.from_url(settings.redis_url, decode_responses=True)
        self.ttl = ttl_seconds if ttl_seconds is not None else settings.purchase_lock_ttl

    def _key(self, user_id: str, chapter_id: str) -> str:
        return f"{self.KEY_PREFIX}{user_id}:{chapter_id}"

    async def acquire(self, user_id: str, chapter_id: str) -> bool:
        """Atomic operation: setnx + expire in one call."""
        created = await self.client.set(self._key(user_id, chapter_id), "1", nx=True, ex=self.ttl)
        return bool(created)

    async def release(self, user_id: str, chapter_id: str) -> None:
        await self.client.delete(self._key(user_id, chapter_id))


def get_purchase_lock() -> PurchaseLock | None:
    """None when redis_url is not configured."""
    if not settings.redis_url:
        return None
    return PurchaseLock()
