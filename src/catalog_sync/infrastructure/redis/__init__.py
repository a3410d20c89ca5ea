"""Redis-backed event version store with graceful degradation."""

from typing import Any

import orjson
import redis.asyncio as aioredis
import structlog

from catalog_sync.config import Settings

logger = structlog.get_logger()


async def connect_redis(settings: Settings) -> aioredis.Redis | None:
    """Open a Redis client, or return None when the server is unreachable."""
    client = aioredis.from_url(
        settings.redis_url,
        decode_responses=False,
        socket_connect_timeout=2,
        socket_timeout=2,
        retry_on_timeout=True,
    )
    try:
        await client.ping()
    except Exception as e:
        logger.warning("Redis unavailable, event version guard disabled", error=str(e))
        await client.aclose()
        return None
    logger.info("Redis connection established")
    return client


class EventVersionStore:
    """Last applied resource version per product.

    Lets the dispatcher drop a webhook delivery that is older than one already
    applied for the same product. No-ops (nothing is ever stale) if Redis is
    unavailable.
    """

    KEY_PREFIX = "catalog_sync:applied_version:"

    def __init__(self, client: aioredis.Redis | None, ttl_seconds: int = 7 * 24 * 3600):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def _key(self, resource_id: str) -> str:
        return f"{self.KEY_PREFIX}{resource_id}"

    async def last_applied(self, resource_id: str) -> dict[str, Any] | None:
        if not self.client:
            return None
        try:
            data = await self.client.get(self._key(resource_id))
            if data:
                return orjson.loads(data)
        except Exception as e:
            logger.warning("Version lookup failed", resource_id=resource_id, error=str(e))
        return None

    async def is_stale(self, resource_id: str, version: int | None) -> bool:
        if version is None:
            return False
        last = await self.last_applied(resource_id)
        return last is not None and version < last["version"]

    async def record(self, resource_id: str, version: int | None, action: str) -> None:
        # TODO: make this a compare-and-set (Lua script) so two concurrent
        # deliveries cannot both pass is_stale() before either records.
        if not self.client or version is None:
            return
        try:
            await self.client.set(
                self._key(resource_id),
                orjson.dumps({"version": version, "action": action}),
                ex=self.ttl_seconds,
            )
        except Exception as e:
            logger.warning("Version record failed", resource_id=resource_id, error=str(e))

    async def health_check(self) -> bool:
        if not self.client:
            return False
        try:
            return await self.client.ping()
        except Exception:
            return False
