"""
Redis Connections
A pooled client for the API (queue producer, health) and dedicated blocking
connections for workers waiting on BRPOP.
"""

import logging
from functools import lru_cache
from typing import Optional

from redis import ConnectionPool, Redis
from redis.exceptions import RedisError

from stitcher.core.config import settings

logger = logging.getLogger(__name__)


def mask_url(url: str) -> str:
    """Hide credentials: redis://:secret@host:6379 -> redis://***@host:6379"""
    if "@" not in url:
        return url
    scheme, _, rest = url.partition("://")
    return f"{scheme or 'redis'}://***@{rest.rsplit('@', 1)[-1]}"


class RedisManager:
    """Owns the shared connection pool for one Redis URL."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.REDIS_URL
        self._client: Optional[Redis] = None

    def get_connection(self) -> Redis:
        """Shared client with short socket timeouts, for non-blocking commands."""
        if self._client is None:
            pool = ConnectionPool.from_url(
                self.url,
                max_connections=10,
                socket_connect_timeout=5,
                socket_timeout=5,
                decode_responses=True,
            )
            self._client = Redis(connection_pool=pool)
            logger.info(f"[Redis] Pool created for {mask_url(self.url)}")
        return self._client

    def get_blocking_connection(self) -> Redis:
        """
        A fresh client for BRPOP consumers.

        The socket read timeout is disabled so a long server-side wait is
        never cut short by the client.
        """
        return Redis.from_url(
            self.url,
            socket_connect_timeout=5,
            socket_timeout=None,
            socket_keepalive=True,
            decode_responses=True,
        )

    def health_check(self) -> dict:
        """Ping the server; never raises."""
        try:
            client = self.get_connection()
            client.ping()
            version = client.info("server").get("redis_version", "unknown")
            return {"connected": True, "redis_version": version, "url": mask_url(self.url)}
        except RedisError as e:
            logger.error(f"[Redis] Health check failed: {e}")
            return {"connected": False, "error": str(e), "url": mask_url(self.url)}

    def close(self) -> None:
        """Drop pooled connections (e.g. before forking worker processes)."""
        if self._client is not None:
            self._client.connection_pool.disconnect()
            self._client = None


@lru_cache()
def get_redis_manager() -> RedisManager:
    """Process-wide manager for settings.REDIS_URL."""
    return RedisManager()


def get_redis() -> Redis:
    return get_redis_manager().get_connection()


def redis_health_check() -> dict:
    return get_redis_manager().health_check()


__all__ = [
    "RedisManager",
    "get_redis",
    "get_redis_manager",
    "mask_url",
    "redis_health_check",
]
