"""Active-session registry.

A session token is only honoured while its session id is registered
here. Logging out removes the id, so a replayed token stops working even
though its signature and expiry are still valid.

Two backends are provided:
- RedisSessionStore for deployments (shared across worker processes)
- MemorySessionStore for a single process (development, tests)
"""

import asyncio
import logging
import time
from typing import Protocol

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from keeper.core.config import Settings
from keeper.domains.user.errors import StoreError

logger = logging.getLogger(__name__)

KEY_PREFIX = "keeper:session:"


class SessionStore(Protocol):
    """Maps a session id to the user id it was issued for."""

    async def add(self, session_id: str, user_id: str, ttl: int) -> None: ...

    async def get(self, session_id: str) -> str | None: ...

    async def remove(self, session_id: str) -> bool: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


class MemorySessionStore:
    """In-process session registry with per-entry expiry."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = asyncio.Lock()

    async def add(self, session_id: str, user_id: str, ttl: int) -> None:
        now = time.monotonic()
        async with self._lock:
            expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
            for key in expired:
                del self._entries[key]
            self._entries[session_id] = (user_id, now + ttl)

    async def get(self, session_id: str) -> str | None:
        async with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            user_id, expires_at = entry
            if expires_at <= time.monotonic():
                del self._entries[session_id]
                return None
            return user_id

    async def remove(self, session_id: str) -> bool:
        async with self._lock:
            return self._entries.pop(session_id, None) is not None

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisSessionStore:
    """Session registry backed by Redis keys with a TTL."""

    def __init__(self, redis: Redis, pool: ConnectionPool | None = None) -> None:
        self.redis = redis
        self._pool = pool

    @classmethod
    def from_url(cls, url: str, max_connections: int = 10) -> "RedisSessionStore":
        """Build a store with its own connection pool."""
        pool = ConnectionPool.from_url(
            url,
            max_connections=max_connections,
            decode_responses=True,
        )
        return cls(Redis(connection_pool=pool), pool)

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{KEY_PREFIX}{session_id}"

    async def add(self, session_id: str, user_id: str, ttl: int) -> None:
        try:
            await self.redis.set(self._key(session_id), user_id, ex=ttl)
        except RedisError as e:
            raise StoreError("Could not register session") from e

    async def get(self, session_id: str) -> str | None:
        try:
            return await self.redis.get(self._key(session_id))
        except RedisError as e:
            raise StoreError("Could not look up session") from e

    async def remove(self, session_id: str) -> bool:
        try:
            return bool(await self.redis.delete(self._key(session_id)))
        except RedisError as e:
            raise StoreError("Could not revoke session") from e

    async def ping(self) -> bool:
        """Check Redis connectivity."""
        try:
            return bool(await self.redis.ping())
        except RedisError:
            logger.warning("Redis ping failed", exc_info=True)
            return False

    async def close(self) -> None:
        """Close Redis connections."""
        await self.redis.aclose()
        if self._pool:
            await self._pool.disconnect()
            self._pool = None


def create_session_store(settings: Settings) -> SessionStore:
    """Build the session registry selected by ``SESSION_BACKEND``."""
    if settings.SESSION_BACKEND == "memory":
        logger.info("Using in-memory session registry")
        return MemorySessionStore()
    logger.info("Using Redis session registry at %s:%s", settings.REDIS_HOST, settings.REDIS_PORT)
    return RedisSessionStore.from_url(settings.REDIS_URL, settings.REDIS_MAX_CONNECTIONS)
