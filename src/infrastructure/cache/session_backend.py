"""
infrastructure.cache.session_backend - Session persistence tiers.

Three implementations of SessionBackend:
  - RedisSessionBackend     JSON blobs under "session:{id}" with EX=ttl
  - InMemorySessionBackend  process-local dict, TTL applied by sweep_expired()
  - FallbackSessionBackend  Redis first, mirrored into memory; the first
                            Redis failure flips reads to memory for good

Sessions are copied through to_dict()/from_dict() on every read and write
so callers never share a mutable Session with the store.
"""

from __future__ import annotations

import copy
import json
import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

import redis.asyncio as aioredis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
from redis.exceptions import RedisError

from domain.entities import Session

logger = logging.getLogger(__name__)

KEY_PREFIX = "session:"

T = TypeVar("T")


def _key(session_id: str) -> str:
    return f"{KEY_PREFIX}{session_id}"


class RedisSessionBackend:
    """Store sessions in Redis as JSON with a sliding expiry."""

    name = "redis"

    def __init__(self, client: Any):
        self._client = client

    @classmethod
    def from_url(cls, url: str, connect_timeout: float = 1.0) -> RedisSessionBackend:
        client = aioredis.Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=connect_timeout,
            socket_timeout=connect_timeout,
            retry=Retry(NoBackoff(), 1),
        )
        return cls(client)

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def load(self, session_id: str) -> Optional[Session]:
        raw = await self._client.get(_key(session_id))
        if raw is None:
            return None
        return Session.from_dict(json.loads(raw))

    async def store(self, session: Session, ttl_seconds: int) -> None:
        payload = json.dumps(session.to_dict())
        await self._client.set(_key(session.session_id), payload, ex=ttl_seconds)

    async def delete(self, session_id: str) -> None:
        await self._client.delete(_key(session_id))

    async def expire(self, session_id: str, ttl_seconds: int) -> None:
        await self._client.expire(_key(session_id), ttl_seconds)

    async def keys(self) -> list[str]:
        return [
            key[len(KEY_PREFIX):]
            async for key in self._client.scan_iter(match=f"{KEY_PREFIX}*")
        ]

    async def close(self) -> None:
        await self._client.aclose()


class InMemorySessionBackend:
    """Process-local store. Expiry only happens when sweep_expired() runs."""

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, dict[str, Any]] = {}
        self._expires_at: dict[str, float] = {}

    async def load(self, session_id: str) -> Optional[Session]:
        data = self._data.get(session_id)
        return Session.from_dict(data) if data is not None else None

    async def store(self, session: Session, ttl_seconds: int) -> None:
        self._data[session.session_id] = copy.deepcopy(session.to_dict())
        self._expires_at[session.session_id] = self._clock() + ttl_seconds

    async def delete(self, session_id: str) -> None:
        self._data.pop(session_id, None)
        self._expires_at.pop(session_id, None)

    async def expire(self, session_id: str, ttl_seconds: int) -> None:
        if session_id in self._data:
            self._expires_at[session_id] = self._clock() + ttl_seconds

    async def keys(self) -> list[str]:
        return list(self._data.keys())

    def sweep_expired(self) -> int:
        """Drop every session whose TTL has elapsed. Returns how many were removed."""
        now = self._clock()
        expired = [sid for sid, deadline in self._expires_at.items() if deadline <= now]
        for sid in expired:
            self._data.pop(sid, None)
            self._expires_at.pop(sid, None)
        if expired:
            logger.info("Swept %d expired in-memory sessions", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._data)


class FallbackSessionBackend:
    """Redis with a one-way switch to the in-memory tier.

    Every write also lands in the in-memory tier, so a session that was
    bound while Redis was healthy is still there after Redis fails. Reads
    go to Redis until its first failure and to memory from then on. The
    mirror is kept bounded by sweep_expired(), which runs in both states.
    """

    def __init__(
        self,
        primary: Optional[RedisSessionBackend],
        secondary: Optional[InMemorySessionBackend] = None,
    ):
        self._primary = primary
        self._secondary = secondary if secondary is not None else InMemorySessionBackend()
        self.available = primary is not None

    @property
    def backend_name(self) -> str:
        return RedisSessionBackend.name if self.available else InMemorySessionBackend.name

    @property
    def memory(self) -> InMemorySessionBackend:
        return self._secondary

    async def check_connection(self) -> bool:
        """Ping Redis once; a failure switches to memory immediately."""
        if not self.available:
            return False
        try:
            await self._primary.ping()
        except (RedisError, OSError) as e:
            self._degrade(e)
            return False
        logger.info("Session store using Redis")
        return True

    async def load(self, session_id: str) -> Optional[Session]:
        return await self._read(
            lambda b: b.load(session_id), lambda: self._secondary.load(session_id),
        )

    async def keys(self) -> list[str]:
        return await self._read(lambda b: b.keys(), self._secondary.keys)

    async def store(self, session: Session, ttl_seconds: int) -> None:
        await self._secondary.store(session, ttl_seconds)
        await self._write(lambda b: b.store(session, ttl_seconds))

    async def delete(self, session_id: str) -> None:
        await self._secondary.delete(session_id)
        await self._write(lambda b: b.delete(session_id))

    async def expire(self, session_id: str, ttl_seconds: int) -> None:
        await self._secondary.expire(session_id, ttl_seconds)
        await self._write(lambda b: b.expire(session_id, ttl_seconds))

    def sweep_expired(self) -> int:
        return self._secondary.sweep_expired()

    async def close(self) -> None:
        if self._primary is None:
            return
        try:
            await self._primary.close()
        except (RedisError, OSError) as e:
            logger.warning("Error closing Redis client: %s", e)

    async def _read(
        self,
        on_primary: Callable[[RedisSessionBackend], Awaitable[T]],
        on_secondary: Callable[[], Awaitable[T]],
    ) -> T:
        if self.available:
            try:
                return await on_primary(self._primary)
            except (RedisError, OSError) as e:
                self._degrade(e)
        return await on_secondary()

    async def _write(self, on_primary: Callable[[RedisSessionBackend], Awaitable[None]]) -> None:
        if not self.available:
            return
        try:
            await on_primary(self._primary)
        except (RedisError, OSError) as e:
            self._degrade(e)

    def _degrade(self, error: Exception) -> None:
        self.available = False
        logger.warning(
            "Redis unavailable (%s); falling back to in-memory session storage", error,
        )
