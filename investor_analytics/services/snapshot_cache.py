"""Snapshot cache: computed payload + ETag with a TTL.

Two interchangeable backends honour the same get/set/delete contract:
an in-process expiring dict and Redis (``SET ... EX ttl``). The backend is
built once at startup by ``build_snapshot_cache`` and injected from app state.
"""
from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from investor_analytics.core.config import Settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class CachedSnapshot:
    value: dict[str, Any]
    etag: str


def snapshot_cache_key(
    version: str,
    investor_id: int,
    from_date: str,
    to_date: str,
    base_currency: str,
    lang: str | None = None,
    preset: str | None = None,
    net_view: str = "invested",
) -> str:
    """Deterministic key; bumping ``version`` orphans every stored entry.

    ``preset`` and ``net_view`` are echoed in the payload's export context,
    so they are part of the key too.
    """
    parts = ["snapshot", f"v{version}", str(investor_id), from_date, to_date, base_currency, lang or "default"]
    parts += [preset or "none", net_view]
    return ":".join(parts)


class SnapshotCache(ABC):
    name: str = ""

    @abstractmethod
    async def get(self, key: str) -> CachedSnapshot | None:
        ...

    @abstractmethod
    async def set(self, key: str, value: dict[str, Any], etag: str, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    async def close(self) -> None:
        return None


class MemorySnapshotCache(SnapshotCache):
    """Per-process dict of ``key -> (entry, expires_at)`` on the monotonic clock.

    Expiry is checked lazily on read; expired entries are dropped then.
    """

    name = "memory"

    def __init__(self) -> None:
        self._store: dict[str, tuple[CachedSnapshot, float]] = {}

    async def get(self, key: str) -> CachedSnapshot | None:
        cached = self._store.get(key)
        if cached is None:
            return None
        entry, expires_at = cached
        if expires_at <= time.monotonic():
            del self._store[key]
            return None
        return entry

    async def set(self, key: str, value: dict[str, Any], etag: str, ttl_seconds: int) -> None:
        self._store[key] = (CachedSnapshot(value=value, etag=etag), time.monotonic() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def __len__(self) -> int:
        return len(self._store)


class RedisSnapshotCache(SnapshotCache):
    """Stores ``{"value": ..., "etag": ...}`` as JSON with a server-side expiry.

    Redis errors degrade to a cache miss (reads) or a skipped write; the
    snapshot is then recomputed from the ERP.
    """

    name = "redis"

    def __init__(self, client: aioredis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisSnapshotCache:
        return cls(aioredis.from_url(url, encoding="utf-8", decode_responses=True))

    async def get(self, key: str) -> CachedSnapshot | None:
        try:
            raw = await self._redis.get(key)
        except RedisError as exc:
            logger.warning("snapshot_cache.get_failed", key=key, error=str(exc))
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
            return CachedSnapshot(value=data["value"], etag=data["etag"])
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("snapshot_cache.corrupt_entry", key=key, error=str(exc))
            return None

    async def set(self, key: str, value: dict[str, Any], etag: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            # Redis rejects EX <= 0; such an entry would never be readable anyway
            return
        try:
            await self._redis.set(key, json.dumps({"value": value, "etag": etag}, default=str), ex=ttl_seconds)
        except RedisError as exc:
            logger.warning("snapshot_cache.set_failed", key=key, error=str(exc))

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except RedisError as exc:
            logger.warning("snapshot_cache.delete_failed", key=key, error=str(exc))

    async def close(self) -> None:
        await self._redis.aclose()


def build_snapshot_cache(settings: Settings) -> SnapshotCache:
    provider = settings.SNAPSHOT_CACHE_PROVIDER.lower()
    if provider == "redis":
        if settings.REDIS_URL:
            logger.info("snapshot_cache_selected", provider="redis")
            return RedisSnapshotCache.from_url(settings.REDIS_URL)
        logger.warning("snapshot_cache_selected", provider="memory", reason="REDIS_URL missing")
        return MemorySnapshotCache()
    if provider != "memory":
        logger.warning("snapshot_cache_unknown_provider", provider=provider, fallback="memory")
    else:
        logger.info("snapshot_cache_selected", provider="memory")
    return MemorySnapshotCache()
