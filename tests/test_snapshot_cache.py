"""Tests for the snapshot cache backends."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from investor_analytics.core.config import Settings
from investor_analytics.services.snapshot_cache import (
    MemorySnapshotCache,
    RedisSnapshotCache,
    build_snapshot_cache,
    snapshot_cache_key,
)

pytestmark = pytest.mark.anyio

PAYLOAD = {"investor": {"id": 1}, "data_notes": []}


class TestCacheKey:
    def test_key_layout(self):
        key = snapshot_cache_key("2", 1, "2024-01-01", "2024-12-31", "USD")
        assert key == "snapshot:v2:1:2024-01-01:2024-12-31:USD:default:none:invested"

    def test_lang_preset_and_net_view_distinguish_keys(self):
        base = snapshot_cache_key("1", 1, "a", "b", "USD")
        assert snapshot_cache_key("1", 1, "a", "b", "USD", lang="he") != base
        assert snapshot_cache_key("1", 1, "a", "b", "USD", preset="ytd") != base
        assert snapshot_cache_key("1", 1, "a", "b", "USD", net_view="to_investor") != base


class TestMemorySnapshotCache:
    async def test_round_trip(self):
        cache = MemorySnapshotCache()
        await cache.set("k", PAYLOAD, "abc", 60)

        entry = await cache.get("k")
        assert entry.value == PAYLOAD
        assert entry.etag == "abc"

    async def test_miss(self):
        assert await MemorySnapshotCache().get("missing") is None

    async def test_zero_ttl_is_never_readable(self):
        cache = MemorySnapshotCache()
        await cache.set("k", PAYLOAD, "abc", 0)
        assert await cache.get("k") is None
        assert len(cache) == 0

    async def test_expired_entry_removed_on_read(self):
        cache = MemorySnapshotCache()
        with patch("investor_analytics.services.snapshot_cache.time.monotonic", return_value=1000.0):
            await cache.set("k", PAYLOAD, "abc", 60)
        with patch("investor_analytics.services.snapshot_cache.time.monotonic", return_value=1059.0):
            assert await cache.get("k") is not None
        with patch("investor_analytics.services.snapshot_cache.time.monotonic", return_value=1060.0):
            assert await cache.get("k") is None
        assert len(cache) == 0

    async def test_set_replaces_entry(self):
        cache = MemorySnapshotCache()
        await cache.set("k", PAYLOAD, "v1", 60)
        await cache.set("k", {"other": True}, "v2", 60)
        assert (await cache.get("k")).etag == "v2"

    async def test_delete(self):
        cache = MemorySnapshotCache()
        await cache.set("k", PAYLOAD, "abc", 60)
        await cache.delete("k")
        await cache.delete("never-set")
        assert await cache.get("k") is None


class TestRedisSnapshotCache:
    async def test_set_serializes_value_and_etag_with_expiry(self):
        client = AsyncMock()
        await RedisSnapshotCache(client).set("k", PAYLOAD, "abc", 600)

        client.set.assert_awaited_once()
        args, kwargs = client.set.call_args
        assert args[0] == "k"
        assert json.loads(args[1]) == {"value": PAYLOAD, "etag": "abc"}
        assert kwargs["ex"] == 600

    async def test_get_parses_entry(self):
        client = AsyncMock()
        client.get.return_value = json.dumps({"value": PAYLOAD, "etag": "abc"})

        entry = await RedisSnapshotCache(client).get("k")
        assert entry.value == PAYLOAD
        assert entry.etag == "abc"

    async def test_get_miss(self):
        client = AsyncMock()
        client.get.return_value = None
        assert await RedisSnapshotCache(client).get("k") is None

    async def test_corrupt_entry_is_a_miss(self):
        client = AsyncMock()
        client.get.return_value = "{not json"
        assert await RedisSnapshotCache(client).get("k") is None

    async def test_redis_error_is_a_miss(self):
        client = AsyncMock()
        client.get.side_effect = RedisConnectionError("down")
        assert await RedisSnapshotCache(client).get("k") is None

    async def test_non_positive_ttl_skips_write(self):
        client = AsyncMock()
        await RedisSnapshotCache(client).set("k", PAYLOAD, "abc", 0)
        client.set.assert_not_awaited()

    async def test_delete_and_close(self):
        client = AsyncMock()
        cache = RedisSnapshotCache(client)
        await cache.delete("k")
        await cache.close()
        client.delete.assert_awaited_once_with("k")
        client.aclose.assert_awaited_once()


class TestBuildSnapshotCache:
    def test_memory_default(self):
        assert isinstance(build_snapshot_cache(Settings(SNAPSHOT_CACHE_PROVIDER="memory")), MemorySnapshotCache)

    def test_redis_without_url_falls_back_to_memory(self):
        cache = build_snapshot_cache(Settings(SNAPSHOT_CACHE_PROVIDER="redis", REDIS_URL=""))
        assert isinstance(cache, MemorySnapshotCache)

    def test_redis_with_url(self):
        cache = build_snapshot_cache(
            Settings(SNAPSHOT_CACHE_PROVIDER="redis", REDIS_URL="redis://localhost:6379/0")
        )
        assert isinstance(cache, RedisSnapshotCache)
