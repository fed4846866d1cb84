# tests/test_registry_redis.py
"""
Tests for RedisRegistry.

Uses a small in-memory stand-in for the redis.asyncio hash commands so no
Redis server is needed. Connection failures are simulated with AsyncMock.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from route_failover.constants import REDIS_CREDENTIALS_KEY, REDIS_MODELS_KEY
from route_failover.exceptions import StoreUnavailable
from route_failover.models import Credential
from route_failover.registry.redis import RedisRegistry


class FakeRedisHashes:
    """Implements the handful of hash commands RedisRegistry uses."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}
        self.closed = False

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    async def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    async def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value
        return 1

    async def hdel(self, key, field):
        return 1 if self.hashes.get(key, {}).pop(field, None) is not None else 0

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_redis():
    return FakeRedisHashes()


@pytest.fixture
def redis_registry(fake_redis):
    return RedisRegistry(client=fake_redis)


class TestConstruction:
    def test_requires_url_or_client(self):
        with pytest.raises(ValueError):
            RedisRegistry()


@pytest.mark.asyncio
class TestRedisRegistry:
    async def test_empty_store(self, redis_registry):
        assert await redis_registry.list_active_credentials() == []
        assert await redis_registry.list_active_models() == []

    async def test_add_and_list_in_priority_order(self, redis_registry, fake_redis):
        first = await redis_registry.add_credential("primary", "sk-primary-0000")
        second = await redis_registry.add_credential("backup", "sk-backup-1111")

        assert (first.priority, second.priority) == (0, 1)
        assert set(fake_redis.hashes[REDIS_CREDENTIALS_KEY]) == {first.id, second.id}

        names = [c.key_name for c in await redis_registry.list_active_credentials()]
        assert names == ["primary", "backup"]

    async def test_records_round_trip_secret(self, redis_registry):
        await redis_registry.add_credential("primary", "sk-primary-0000")
        (credential,) = await redis_registry.list_credentials()
        assert credential.api_key == "sk-primary-0000"

    async def test_sorts_records_written_by_other_writers(self, redis_registry, fake_redis):
        for priority, name in [(3, "c"), (-2, "a"), (1, "b")]:
            record = Credential(key_name=name, api_key=f"sk-{name}", priority=priority)
            await fake_redis.hset(REDIS_CREDENTIALS_KEY, record.id, record.model_dump_json())
        names = [c.key_name for c in await redis_registry.list_active_credentials()]
        assert names == ["a", "b", "c"]

    async def test_models_next_priority(self, redis_registry, fake_redis):
        await redis_registry.add_model("vendor/a", "A")
        await redis_registry.add_model("vendor/b", "B")
        third = await redis_registry.add_model("vendor/c", "C")
        assert third.priority == 2
        assert len(fake_redis.hashes[REDIS_MODELS_KEY]) == 3

    async def test_delete(self, redis_registry):
        model = await redis_registry.add_model("vendor/a", "A")
        assert await redis_registry.delete_model(model.id) is True
        assert await redis_registry.delete_model(model.id) is False
        assert await redis_registry.list_models() == []

    async def test_deactivate_hides_from_active_list(self, redis_registry):
        credential = await redis_registry.add_credential("k", "sk-k")
        assert await redis_registry.set_credential_active(credential.id, False) is True
        assert await redis_registry.list_active_credentials() == []
        assert len(await redis_registry.list_credentials()) == 1
        assert await redis_registry.set_model_active("missing", True) is False

    async def test_corrupt_record_is_store_error(self, redis_registry, fake_redis):
        await fake_redis.hset(REDIS_MODELS_KEY, "bad", "{not json")
        with pytest.raises(StoreUnavailable):
            await redis_registry.list_active_models()

    async def test_toggling_corrupt_record_is_store_error(self, redis_registry, fake_redis):
        await fake_redis.hset(REDIS_CREDENTIALS_KEY, "bad", "{not json")
        with pytest.raises(StoreUnavailable):
            await redis_registry.set_credential_active("bad", False)
        assert fake_redis.hashes[REDIS_CREDENTIALS_KEY]["bad"] == "{not json"

    async def test_connection_error_is_store_unavailable(self):
        client = AsyncMock()
        client.hgetall.side_effect = RedisConnectionError("Connection refused")
        registry = RedisRegistry(client=client)

        with pytest.raises(StoreUnavailable):
            await registry.list_active_credentials()
        with pytest.raises(StoreUnavailable):
            await registry.add_model("vendor/a", "A")

    async def test_write_error_is_store_unavailable(self, fake_redis):
        fake_redis.hset = AsyncMock(side_effect=RedisConnectionError("gone"))
        registry = RedisRegistry(client=fake_redis)
        with pytest.raises(StoreUnavailable):
            await registry.add_credential("k", "sk-k")

    async def test_close(self, redis_registry, fake_redis):
        await redis_registry.close()
        assert fake_redis.closed
