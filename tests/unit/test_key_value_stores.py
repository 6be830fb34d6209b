from __future__ import annotations

import json
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from shopcart.core.errors import StoreReadFailure
from shopcart.infrastructure.key_value_stores import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    RedisKeyValueStore,
)
from shopcart.infrastructure import persistence_clients
from shopcart.infrastructure.persistence_clients import RedisClientManager


class _FakeRedisClient:
    def __init__(self, *, broken: bool = False, get_error: Exception | None = None) -> None:
        self.store: dict[str, Any] = {}
        self.broken = broken
        self.get_error = get_error

    def set(self, key: str, value: str, ex: int | None = None) -> None:
        if self.broken:
            raise RedisConnectionError("connection refused")
        self.store[key] = value

    def get(self, key: str) -> Any:
        if self.broken:
            raise RedisConnectionError("connection refused")
        if self.get_error is not None:
            raise self.get_error
        return self.store.get(key)


def _redis_manager(client: Any) -> RedisClientManager:
    manager = RedisClientManager(url="redis://unused", enabled=True)
    manager._client = client
    return manager


def test_in_memory_store_get_set() -> None:
    store = InMemoryKeyValueStore()
    assert store.get("cart") is None
    assert store.set("cart", "[]") is True
    assert store.get("cart") == "[]"
    assert store.export_state() == {"cart": "[]"}


def test_redis_store_round_trips_and_decodes_bytes() -> None:
    client = _FakeRedisClient()
    store = RedisKeyValueStore(redis_manager=_redis_manager(client))

    assert store.get("@RocketShoes:cart") is None
    assert store.set("@RocketShoes:cart", "[]") is True
    assert store.get("@RocketShoes:cart") == "[]"

    client.store["raw"] = b'[{"id": 1}]'
    assert store.get("raw") == '[{"id": 1}]'


def test_redis_store_raises_on_read_when_unavailable() -> None:
    disconnected = RedisKeyValueStore(redis_manager=RedisClientManager(url="redis://unused", enabled=True))
    with pytest.raises(StoreReadFailure) as excinfo:
        disconnected.get("cart")
    assert excinfo.value.reason == "redis is unavailable"
    assert disconnected.set("cart", "[]") is False

    broken = RedisKeyValueStore(redis_manager=_redis_manager(_FakeRedisClient(broken=True)))
    with pytest.raises(StoreReadFailure):
        broken.get("cart")
    assert broken.set("cart", "[]") is False


@pytest.mark.parametrize(
    "get_error",
    [None, UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")],
    ids=["raw-bytes", "decoded-by-client"],
)
def test_redis_store_raises_on_undecodable_value(get_error: Exception | None) -> None:
    client = _FakeRedisClient(get_error=get_error)
    client.store["cart"] = b"\xff\xfe"
    store = RedisKeyValueStore(redis_manager=_redis_manager(client))

    with pytest.raises(StoreReadFailure) as excinfo:
        store.get("cart")

    assert "UTF-8" in excinfo.value.reason


def test_redis_manager_status_reflects_connection() -> None:
    disabled = RedisClientManager(url="redis://unused", enabled=False)
    disabled.connect()
    assert disabled.status == "disabled"

    connected = _redis_manager(_FakeRedisClient())
    assert connected.status == "connected"


class _UnreachableRedis:
    def __init__(self) -> None:
        self.closed = False

    def ping(self) -> bool:
        raise RedisConnectionError("connection refused")

    def close(self) -> None:
        self.closed = True


def test_redis_manager_records_failed_connect(monkeypatch) -> None:
    unreachable = _UnreachableRedis()
    monkeypatch.setattr(persistence_clients.redis, "from_url", lambda *args, **kwargs: unreachable)
    manager = RedisClientManager(url="redis://unused", enabled=True)

    assert manager.connect() is False
    assert manager.status == "unavailable"
    assert manager.error == "connection refused"
    assert unreachable.closed is True
    assert manager.client is None


def test_file_store_persists_keys_across_instances(tmp_path) -> None:
    path = tmp_path / "nested" / "storage.json"
    first = JsonFileKeyValueStore(path)
    assert first.get("cart") is None
    assert first.set("cart", '[{"id": 1, "amount": 2}]') is True
    assert first.set("other", "x") is True

    second = JsonFileKeyValueStore(path)
    assert second.get("cart") == '[{"id": 1, "amount": 2}]'
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "cart": '[{"id": 1, "amount": 2}]',
        "other": "x",
    }


@pytest.mark.parametrize(
    "content",
    [b"not json at all", b"[1, 2]", b"\xff\xfe garbage", b"[" * 100_000],
    ids=["not-json", "not-an-object", "not-utf8", "deeply-nested"],
)
def test_file_store_reports_unreadable_file_and_rewrites_it(tmp_path, content: bytes) -> None:
    path = tmp_path / "storage.json"
    path.write_bytes(content)
    store = JsonFileKeyValueStore(path)

    with pytest.raises(StoreReadFailure):
        store.get("cart")

    assert store.set("cart", "[]") is True
    assert store.get("cart") == "[]"
