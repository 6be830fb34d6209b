from __future__ import annotations

from typing import Any

import pytest

from shopcart.infrastructure.key_value_stores import InMemoryKeyValueStore
from shopcart.infrastructure.observability import MetricsCollector
from shopcart.repositories.cart_repository import CartRepository
from shopcart.services.cart_manager import CartManager
from shopcart.services.notification_service import CartNotificationChannel
from shopcart.store.in_memory import InMemoryInventory

CART_KEY = "@RocketShoes:cart"

CATALOG: list[dict[str, Any]] = [
    {"id": 1, "title": "Tênis de Caminhada", "price": 179.9, "image": "https://img/1.jpg"},
    {"id": 2, "title": "Tênis VR Couro", "price": 139.9, "image": "https://img/2.jpg"},
    {"id": 3, "title": "Tênis Duramo Lite", "price": 219.9, "image": "https://img/3.jpg"},
]


class RecordingStore(InMemoryKeyValueStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.writes: list[tuple[str, str]] = []
        self.fail_writes = False

    def set(self, key: str, value: str) -> bool:
        if self.fail_writes:
            return False
        self.writes.append((key, value))
        return super().set(key, value)


@pytest.fixture
def inventory() -> InMemoryInventory:
    return InMemoryInventory(products=CATALOG, stock={1: 3, 2: 10, 3: 0})


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def notifications() -> CartNotificationChannel:
    return CartNotificationChannel()


@pytest.fixture
def metrics_collector() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def make_manager(inventory, store, notifications, metrics_collector):  # type: ignore[no-untyped-def]
    def _make(persistent_store: Any = None) -> CartManager:
        return CartManager(
            inventory=inventory,
            cart_repository=CartRepository(store=persistent_store or store, key=CART_KEY),
            notifications=notifications,
            metrics_collector=metrics_collector,
        )

    return _make


@pytest.fixture
def manager(make_manager) -> CartManager:  # type: ignore[no-untyped-def]
    return make_manager()
