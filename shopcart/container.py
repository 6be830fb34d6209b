from __future__ import annotations

from dataclasses import dataclass

from shopcart.core.config import Settings
from shopcart.core.interfaces import InventoryService, PersistentStore
from shopcart.infrastructure.inventory_client import HttpInventoryService
from shopcart.infrastructure.key_value_stores import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    RedisKeyValueStore,
)
from shopcart.infrastructure.observability import MetricsCollector
from shopcart.infrastructure.persistence_clients import RedisClientManager
from shopcart.repositories.cart_repository import CartRepository
from shopcart.services.cart_manager import CartManager
from shopcart.services.notification_service import CartNotificationChannel
from shopcart.store.in_memory import InMemoryInventory


@dataclass
class Container:
    settings: Settings
    redis_manager: RedisClientManager
    persistent_store: PersistentStore
    inventory: InventoryService
    metrics_collector: MetricsCollector
    notifications: CartNotificationChannel
    cart_repository: CartRepository
    cart_manager: CartManager

    async def aclose(self) -> None:
        if isinstance(self.inventory, HttpInventoryService):
            await self.inventory.aclose()
        self.redis_manager.close()


def build_persistent_store(settings: Settings, redis_manager: RedisClientManager) -> PersistentStore:
    if settings.storage_backend == "redis":
        redis_manager.connect()
        return RedisKeyValueStore(redis_manager=redis_manager)
    if settings.storage_backend == "file":
        return JsonFileKeyValueStore(settings.storage_file_path)
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore()
    raise ValueError(f"Unsupported STORAGE_BACKEND: {settings.storage_backend}")


def build_inventory(settings: Settings) -> InventoryService:
    if settings.inventory_backend == "http":
        return HttpInventoryService(settings=settings)
    if settings.inventory_backend == "memory":
        return InMemoryInventory()
    raise ValueError(f"Unsupported INVENTORY_BACKEND: {settings.inventory_backend}")


def build_container(
    settings: Settings | None = None,
    *,
    persistent_store: PersistentStore | None = None,
    inventory: InventoryService | None = None,
) -> Container:
    settings = settings or Settings.from_env()
    redis_manager = RedisClientManager(
        url=settings.redis_url,
        enabled=settings.storage_backend == "redis",
    )
    if persistent_store is None:
        persistent_store = build_persistent_store(settings, redis_manager)
    if inventory is None:
        inventory = build_inventory(settings)

    metrics_collector = MetricsCollector()
    notifications = CartNotificationChannel()
    cart_repository = CartRepository(store=persistent_store, key=settings.cart_storage_key)
    cart_manager = CartManager(
        inventory=inventory,
        cart_repository=cart_repository,
        notifications=notifications,
        metrics_collector=metrics_collector,
    )
    return Container(
        settings=settings,
        redis_manager=redis_manager,
        persistent_store=persistent_store,
        inventory=inventory,
        metrics_collector=metrics_collector,
        notifications=notifications,
        cart_repository=cart_repository,
        cart_manager=cart_manager,
    )
