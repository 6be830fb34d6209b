from __future__ import annotations

from typing import Protocol

from shopcart.models.schemas import Product


class InventoryService(Protocol):
    """Read-only stock and catalog lookups. Both calls raise ``LookupFailure``."""

    async def get_stock(self, product_id: int) -> int: ...

    async def get_product(self, product_id: int) -> Product: ...


class PersistentStore(Protocol):
    """
    A string-keyed blob store. ``set`` reports whether the write landed.

    ``get`` returns ``None`` only for a key that was never written; a store
    that cannot answer raises ``StoreReadFailure`` instead.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> bool: ...
