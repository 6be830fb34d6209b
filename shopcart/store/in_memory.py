from __future__ import annotations

from copy import deepcopy
from threading import RLock
from typing import Any

from shopcart.core.errors import LookupFailure
from shopcart.models.schemas import Product


class InMemoryInventory:
    """Seeded catalog and stock table, standing in for the inventory API."""

    def __init__(
        self,
        products: list[dict[str, Any]] | None = None,
        stock: dict[int, int] | None = None,
    ) -> None:
        self.lock = RLock()
        raw = products if products is not None else self._seed_products()
        self.products_by_id: dict[int, dict[str, Any]] = {int(row["id"]): deepcopy(row) for row in raw}
        self.stock_by_id: dict[int, int] = (
            dict(stock) if stock is not None else self._seed_stock()
        )
        self.unavailable = False

    async def get_stock(self, product_id: int) -> int:
        with self.lock:
            self._ensure_available(product_id)
            if product_id not in self.stock_by_id:
                raise LookupFailure(product_id, "no stock entry")
            return max(0, int(self.stock_by_id[product_id]))

    async def get_product(self, product_id: int) -> Product:
        with self.lock:
            self._ensure_available(product_id)
            row = self.products_by_id.get(product_id)
            if row is None:
                raise LookupFailure(product_id, "unknown product")
            return Product(**deepcopy(row))

    def set_stock(self, product_id: int, amount: int) -> None:
        with self.lock:
            self.stock_by_id[product_id] = max(0, int(amount))

    def _ensure_available(self, product_id: int) -> None:
        if self.unavailable:
            raise LookupFailure(product_id, "inventory unavailable")

    def _seed_products(self) -> list[dict[str, Any]]:
        return [
            {
                "id": 1,
                "title": "Tênis de Caminhada Leve Confortável",
                "price": 179.9,
                "image": "https://cdn.example.com/shoes/1.jpg",
            },
            {
                "id": 2,
                "title": "Tênis VR Caminhada Confortável Detalhes Couro Masculino",
                "price": 139.9,
                "image": "https://cdn.example.com/shoes/2.jpg",
            },
            {
                "id": 3,
                "title": "Tênis Adidas Duramo Lite 2.0",
                "price": 219.9,
                "image": "https://cdn.example.com/shoes/3.jpg",
            },
            {
                "id": 4,
                "title": "Tênis VR Caminhada Confortável Detalhes Couro Masculino",
                "price": 139.9,
                "image": "https://cdn.example.com/shoes/4.jpg",
            },
            {
                "id": 5,
                "title": "Tênis Nike Revolution 5",
                "price": 249.9,
                "image": "https://cdn.example.com/shoes/5.jpg",
            },
            {
                "id": 6,
                "title": "Tênis Nike Revolution 5 Running",
                "price": 269.9,
                "image": "https://cdn.example.com/shoes/6.jpg",
            },
        ]

    def _seed_stock(self) -> dict[int, int]:
        return {1: 3, 2: 5, 3: 2, 4: 1, 5: 5, 6: 10}
