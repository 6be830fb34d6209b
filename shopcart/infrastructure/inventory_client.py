from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from shopcart.core.config import Settings
from shopcart.core.errors import LookupFailure
from shopcart.models.schemas import Product, StockLevel


class HttpInventoryService:
    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.inventory_api_url.rstrip("/"),
                timeout=self.settings.inventory_timeout_seconds,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def get_stock(self, product_id: int) -> int:
        payload = await self._request(product_id, f"/stock/{product_id}")
        try:
            stock = StockLevel.model_validate(payload)
        except ValidationError as exc:
            raise LookupFailure(product_id, "stock payload is malformed") from exc
        return max(0, stock.amount)

    async def get_product(self, product_id: int) -> Product:
        payload = await self._request(product_id, f"/products/{product_id}")
        try:
            product = Product.model_validate(payload)
        except ValidationError as exc:
            raise LookupFailure(product_id, "product payload is malformed") from exc
        if product.id != product_id:
            raise LookupFailure(product_id, f"inventory returned product {product.id}")
        return product

    async def _request(self, product_id: int, path: str) -> Any:
        try:
            response = await self.client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise LookupFailure(product_id, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise LookupFailure(product_id, f"request failed: {exc}") from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise LookupFailure(product_id, "response is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise LookupFailure(product_id, "response is not a JSON object")
        return payload
