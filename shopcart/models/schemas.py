from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    # Catalog attributes beyond these are opaque and carried as extras.
    model_config = ConfigDict(frozen=True, extra="allow")

    id: int
    title: str = ""
    price: float = 0.0
    image: str = ""


class CartItem(Product):
    amount: int = Field(ge=1)

    @classmethod
    def from_product(cls, product: Product, amount: int = 1) -> "CartItem":
        return cls(**{**product.model_dump(), "amount": amount})

    def with_amount(self, amount: int) -> "CartItem":
        return CartItem(**{**self.model_dump(), "amount": amount})


class StockLevel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    amount: int = 0


class AddProductRequest(BaseModel):
    productId: int


class UpdateProductAmountRequest(BaseModel):
    amount: int


class CartSnapshot(BaseModel):
    items: list[dict[str, Any]]
    itemCount: int
    amounts: dict[int, int]
