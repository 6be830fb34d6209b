from __future__ import annotations


class CartError(Exception):
    """Base class for every failure a cart operation can run into."""


class OutOfStock(CartError):
    def __init__(self, product_id: int, requested: int, available: int) -> None:
        super().__init__(
            f"Requested amount {requested} for product {product_id} exceeds stock {available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class LookupFailure(CartError):
    def __init__(self, product_id: int, reason: str) -> None:
        super().__init__(f"Inventory lookup failed for product {product_id}: {reason}")
        self.product_id = product_id
        self.reason = reason


class ProductNotInCart(CartError):
    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product {product_id} is not in the cart")
        self.product_id = product_id


class InvalidAmountUpdate(CartError):
    def __init__(self, product_id: int, amount: int, reason: str) -> None:
        super().__init__(f"Cannot set product {product_id} to amount {amount}: {reason}")
        self.product_id = product_id
        self.amount = amount
        self.reason = reason


class PersistFailure(CartError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Persistent store refused write for key {key!r}")
        self.key = key


class CorruptPersistedState(CartError):
    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Persisted cart under {key!r} is unreadable: {reason}")
        self.key = key
        self.reason = reason


class StoreReadFailure(CartError):
    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Persistent store could not read key {key!r}: {reason}")
        self.key = key
        self.reason = reason
