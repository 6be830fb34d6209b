from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from shopcart.core.errors import (
    CartError,
    CorruptPersistedState,
    InvalidAmountUpdate,
    OutOfStock,
    ProductNotInCart,
)
from shopcart.core.interfaces import InventoryService
from shopcart.infrastructure.observability import MetricsCollector, RequestTimer
from shopcart.models.schemas import CartItem
from shopcart.repositories.cart_repository import CartRepository
from shopcart.services.notification_service import (
    CartNotification,
    CartNotificationChannel,
    CartSignal,
)

logger = logging.getLogger(__name__)

Cart = tuple[CartItem, ...]


@dataclass(frozen=True)
class CartMutationResult:
    operation: str
    ok: bool
    cart: Cart
    product_id: int | None = None
    signal: CartSignal | None = None
    error: Exception | None = None


class CartManager:
    """
    Owns the cart snapshot and is the only writer to it.

    Every mutation runs under one asyncio lock from the first read of the
    snapshot to the final commit, so concurrent callers queue up instead of
    overwriting each other. A mutation writes the store first and swaps the
    in-memory snapshot only once the write has landed; a failure anywhere
    leaves both untouched.
    """

    def __init__(
        self,
        *,
        inventory: InventoryService,
        cart_repository: CartRepository,
        notifications: CartNotificationChannel,
        metrics_collector: MetricsCollector | None = None,
    ) -> None:
        self.inventory = inventory
        self.cart_repository = cart_repository
        self.notifications = notifications
        self.metrics_collector = metrics_collector
        self.load_error: CorruptPersistedState | None = None
        self._lock = asyncio.Lock()
        self._cart: Cart = self._load()

    @property
    def cart(self) -> Cart:
        return self._cart

    def amount_of(self, product_id: int) -> int:
        item = self._find(self._cart, product_id)
        return item.amount if item else 0

    async def add_product(self, product_id: int) -> CartMutationResult:
        async def mutate(cart: Cart) -> Cart:
            stock = await self.inventory.get_stock(product_id)
            existing = self._find(cart, product_id)
            new_amount = (existing.amount if existing else 0) + 1
            if new_amount > stock:
                raise OutOfStock(product_id, new_amount, stock)
            if existing:
                return self._replace_amount(cart, product_id, new_amount)
            product = await self.inventory.get_product(product_id)
            return cart + (CartItem.from_product(product, amount=1),)

        return await self._mutate(
            "add_product",
            product_id,
            mutate,
            failure_signal=CartSignal.ADD_PRODUCT_FAILED,
        )

    async def remove_product(self, product_id: int) -> CartMutationResult:
        async def mutate(cart: Cart) -> Cart:
            if self._find(cart, product_id) is None:
                raise ProductNotInCart(product_id)
            return tuple(item for item in cart if item.id != product_id)

        return await self._mutate(
            "remove_product",
            product_id,
            mutate,
            failure_signal=CartSignal.REMOVE_PRODUCT_FAILED,
        )

    async def update_product_amount(self, product_id: int, amount: int) -> CartMutationResult:
        async def mutate(cart: Cart) -> Cart:
            # Targets of 1 or less are rejected before any stock lookup, so
            # amount=1 against stock=0 reports UPDATE_AMOUNT_FAILED, not OUT_OF_STOCK.
            if amount <= 1:
                raise InvalidAmountUpdate(product_id, amount, "amount must be greater than 1")
            stock = await self.inventory.get_stock(product_id)
            if amount > stock:
                raise OutOfStock(product_id, amount, stock)
            if self._find(cart, product_id) is None:
                raise InvalidAmountUpdate(product_id, amount, "product is not in the cart")
            return self._replace_amount(cart, product_id, amount)

        return await self._mutate(
            "update_product_amount",
            product_id,
            mutate,
            failure_signal=CartSignal.UPDATE_AMOUNT_FAILED,
        )

    async def _mutate(
        self,
        operation: str,
        product_id: int,
        mutate: Callable[[Cart], Awaitable[Cart]],
        *,
        failure_signal: CartSignal,
    ) -> CartMutationResult:
        timer = RequestTimer.start()
        async with self._lock:
            try:
                updated = await mutate(self._cart)
                self.cart_repository.save(updated)
            except OutOfStock as exc:
                logger.warning("%s rejected: %s", operation, exc)
                result = self._failure(operation, product_id, CartSignal.OUT_OF_STOCK, exc)
            except CartError as exc:
                logger.warning("%s failed: %s", operation, exc)
                result = self._failure(operation, product_id, failure_signal, exc)
            except Exception as exc:
                logger.exception("%s failed unexpectedly for product %s", operation, product_id)
                result = self._failure(operation, product_id, failure_signal, exc)
            else:
                self._cart = updated
                result = CartMutationResult(
                    operation=operation,
                    ok=True,
                    cart=updated,
                    product_id=product_id,
                )

        if result.signal is not None:
            self.notifications.publish(
                CartNotification(
                    signal=result.signal,
                    operation=operation,
                    product_id=product_id,
                    detail=str(result.error or ""),
                )
            )
        if self.metrics_collector is not None:
            self.metrics_collector.record_cart_mutation(
                operation=operation,
                outcome="ok" if result.ok else result.signal.value,
                duration_ms=timer.elapsed_ms(),
            )
        return result

    def _failure(
        self,
        operation: str,
        product_id: int,
        signal: CartSignal,
        error: Exception,
    ) -> CartMutationResult:
        return CartMutationResult(
            operation=operation,
            ok=False,
            cart=self._cart,
            product_id=product_id,
            signal=signal,
            error=error,
        )

    def _load(self) -> Cart:
        try:
            return self.cart_repository.load()
        except CorruptPersistedState as exc:
            logger.warning("Starting with an empty cart: %s", exc)
            self.load_error = exc
            self.notifications.publish(
                CartNotification(
                    signal=CartSignal.CORRUPT_PERSISTED_STATE,
                    operation="load",
                    detail=exc.reason,
                )
            )
            return ()

    @staticmethod
    def _find(cart: Cart, product_id: int) -> CartItem | None:
        return next((item for item in cart if item.id == product_id), None)

    @staticmethod
    def _replace_amount(cart: Cart, product_id: int, amount: int) -> Cart:
        return tuple(item.with_amount(amount) if item.id == product_id else item for item in cart)
