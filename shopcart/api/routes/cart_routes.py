from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from shopcart.api.deps import get_cart_manager, resolve_request_locale
from shopcart.models.schemas import AddProductRequest, CartSnapshot, UpdateProductAmountRequest
from shopcart.presentation.messages import message_for
from shopcart.repositories.cart_repository import CartRepository
from shopcart.services.cart_manager import Cart, CartManager, CartMutationResult
from shopcart.services.notification_service import CartSignal

router = APIRouter(prefix="/cart", tags=["cart"])

_STATUS_BY_SIGNAL = {
    CartSignal.OUT_OF_STOCK: 409,
    CartSignal.REMOVE_PRODUCT_FAILED: 404,
    CartSignal.UPDATE_AMOUNT_FAILED: 422,
    CartSignal.ADD_PRODUCT_FAILED: 502,
}


def _snapshot(cart: Cart) -> CartSnapshot:
    return CartSnapshot(
        items=CartRepository.to_rows(cart),
        itemCount=sum(item.amount for item in cart),
        amounts={item.id: item.amount for item in cart},
    )


def _respond(result: CartMutationResult, locale: str) -> CartSnapshot:
    if result.ok:
        return _snapshot(result.cart)
    signal = result.signal or CartSignal.ADD_PRODUCT_FAILED
    raise HTTPException(
        status_code=_STATUS_BY_SIGNAL.get(signal, 400),
        detail={
            "error": {
                "code": signal.value,
                "message": message_for(signal, locale),
                "details": [{"productId": result.product_id}],
            }
        },
    )


@router.get("")
def get_cart(cart_manager: CartManager = Depends(get_cart_manager)) -> CartSnapshot:
    return _snapshot(cart_manager.cart)


@router.post("/items")
async def add_product(
    payload: AddProductRequest,
    cart_manager: CartManager = Depends(get_cart_manager),
    locale: str = Depends(resolve_request_locale),
) -> CartSnapshot:
    result = await cart_manager.add_product(payload.productId)
    return _respond(result, locale)


@router.delete("/items/{product_id}")
async def remove_product(
    product_id: int,
    cart_manager: CartManager = Depends(get_cart_manager),
    locale: str = Depends(resolve_request_locale),
) -> CartSnapshot:
    result = await cart_manager.remove_product(product_id)
    return _respond(result, locale)


@router.patch("/items/{product_id}")
async def update_product_amount(
    product_id: int,
    payload: UpdateProductAmountRequest,
    cart_manager: CartManager = Depends(get_cart_manager),
    locale: str = Depends(resolve_request_locale),
) -> CartSnapshot:
    result = await cart_manager.update_product_amount(product_id, payload.amount)
    return _respond(result, locale)
