from __future__ import annotations

from fastapi import Header, Request

from shopcart.container import Container
from shopcart.presentation.messages import resolve_locale
from shopcart.services.cart_manager import CartManager


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_cart_manager(request: Request) -> CartManager:
    return get_container(request).cart_manager


def resolve_request_locale(
    request: Request,
    accept_language: str | None = Header(default=None),
) -> str:
    default = get_container(request).settings.default_locale
    return resolve_locale(accept_language, default=default)
