from __future__ import annotations

import json
from typing import Any, Iterable

from pydantic import ValidationError

from shopcart.core.errors import CorruptPersistedState, PersistFailure, StoreReadFailure
from shopcart.core.interfaces import PersistentStore
from shopcart.models.schemas import CartItem


class CartRepository:
    def __init__(self, *, store: PersistentStore, key: str) -> None:
        self.store = store
        self.key = key

    def load(self) -> tuple[CartItem, ...]:
        try:
            raw = self.store.get(self.key)
        except StoreReadFailure as exc:
            raise CorruptPersistedState(self.key, f"store read failed ({exc.reason})") from exc
        if not raw:
            return ()
        try:
            payload = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            raise CorruptPersistedState(self.key, f"invalid JSON ({exc})") from exc
        if not isinstance(payload, list):
            raise CorruptPersistedState(self.key, "expected a JSON array of cart items")

        items: list[CartItem] = []
        seen: set[int] = set()
        for row in payload:
            if not isinstance(row, dict):
                raise CorruptPersistedState(self.key, "cart entry is not an object")
            try:
                item = CartItem(**row)
            except (ValidationError, TypeError) as exc:
                raise CorruptPersistedState(self.key, f"invalid cart entry ({exc})") from exc
            if item.id in seen:
                raise CorruptPersistedState(self.key, f"duplicate product id {item.id}")
            seen.add(item.id)
            items.append(item)
        return tuple(items)

    def save(self, cart: Iterable[CartItem]) -> str:
        blob = self.serialize(cart)
        if not self.store.set(self.key, blob):
            raise PersistFailure(self.key)
        return blob

    @staticmethod
    def serialize(cart: Iterable[CartItem]) -> str:
        return json.dumps(CartRepository.to_rows(cart))

    @staticmethod
    def to_rows(cart: Iterable[CartItem]) -> list[dict[str, Any]]:
        return [item.model_dump(mode="json") for item in cart]
