from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Callable

logger = logging.getLogger(__name__)


class CartSignal(str, Enum):
    ADD_PRODUCT_FAILED = "ADD_PRODUCT_FAILED"
    REMOVE_PRODUCT_FAILED = "REMOVE_PRODUCT_FAILED"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    UPDATE_AMOUNT_FAILED = "UPDATE_AMOUNT_FAILED"
    CORRUPT_PERSISTED_STATE = "CORRUPT_PERSISTED_STATE"


@dataclass(frozen=True)
class CartNotification:
    signal: CartSignal
    operation: str
    product_id: int | None = None
    detail: str = ""
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


Listener = Callable[[CartNotification], None]


class CartNotificationChannel:
    def __init__(self, *, history_limit: int = 100) -> None:
        self._lock = Lock()
        self._listeners: list[Listener] = []
        self._history: list[CartNotification] = []
        self._history_limit = max(1, history_limit)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def publish(self, notification: CartNotification) -> None:
        with self._lock:
            self._history.append(notification)
            if len(self._history) > self._history_limit:
                del self._history[: len(self._history) - self._history_limit]
            listeners = list(self._listeners)

        for listener in listeners:
            # A broken listener must not turn a handled failure into a crash.
            try:
                listener(notification)
            except Exception:
                logger.exception("Cart notification listener failed for %s", notification.signal.value)

    def history(self) -> list[CartNotification]:
        with self._lock:
            return list(self._history)
