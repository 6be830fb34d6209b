from __future__ import annotations

from shopcart.services.notification_service import CartNotification, CartSignal

DEFAULT_LOCALE = "pt-BR"

MESSAGES: dict[str, dict[CartSignal, str]] = {
    "pt-BR": {
        CartSignal.ADD_PRODUCT_FAILED: "Erro na adição do produto",
        CartSignal.REMOVE_PRODUCT_FAILED: "Erro na remoção do produto",
        CartSignal.OUT_OF_STOCK: "Quantidade solicitada fora de estoque",
        CartSignal.UPDATE_AMOUNT_FAILED: "Erro na alteração de quantidade do produto",
        CartSignal.CORRUPT_PERSISTED_STATE: "Não foi possível recuperar o carrinho salvo",
    },
    "en-US": {
        CartSignal.ADD_PRODUCT_FAILED: "Could not add the product",
        CartSignal.REMOVE_PRODUCT_FAILED: "Could not remove the product",
        CartSignal.OUT_OF_STOCK: "Requested amount is out of stock",
        CartSignal.UPDATE_AMOUNT_FAILED: "Could not change the product amount",
        CartSignal.CORRUPT_PERSISTED_STATE: "Your saved cart could not be restored",
    },
}


def resolve_locale(locale: str | None, default: str = DEFAULT_LOCALE) -> str:
    """Pick a supported locale from a tag or an Accept-Language header value."""
    if locale:
        for candidate in locale.split(","):
            tag = candidate.split(";", 1)[0].strip()
            if not tag:
                continue
            if tag in MESSAGES:
                return tag
            language = tag.split("-", 1)[0].lower()
            for supported in MESSAGES:
                if supported.split("-", 1)[0].lower() == language:
                    return supported
    return default if default in MESSAGES else DEFAULT_LOCALE


def message_for(signal: CartSignal, locale: str | None = None) -> str:
    return MESSAGES[resolve_locale(locale)][signal]


class ToastAdapter:
    """Collects user-facing messages for failures published on the cart channel."""

    def __init__(self, locale: str = DEFAULT_LOCALE) -> None:
        self.locale = resolve_locale(locale)
        self.messages: list[str] = []

    def __call__(self, notification: CartNotification) -> None:
        self.messages.append(message_for(notification.signal, self.locale))
