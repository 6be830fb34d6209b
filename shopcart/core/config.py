from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    app_name: str = "Shopcart API"
    api_prefix: str = "/v1"
    cart_storage_key: str = "@RocketShoes:cart"
    storage_backend: str = "memory"
    storage_file_path: str = ".shopcart/storage.json"
    redis_url: str = "redis://localhost:6379/0"
    inventory_backend: str = "memory"
    inventory_api_url: str = "http://localhost:3333"
    inventory_timeout_seconds: float = 10.0
    default_locale: str = "pt-BR"
    cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    @property
    def cors_origin_list(self) -> list[str]:
        origins = [value.strip() for value in self.cors_origins.split(",")]
        return [value for value in origins if value]

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            api_prefix=os.getenv("API_PREFIX", cls.api_prefix),
            cart_storage_key=os.getenv("CART_STORAGE_KEY", cls.cart_storage_key),
            storage_backend=str(os.getenv("STORAGE_BACKEND", cls.storage_backend)).strip().lower()
            or cls.storage_backend,
            storage_file_path=os.getenv("STORAGE_FILE_PATH", cls.storage_file_path),
            redis_url=os.getenv("REDIS_URL", cls.redis_url),
            inventory_backend=str(os.getenv("INVENTORY_BACKEND", cls.inventory_backend))
            .strip()
            .lower()
            or cls.inventory_backend,
            inventory_api_url=os.getenv("INVENTORY_API_URL", cls.inventory_api_url),
            inventory_timeout_seconds=max(
                0.1,
                float(
                    os.getenv(
                        "INVENTORY_TIMEOUT_SECONDS",
                        str(cls.inventory_timeout_seconds),
                    )
                ),
            ),
            default_locale=os.getenv("DEFAULT_LOCALE", cls.default_locale),
            cors_origins=os.getenv("CORS_ORIGINS", cls.cors_origins),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )
