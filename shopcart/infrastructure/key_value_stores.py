from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from threading import RLock
from typing import Any

from redis.exceptions import RedisError

from shopcart.core.errors import StoreReadFailure
from shopcart.infrastructure.persistence_clients import RedisClientManager

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.lock = RLock()
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        with self.lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> bool:
        with self.lock:
            self._values[key] = value
        return True

    def export_state(self) -> dict[str, str]:
        with self.lock:
            return dict(self._values)


class RedisKeyValueStore:
    def __init__(self, *, redis_manager: RedisClientManager) -> None:
        self.redis_manager = redis_manager

    def get(self, key: str) -> str | None:
        client = self._redis_client()
        if client is None:
            raise StoreReadFailure(key, f"redis is {self.redis_manager.status}")
        try:
            value = client.get(key)
            if isinstance(value, bytes):
                value = value.decode("utf-8")
        except RedisError as exc:
            logger.warning("Redis read failed for %s: %s", key, exc)
            raise StoreReadFailure(key, str(exc)) from exc
        except UnicodeDecodeError as exc:
            raise StoreReadFailure(key, f"value is not valid UTF-8 ({exc})") from exc
        return value

    def set(self, key: str, value: str) -> bool:
        client = self._redis_client()
        if client is None:
            return False
        try:
            client.set(key, value)
        except RedisError as exc:
            logger.warning("Redis write failed for %s: %s", key, exc)
            return False
        return True

    def _redis_client(self) -> Any | None:
        return self.redis_manager.client


class JsonFileKeyValueStore:
    """Keeps every key in a single JSON object on disk, like browser localStorage."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.lock = RLock()

    def get(self, key: str) -> str | None:
        with self.lock:
            try:
                payload = self._read_all()
            except (OSError, ValueError) as exc:
                raise StoreReadFailure(key, f"cannot read {self.path} ({exc})") from exc
        value = payload.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> bool:
        with self.lock:
            try:
                try:
                    payload = self._read_all()
                except ValueError:
                    logger.warning("File store at %s is unreadable; rewriting it", self.path)
                    payload = {}
                payload[key] = value
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self.path.with_name(f"{self.path.name}.tmp")
                tmp_path.write_text(json.dumps(payload), encoding="utf-8")
                os.replace(tmp_path, self.path)
            except OSError as exc:
                logger.warning("File store write failed for %s: %s", key, exc)
                return False
        return True

    def _read_all(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            payload = json.loads(raw)
        except RecursionError as exc:
            raise ValueError("JSON nested too deeply") from exc
        if not isinstance(payload, dict):
            raise ValueError("expected a JSON object")
        return payload
