from __future__ import annotations

import logging
from dataclasses import dataclass, field

import redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


@dataclass
class RedisClientManager:
    """Owns the one Redis connection behind the ``redis`` storage backend."""

    url: str
    enabled: bool
    socket_timeout: float = 2.0
    _client: redis.Redis | None = field(default=None, repr=False)
    _last_error: str | None = None

    def connect(self) -> bool:
        if not self.enabled:
            return False
        client = redis.from_url(self.url, socket_timeout=self.socket_timeout, decode_responses=True)
        try:
            client.ping()
        except RedisError as exc:
            logger.warning("Redis at %s is unreachable, cart reads will fail: %s", self.url, exc)
            client.close()
            self._client = None
            self._last_error = str(exc)
            return False
        self._client = client
        self._last_error = None
        return True

    def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            client.close()

    @property
    def status(self) -> str:
        if not self.enabled:
            return "disabled"
        return "unavailable" if self._client is None else "connected"

    @property
    def error(self) -> str | None:
        return self._last_error

    @property
    def client(self) -> redis.Redis | None:
        return self._client
