# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: RedisCache
# -----------------------------------------------------------------------------
import json
from typing import Any, Optional

from redis import Redis

from utility.logging_utils import get_class_logger


class RedisCache:
    """Cache backed by redis-py. Values are stored as JSON strings."""

    def __init__(
            self,
            *,
            url: str = "",
            client: Optional[Redis] = None,
            key_prefix: str = "bizsearch:",
            connect_timeout_seconds: float = 2.0,
            socket_timeout_seconds: float = 2.0,
            max_connections: int = 20,
            logger=None,
    ):
        self.logger = logger or get_class_logger(self.__class__)
        self.key_prefix = key_prefix
        if client is None:
            if not url:
                raise ValueError("RedisCache requires a url or a client")
            client = Redis.from_url(
                url=url,
                socket_connect_timeout=connect_timeout_seconds,
                socket_timeout=socket_timeout_seconds,
                max_connections=max_connections,
                decode_responses=True,
                encoding="utf-8",
            )
        self._client = client
        self.logger.info("Redis cache ready (prefix=%s)", key_prefix)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        raw = self._client.get(name=self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        payload = json.dumps(value)
        if ttl_ms:
            self._client.set(name=self._key(key), value=payload, px=int(ttl_ms))
            return
        self._client.set(name=self._key(key), value=payload)

    def delete(self, key: str) -> bool:
        return bool(self._client.delete(self._key(key)))

    def test_connection(self) -> bool:
        try:
            return bool(self._client.ping())
        except Exception as e:
            self.logger.error("Redis connection failed: %s", e)
            return False
