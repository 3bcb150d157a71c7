# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: Cache
# -----------------------------------------------------------------------------
import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class Cache(Protocol):
    """Generic key/value cache. Values are JSON-compatible; ttl in milliseconds."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...


class InMemoryCache:
    """
    Process-local TTL map. Expired keys read as absent and are dropped lazily.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._data: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            value, expires_at = item
            if expires_at is not None and self._clock() >= expires_at:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl_ms / 1000.0 if ttl_ms else None
        with self._lock:
            self._data[key] = (value, expires_at)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
