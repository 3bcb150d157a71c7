# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-31
# Description: SimilarityCache
# -----------------------------------------------------------------------------
import threading
from typing import Dict, Optional, Sequence, Tuple

PREFIX_LEN = 10

CacheKey = Tuple[Tuple[float, ...], str]


class SimilarityCache:
    """
    Memoised (query prefix, business) -> score.

    Bounded, insert-if-room: once full, new keys are simply not stored and
    nothing already cached is evicted.
    """

    def __init__(self, max_size: int = 10000):
        self.max_size = max_size
        self._data: Dict[CacheKey, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(query_vector: Sequence[float], business_id: str) -> CacheKey:
        return tuple(float(x) for x in query_vector[:PREFIX_LEN]), business_id

    def get(self, query_vector: Sequence[float], business_id: str) -> Optional[float]:
        with self._lock:
            return self._data.get(self.key(query_vector, business_id))

    def put(self, query_vector: Sequence[float], business_id: str, score: float) -> bool:
        k = self.key(query_vector, business_id)
        with self._lock:
            if k in self._data:
                self._data[k] = score
                return True
            if len(self._data) >= self.max_size:
                return False
            self._data[k] = score
            return True

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
