# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-29
# Description: QueryEmbeddingCache
# -----------------------------------------------------------------------------
import hashlib
import re
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional

from cache.Cache import Cache
from utility.logging_utils import get_class_logger

_WS = re.compile(r"\s+")

KEY_PREFIX = "query_embedding:"


def normalize_query(query: str) -> str:
    """'  Coffee   Shops ' -> 'coffee shops'"""
    return _WS.sub(" ", query.strip().lower())


def query_hash(query: str) -> str:
    return hashlib.sha256(normalize_query(query).encode("utf-8")).hexdigest()


@dataclass
class QueryEmbeddingCacheEntry:
    query_hash: str
    normalized_query: str
    vector: List[float]
    model_id: str
    created_at: float
    expires_at: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryEmbeddingCacheEntry":
        return cls(
            query_hash=data["query_hash"],
            normalized_query=data["normalized_query"],
            vector=[float(x) for x in data["vector"]],
            model_id=data["model_id"],
            created_at=float(data["created_at"]),
            expires_at=float(data["expires_at"]),
        )


class QueryEmbeddingCache:
    """
    Query text -> vector, keyed by the sha256 of the normalized query.

    Readers treat expired entries as absent but never delete them; expiry
    belongs to the backing cache's TTL.
    """

    def __init__(
            self,
            *,
            cache: Cache,
            ttl_ms: int,
            clock: Callable[[], float] = time.time,
            logger=None,
    ):
        self.cache = cache
        self.ttl_ms = ttl_ms
        self._clock = clock
        self.logger = logger or get_class_logger(self.__class__)

    def get(self, query: str, model_id: str) -> Optional[QueryEmbeddingCacheEntry]:
        key = KEY_PREFIX + query_hash(query)
        try:
            raw = self.cache.get(key)
        except Exception as e:
            self.logger.warning("Query cache read failed for %s: %s", key, e)
            return None
        if not raw:
            return None

        try:
            entry = QueryEmbeddingCacheEntry.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            self.logger.warning("Discarding malformed query cache entry %s: %s", key, e)
            return None

        if entry.expires_at <= self._clock():
            return None
        if entry.model_id != model_id:
            self.logger.debug("Query cache entry %s was built by %s, not %s", key, entry.model_id, model_id)
            return None
        return entry

    def put(self, query: str, vector: List[float], model_id: str) -> QueryEmbeddingCacheEntry:
        now = self._clock()
        normalized = normalize_query(query)
        entry = QueryEmbeddingCacheEntry(
            query_hash=query_hash(normalized),
            normalized_query=normalized,
            vector=list(vector),
            model_id=model_id,
            created_at=now,
            expires_at=now + self.ttl_ms / 1000.0,
        )
        self.cache.set(KEY_PREFIX + entry.query_hash, entry.to_dict(), self.ttl_ms)
        return entry
