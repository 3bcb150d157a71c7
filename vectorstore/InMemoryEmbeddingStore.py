# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: InMemoryEmbeddingStore
# -----------------------------------------------------------------------------
import threading
import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from embedding.EmbeddingRecord import BusinessEmbeddingRecord


class InMemoryEmbeddingStore:
    def __init__(self, *, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Dict[Tuple[str, str], BusinessEmbeddingRecord] = {}

    def test_connection(self) -> bool:
        return True

    def put(
            self,
            business_id: str,
            version: str,
            vector: Sequence[float],
            source_text: Optional[str] = None,
    ) -> BusinessEmbeddingRecord:
        record = BusinessEmbeddingRecord(
            business_id=business_id,
            version=version,
            vector=[float(x) for x in vector],
            last_updated=self._clock(),
            source_text=source_text,
        )
        with self._lock:
            self._records[(business_id, version)] = record
        return record

    def get(self, business_id: str, version: str) -> Optional[BusinessEmbeddingRecord]:
        with self._lock:
            return self._records.get((business_id, version))

    def get_many(self, business_ids: Sequence[str], version: str) -> Dict[str, BusinessEmbeddingRecord]:
        with self._lock:
            return {
                bid: self._records[(bid, version)]
                for bid in business_ids
                if (bid, version) in self._records
            }

    def has(self, business_id: str, version: str) -> bool:
        with self._lock:
            return (business_id, version) in self._records

    def sample(self, version: str) -> Optional[BusinessEmbeddingRecord]:
        with self._lock:
            for (_, v), record in self._records.items():
                if v == version:
                    return record
        return None

    def list_business_ids(self, version: str) -> List[str]:
        with self._lock:
            return [bid for (bid, v) in self._records if v == version]

    def delete(self, business_id: str, version: str) -> bool:
        with self._lock:
            return self._records.pop((business_id, version), None) is not None
