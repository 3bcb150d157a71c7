# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: EmbeddingStore
# -----------------------------------------------------------------------------

from typing import Dict, List, Optional, Protocol, Sequence, runtime_checkable

from embedding.EmbeddingRecord import BusinessEmbeddingRecord


@runtime_checkable
class EmbeddingStore(Protocol):
    """Versioned business -> vector persistence keyed by (business_id, version)."""

    def test_connection(self) -> bool:
        ...

    def put(
            self,
            business_id: str,
            version: str,
            vector: Sequence[float],
            source_text: Optional[str] = None,
    ) -> BusinessEmbeddingRecord:
        ...

    def get(self, business_id: str, version: str) -> Optional[BusinessEmbeddingRecord]:
        ...

    def get_many(self, business_ids: Sequence[str], version: str) -> Dict[str, BusinessEmbeddingRecord]:
        ...

    def has(self, business_id: str, version: str) -> bool:
        ...

    def sample(self, version: str) -> Optional[BusinessEmbeddingRecord]:
        ...

    def list_business_ids(self, version: str) -> List[str]:
        ...

    def delete(self, business_id: str, version: str) -> bool:
        ...
