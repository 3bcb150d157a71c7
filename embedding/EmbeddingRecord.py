# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-14
# Updated: 2026-01-28
# Description: EmbeddingRecord
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class BusinessEmbeddingRecord:
    """One business vector for one embedding version. Overwritten whole, never patched."""
    business_id: str
    version: str
    vector: List[float]
    last_updated: float
    source_text: Optional[str] = None

    @property
    def dimensions(self) -> int:
        return len(self.vector)
