# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-30
# Description: EmbeddingStatusRecord
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EmbeddingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class EmbeddingStatusRecord:
    """
    Diagnostic view of one business's embedding for one version.
    completed implies has_embedding and a stored vector for that version.
    """
    business_id: str
    version: str
    status: EmbeddingStatus
    has_embedding: bool = False
    last_generated: Optional[float] = None
    last_updated: float = 0.0
    error: Optional[str] = None
    attempts: int = 0
