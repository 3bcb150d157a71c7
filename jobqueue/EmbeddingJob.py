# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-30
# Description: EmbeddingJob
# -----------------------------------------------------------------------------
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    RETRYING = "retrying"


@dataclass
class EmbeddingJob:
    business_id: str
    version: str
    priority: int
    status: JobStatus
    max_attempts: int
    created_at: float
    updated_at: float
    attempts: int = 0
    error: Optional[str] = None
    retry_after: Optional[float] = None
    rerun_requested: bool = False

    def is_due(self, now: float) -> bool:
        if self.status == JobStatus.PENDING:
            return True
        return (
            self.status == JobStatus.RETRYING
            and self.retry_after is not None
            and now >= self.retry_after
        )

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["status"] = self.status.value
        return d
