# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-30
# Description: EmbeddingStatusTracker
# -----------------------------------------------------------------------------
import time
from typing import Callable, Dict, Iterable, List, Optional

from status.EmbeddingStatusRecord import EmbeddingStatus, EmbeddingStatusRecord
from status.StatusRepository import StatusRepository
from utility.logging_utils import get_class_logger


class EmbeddingStatusTracker:
    """
    Per-business embedding status, per version.

    Writes are best-effort: a failed write is logged and swallowed. The
    tracker is diagnostic; the embedding store decides whether a vector exists.
    """

    def __init__(
            self,
            *,
            repository: StatusRepository,
            clock: Callable[[], float] = time.time,
            logger=None,
    ):
        self.repository = repository
        self._clock = clock
        self.logger = logger or get_class_logger(self.__class__)

    def get_status(self, business_id: str, version: str) -> Optional[EmbeddingStatusRecord]:
        return self.repository.get(business_id, version)

    def update_status(
            self,
            business_id: str,
            version: str,
            status: EmbeddingStatus,
            *,
            error: Optional[str] = None,
            attempts: Optional[int] = None,
    ) -> None:
        try:
            now = self._clock()
            existing = self.repository.get(business_id, version)
            record = EmbeddingStatusRecord(
                business_id=business_id,
                version=version,
                status=status,
                has_embedding=existing.has_embedding if existing else False,
                last_generated=existing.last_generated if existing else None,
                last_updated=now,
                error=error,
                attempts=attempts if attempts is not None else (existing.attempts if existing else 0),
            )
            if status == EmbeddingStatus.COMPLETED:
                record.has_embedding = True
                record.last_generated = now
                record.error = None
            self.repository.upsert(record)
        except Exception as e:
            self.logger.warning(
                "Failed to record status %s for '%s' (version=%s): %s",
                getattr(status, "value", status),
                business_id,
                version,
                e,
            )

    def businesses_needing_embedding(self, all_ids: Iterable[str], version: str) -> List[str]:
        """Ids without a completed status row for the version. Metadata only."""
        done = self._completed_ids(version)
        return [bid for bid in all_ids if bid not in done]

    def businesses_with_embeddings(self, version: str) -> List[str]:
        return sorted(
            r.business_id
            for r in self.repository.list_by_version(version)
            if r.has_embedding
        )

    def businesses_without_embeddings(self, all_ids: Iterable[str], version: str) -> List[str]:
        have = set(self.businesses_with_embeddings(version))
        return [bid for bid in all_ids if bid not in have]

    def _completed_ids(self, version: str) -> set:
        return {
            r.business_id
            for r in self.repository.list_by_version(version)
            if r.status == EmbeddingStatus.COMPLETED
        }

    def stats(self, version: str, all_ids: Optional[Iterable[str]] = None) -> Dict[str, int]:
        rows = self.repository.list_by_version(version)
        counts = {s.value: 0 for s in EmbeddingStatus}
        with_embeddings = 0
        for r in rows:
            counts[r.status.value] += 1
            if r.has_embedding:
                with_embeddings += 1

        total = len(set(all_ids)) if all_ids is not None else len(rows)
        return {
            "total": total,
            "completed": counts["completed"],
            "pending": counts["pending"],
            "processing": counts["processing"],
            "failed": counts["failed"],
            "with_embeddings": with_embeddings,
            "without_embeddings": max(0, total - with_embeddings),
        }
