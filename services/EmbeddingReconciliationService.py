# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-01
# Description: EmbeddingReconciliationService.py
# -----------------------------------------------------------------------------
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

import settings
from catalog.BusinessCatalog import BusinessCatalog
from embedding.EmbeddingGenerator import EmbeddingGenerator
from jobqueue.EmbeddingJob import JobStatus
from jobqueue.EmbeddingJobQueue import FATAL_ERRORS, EmbeddingJobQueue
from status.EmbeddingStatusRecord import EmbeddingStatus
from status.EmbeddingStatusTracker import EmbeddingStatusTracker
from utility.errors import NotFound
from utility.logging_utils import get_class_logger


@dataclass
class GenerationResult:
    business_id: str
    success: bool
    attempts: int
    error: Optional[str] = None


class EmbeddingReconciliationService:
    """
    Catalog-wide embedding maintenance.

    The job queue only holds in-process state, so after a restart or a model
    change this service finds businesses without a completed embedding for
    the target version and either enqueues them or generates them directly.
    """

    def __init__(
        self,
        *,
        catalog: BusinessCatalog,
        generator: EmbeddingGenerator,
        status_tracker: EmbeddingStatusTracker,
        queue: EmbeddingJobQueue,
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self.catalog = catalog
        self.generator = generator
        self.status_tracker = status_tracker
        self.queue = queue
        self._sleep = sleep
        self.logger = logger or get_class_logger(self.__class__)

    def businesses_needing_embedding(
        self,
        all_ids: Optional[Iterable[str]] = None,
        version: Optional[str] = None,
    ) -> List[str]:
        version = version or self.generator.version
        ids = list(all_ids) if all_ids is not None else self.catalog.list_business_ids()
        needing = self.status_tracker.businesses_needing_embedding(ids, version)
        self.logger.info("%d of %d business(es) need a %s embedding", len(needing), len(ids), version)
        return needing

    def enqueue_missing(self, version: Optional[str] = None, priority: int = settings.PRIORITY_CREATE) -> int:
        version = version or self.generator.version
        queued = 0
        for bid in self.businesses_needing_embedding(version=version):
            existing = self.queue.get_job(bid)
            job = self.queue.enqueue(bid, version=version, priority=priority)
            # enqueue also hands back live or terminally failed jobs; count only new ones
            if job is not None and (
                existing is None or existing.version != version or existing.status == JobStatus.COMPLETED
            ):
                queued += 1
        self.logger.info("Enqueued %d business(es) for %s", queued, version)
        return queued

    def _generate_one(self, business_id: str, version: str, max_retries: int, retry_delay: float) -> GenerationResult:
        attempts = 0
        last_error: Optional[str] = None
        while attempts < max_retries:
            attempts += 1
            self.status_tracker.update_status(business_id, version, EmbeddingStatus.PROCESSING, attempts=attempts)
            try:
                business = self.catalog.get_business(business_id)
                if business is None:
                    raise NotFound(f"Business '{business_id}' not found")
                self.generator.generate_business_embedding(business, version=version)
                self.status_tracker.update_status(business_id, version, EmbeddingStatus.COMPLETED, attempts=attempts)
                return GenerationResult(business_id=business_id, success=True, attempts=attempts)
            except FATAL_ERRORS as e:
                last_error = str(e)
                break
            except Exception as e:
                last_error = str(e)
                self.logger.warning(
                    "Embedding for '%s' failed (attempt %d/%d): %s", business_id, attempts, max_retries, e
                )
                if attempts < max_retries:
                    self._sleep(retry_delay * attempts)

        self.status_tracker.update_status(
            business_id, version, EmbeddingStatus.FAILED, error=last_error, attempts=attempts
        )
        return GenerationResult(business_id=business_id, success=False, attempts=attempts, error=last_error)

    def generate_for_businesses(
        self,
        business_ids: Iterable[str],
        *,
        version: Optional[str] = None,
        batch_size: int = settings.QUEUE_DEFAULTS["batch_size"],
        max_retries: int = settings.QUEUE_DEFAULTS["max_attempts"],
        retry_delay: float = 1.0,
    ) -> List[GenerationResult]:
        """Generate synchronously, batch_size at a time. One failure never stops the rest."""
        version = version or self.generator.version
        ids = list(dict.fromkeys(business_ids))
        batch_size = max(1, batch_size)
        max_retries = max(1, max_retries)

        results: List[GenerationResult] = []
        with ThreadPoolExecutor(max_workers=batch_size, thread_name_prefix="embedding-backfill") as pool:
            for i in range(0, len(ids), batch_size):
                batch = ids[i:i + batch_size]
                results.extend(pool.map(
                    lambda bid: self._generate_one(bid, version, max_retries, retry_delay),
                    batch,
                ))
                done = min(i + batch_size, len(ids))
                self.logger.info("Progress: %d/%d (%.1f%%)", done, len(ids), 100.0 * done / len(ids))
        return results

    def migrate_to_version(
        self,
        version: Optional[str] = None,
        *,
        regenerate: bool = False,
        dry_run: bool = False,
        batch_size: int = settings.QUEUE_DEFAULTS["batch_size"],
        max_retries: int = settings.QUEUE_DEFAULTS["max_attempts"],
        retry_delay: float = 1.0,
    ) -> Dict[str, Any]:
        version = version or self.generator.version
        all_ids = self.catalog.list_business_ids()
        targets = list(all_ids) if regenerate else self.businesses_needing_embedding(all_ids, version)

        summary: Dict[str, Any] = {
            "version": version,
            "total": len(all_ids),
            "targeted": len(targets),
            "succeeded": 0,
            "failed": 0,
            "failed_ids": [],
            "dry_run": dry_run,
        }
        if dry_run or not targets:
            return summary

        self.generator.invalidate_dimension_cache()
        results = self.generate_for_businesses(
            targets,
            version=version,
            batch_size=batch_size,
            max_retries=max_retries,
            retry_delay=retry_delay,
        )
        failed = [r.business_id for r in results if not r.success]
        summary["succeeded"] = len(results) - len(failed)
        summary["failed"] = len(failed)
        summary["failed_ids"] = failed
        self.logger.info(
            "Migration to %s done: %d succeeded, %d failed", version, summary["succeeded"], summary["failed"]
        )
        return summary
