# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-30
# Description: EmbeddingJobQueue
# -----------------------------------------------------------------------------
import dataclasses
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional

import settings
from cache.Cache import Cache
from catalog.BusinessCatalog import BusinessCatalog
from embedding.EmbeddingGenerator import EmbeddingGenerator
from jobqueue.EmbeddingJob import EmbeddingJob, JobStatus
from status.EmbeddingStatusRecord import EmbeddingStatus
from status.EmbeddingStatusTracker import EmbeddingStatusTracker
from utility.BackgroundTaskRunner import BackgroundTaskRunner
from utility.errors import DimensionMismatch, NotFound, ValidationFailure
from utility.logging_utils import get_class_logger

MIRROR_KEY_PREFIX = "embedding_job:"

# Never retried: retrying cannot change the outcome
FATAL_ERRORS = (DimensionMismatch, ValidationFailure, NotFound)


class EmbeddingJobQueue:
    """
    In-process priority queue of embedding jobs, one per business.

    Constructed once at startup and passed to whoever enqueues. The job map
    is authoritative; the cache mirror is a best-effort snapshot for
    operators and is never read back.
    """

    def __init__(
            self,
            *,
            generator: EmbeddingGenerator,
            catalog: BusinessCatalog,
            status_tracker: EmbeddingStatusTracker,
            background: BackgroundTaskRunner,
            mirror_cache: Optional[Cache] = None,
            batch_size: int = settings.QUEUE_DEFAULTS["batch_size"],
            retry_delay_seconds: float = settings.QUEUE_DEFAULTS["retry_delay_seconds"],
            max_attempts: int = settings.QUEUE_DEFAULTS["max_attempts"],
            processing_interval_seconds: float = settings.QUEUE_DEFAULTS["processing_interval_seconds"],
            concurrency: int = settings.QUEUE_DEFAULTS["concurrency"],
            mirror_ttl_ms: int = settings.QUEUE_DEFAULTS["job_mirror_ttl_ms"],
            clock: Callable[[], float] = time.time,
            logger=None,
    ):
        self.generator = generator
        self.catalog = catalog
        self.status_tracker = status_tracker
        self.background = background
        self.mirror_cache = mirror_cache
        self.batch_size = batch_size
        self.retry_delay_seconds = retry_delay_seconds
        self.max_attempts = max_attempts
        self.processing_interval_seconds = processing_interval_seconds
        self.concurrency = max(1, concurrency)
        self.mirror_ttl_ms = mirror_ttl_ms
        self._clock = clock
        self.logger = logger or get_class_logger(self.__class__)

        self._jobs: Dict[str, EmbeddingJob] = {}
        self._lock = threading.Lock()
        self._processing = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="embedding-job")
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ---- enqueue ----

    def enqueue(
            self,
            business_id: str,
            *,
            version: Optional[str] = None,
            priority: int = settings.PRIORITY_CREATE,
            force: bool = False,
    ) -> Optional[EmbeddingJob]:
        """
        Queue (re)generation for a business. Returns the live job, or None
        when nothing needs doing.
        """
        if not business_id:
            raise ValidationFailure("business_id is required")
        version = version or self.generator.version

        if not force and self._has_embedding(business_id, version):
            self.logger.debug("Business '%s' already has a %s embedding; skipping", business_id, version)
            return None

        now = self._clock()
        with self._lock:
            job = self._jobs.get(business_id)

            if job is not None and job.version == version:
                if job.status in (JobStatus.PENDING, JobStatus.RETRYING):
                    job.priority = max(job.priority, priority)
                    job.updated_at = now
                    if force and job.status == JobStatus.RETRYING:
                        job.status = JobStatus.PENDING
                        job.retry_after = None
                    self.logger.debug("Job for '%s' already queued; priority now %d", business_id, job.priority)
                    return self._snapshot(job)

                if job.status == JobStatus.PROCESSING:
                    job.rerun_requested = True
                    job.priority = max(job.priority, priority)
                    job.updated_at = now
                    self.logger.info("Job for '%s' in flight; rerun requested", business_id)
                    return self._snapshot(job)

                if job.status == JobStatus.FAILED and not force:
                    self.logger.info("Job for '%s' failed terminally; use force to retry", business_id)
                    return self._snapshot(job)

            job = EmbeddingJob(
                business_id=business_id,
                version=version,
                priority=priority,
                status=JobStatus.PENDING,
                max_attempts=self.max_attempts,
                created_at=now,
                updated_at=now,
            )
            self._jobs[business_id] = job
            snapshot = self._snapshot(job)

        self.logger.info("Enqueued embedding job for '%s' (version=%s, priority=%d, force=%s)",
                         business_id, version, priority, force)
        self.status_tracker.update_status(business_id, version, EmbeddingStatus.PENDING, attempts=0)
        self._mirror(snapshot)
        return snapshot

    def _has_embedding(self, business_id: str, version: str) -> bool:
        try:
            return self.generator.has_embedding(business_id, version)
        except Exception as e:
            self.logger.warning("Embedding lookup failed for '%s'; enqueueing anyway: %s", business_id, e)
            return False

    def on_business_created(self, business_id: str) -> None:
        """Hook for the CRUD layer. Never raises."""
        try:
            self.enqueue(business_id, priority=settings.PRIORITY_CREATE)
        except Exception as e:
            self.logger.error("Failed to enqueue embedding for new business '%s': %s", business_id, e)

    def on_business_updated(self, business_id: str) -> None:
        """Hook for the CRUD layer. Forces regeneration; never raises."""
        try:
            self.enqueue(business_id, priority=settings.PRIORITY_UPDATE, force=True)
        except Exception as e:
            self.logger.error("Failed to enqueue embedding for updated business '%s': %s", business_id, e)

    # ---- processing ----

    def _claim_batch(self) -> List[EmbeddingJob]:
        now = self._clock()
        with self._lock:
            due = [j for j in self._jobs.values() if j.is_due(now)]
            due.sort(key=lambda j: j.priority, reverse=True)
            batch = due[:self.batch_size]
            for job in batch:
                job.status = JobStatus.PROCESSING
                job.attempts += 1
                job.updated_at = now
                job.retry_after = None
            return [self._snapshot(j) for j in batch]

    def process_queue(self) -> Optional[Dict[str, int]]:
        """
        Run one tick. Returns per-outcome counts, or None when another tick
        is still running.
        """
        if not self._processing.acquire(blocking=False):
            self.logger.debug("Queue tick skipped; previous tick still running")
            return None
        try:
            batch = self._claim_batch()
            if not batch:
                return {"processed": 0, "completed": 0, "retrying": 0, "failed": 0, "requeued": 0}

            self.logger.info("Processing %d embedding job(s)", len(batch))
            futures = [self._executor.submit(self._process_job, job) for job in batch]
            wait(futures)

            outcomes = {"processed": len(batch), "completed": 0, "retrying": 0, "failed": 0, "requeued": 0}
            for fut in futures:
                outcome = fut.result()
                outcomes[outcome] += 1
            self.logger.info("Queue tick done: %s", outcomes)
            return outcomes
        finally:
            self._processing.release()

    def _process_job(self, claimed: EmbeddingJob) -> str:
        bid = claimed.business_id
        self.status_tracker.update_status(bid, claimed.version, EmbeddingStatus.PROCESSING, attempts=claimed.attempts)
        self._mirror(claimed)

        try:
            business = self.catalog.get_business(bid)
            if business is None:
                raise NotFound(f"Business '{bid}' not found")
            self.generator.generate_business_embedding(business, version=claimed.version)
        except Exception as e:
            return self._record_failure(claimed, e)

        outcome = "completed"
        snapshot = None
        with self._lock:
            job = self._jobs.get(bid)
            if job is not None and job.version == claimed.version:
                job.updated_at = self._clock()
                job.error = None
                if job.rerun_requested:
                    job.rerun_requested = False
                    job.status = JobStatus.PENDING
                    job.attempts = 0
                    outcome = "requeued"
                else:
                    job.status = JobStatus.COMPLETED
                snapshot = self._snapshot(job)

        self.status_tracker.update_status(bid, claimed.version, EmbeddingStatus.COMPLETED, attempts=claimed.attempts)
        if outcome == "requeued":
            self.logger.info("Business '%s' changed while embedding; requeued", bid)
        if snapshot is not None:
            self._mirror(snapshot)
        return outcome

    def _record_failure(self, claimed: EmbeddingJob, error: Exception) -> str:
        bid = claimed.business_id
        fatal = isinstance(error, FATAL_ERRORS)
        now = self._clock()

        with self._lock:
            job = self._jobs.get(bid)
            if job is None or job.version != claimed.version:
                return "failed"
            job.error = str(error)
            job.updated_at = now
            job.rerun_requested = False
            if not fatal and job.attempts < job.max_attempts:
                job.status = JobStatus.RETRYING
                job.retry_after = now + self.retry_delay_seconds * job.attempts
                outcome = "retrying"
            else:
                job.status = JobStatus.FAILED
                job.retry_after = None
                outcome = "failed"
            snapshot = self._snapshot(job)

        if outcome == "retrying":
            self.logger.warning(
                "Embedding job for '%s' failed (attempt %d/%d), retrying after %.1fs: %s",
                bid, snapshot.attempts, snapshot.max_attempts,
                self.retry_delay_seconds * snapshot.attempts, error,
            )
            # Tracker has no retrying state; the business is still owed a vector
            tracker_status = EmbeddingStatus.PENDING
        else:
            self.logger.error(
                "Embedding job for '%s' failed permanently after %d attempt(s): %s",
                bid, snapshot.attempts, error,
            )
            tracker_status = EmbeddingStatus.FAILED

        self.status_tracker.update_status(
            bid, snapshot.version, tracker_status, error=str(error), attempts=snapshot.attempts
        )
        self._mirror(snapshot)
        return outcome

    # ---- lifecycle ----

    def start(self) -> None:
        """Process once now, then every processing_interval_seconds."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run_loop, name="embedding-queue", daemon=True)
        self._thread.start()
        self.logger.info("Embedding queue started (interval=%.1fs, batch=%d, concurrency=%d)",
                         self.processing_interval_seconds, self.batch_size, self.concurrency)

    def _run_loop(self) -> None:
        while True:
            try:
                self.process_queue()
            except Exception as e:
                self.logger.error("Embedding queue tick crashed: %s", e, exc_info=True)
            if self._stop.wait(self.processing_interval_seconds):
                return

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            self.logger.info("Embedding queue stopped")

    def close(self) -> None:
        self.stop()
        self._executor.shutdown(wait=True)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ---- introspection ----

    @staticmethod
    def _snapshot(job: EmbeddingJob) -> EmbeddingJob:
        return dataclasses.replace(job)

    def get_job(self, business_id: str) -> Optional[EmbeddingJob]:
        with self._lock:
            job = self._jobs.get(business_id)
            return self._snapshot(job) if job else None

    def all_jobs(self) -> List[EmbeddingJob]:
        with self._lock:
            return [self._snapshot(j) for j in self._jobs.values()]

    def jobs_by_status(self, status: JobStatus) -> List[EmbeddingJob]:
        with self._lock:
            return [self._snapshot(j) for j in self._jobs.values() if j.status == status]

    def clear_completed(self) -> int:
        with self._lock:
            done = [bid for bid, j in self._jobs.items() if j.status == JobStatus.COMPLETED]
            for bid in done:
                del self._jobs[bid]
        if done:
            self.logger.info("Cleared %d completed job(s)", len(done))
        return len(done)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            jobs = list(self._jobs.values())
        out = {s.value: 0 for s in JobStatus}
        for j in jobs:
            out[j.status.value] += 1
        out["total"] = len(jobs)
        return out

    # ---- mirror ----

    def _mirror(self, job: EmbeddingJob) -> None:
        if self.mirror_cache is None:
            return
        self.background.submit(
            "mirror embedding job",
            self.mirror_cache.set,
            MIRROR_KEY_PREFIX + job.business_id,
            job.to_dict(),
            self.mirror_ttl_ms,
        )
