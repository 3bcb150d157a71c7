# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-02
# Description: test_embedding_job_queue.py
# -----------------------------------------------------------------------------
import threading
import time

from document.Business import Business
from jobqueue.EmbeddingJob import JobStatus
from jobqueue.EmbeddingJobQueue import MIRROR_KEY_PREFIX
from status.EmbeddingStatusRecord import EmbeddingStatus
from utility.errors import DimensionMismatch


def test_duplicate_enqueue_keeps_one_job_with_max_priority(job_queue):
    job_queue.enqueue("b1", priority=1)
    job_queue.enqueue("b1", priority=2)
    job_queue.enqueue("b1", priority=1)

    jobs = job_queue.all_jobs()
    assert len(jobs) == 1
    assert jobs[0].status == JobStatus.PENDING
    assert jobs[0].priority == 2


def test_enqueue_is_noop_when_embedding_exists(job_queue, generator, store, provider):
    store.put("b1", generator.version, [0.1] * 8)

    assert job_queue.enqueue("b1", force=False) is None
    assert job_queue.all_jobs() == []
    assert job_queue.process_queue()["processed"] == 0
    assert provider.calls == []


def test_forced_enqueue_regenerates_existing_embedding(job_queue, generator, store, provider):
    store.put("b1", generator.version, [0.1] * 8)

    assert job_queue.enqueue("b1", force=True) is not None
    job_queue.process_queue()
    assert job_queue.get_job("b1").status == JobStatus.COMPLETED
    assert len(provider.calls) == 1


def test_successful_job_completes_and_updates_status(job_queue, generator, store, status_tracker, cache, background):
    job_queue.enqueue("b1")
    outcome = job_queue.process_queue()
    background.flush()

    assert outcome["completed"] == 1
    job = job_queue.get_job("b1")
    assert job.status == JobStatus.COMPLETED
    assert job.attempts == 1
    assert job.error is None
    assert store.has("b1", generator.version)

    record = status_tracker.get_status("b1", generator.version)
    assert record.status == EmbeddingStatus.COMPLETED
    assert record.has_embedding is True
    assert record.last_generated is not None

    assert cache.get(MIRROR_KEY_PREFIX + "b1")["status"] == "completed"


def test_batch_is_taken_in_priority_order(job_queue, catalog):
    for i in range(5):
        catalog.put_business(Business(business_id=f"x{i}", name=f"Shop {i}"))
    job_queue.batch_size = 2
    job_queue.enqueue("x0", priority=1)
    job_queue.enqueue("x1", priority=3)
    job_queue.enqueue("x2", priority=2)
    job_queue.enqueue("x3", priority=1)

    job_queue.process_queue()
    done = {j.business_id for j in job_queue.jobs_by_status(JobStatus.COMPLETED)}
    assert done == {"x1", "x2"}


def test_failure_retries_with_linear_backoff(job_queue, provider, clock, status_tracker, generator):
    provider.fail_times = 3  # exhausts one call-level retry loop
    job_queue.enqueue("b1")

    assert job_queue.process_queue()["retrying"] == 1
    job = job_queue.get_job("b1")
    assert job.status == JobStatus.RETRYING
    assert job.retry_after == clock.now + 5.0 * 1
    assert status_tracker.get_status("b1", generator.version).status == EmbeddingStatus.PENDING

    # not due yet
    assert job_queue.process_queue()["processed"] == 0

    clock.advance(5.0)
    assert job_queue.process_queue()["completed"] == 1
    assert job_queue.get_job("b1").attempts == 2


def test_job_fails_terminally_after_max_attempts(job_queue, provider, clock, status_tracker, generator):
    provider.fail_times = 10_000
    job_queue.enqueue("b1")

    for _ in range(3):
        job_queue.process_queue()
        clock.advance(60)

    job = job_queue.get_job("b1")
    assert job.status == JobStatus.FAILED
    assert job.attempts == 3
    assert "boom" in job.error
    assert status_tracker.get_status("b1", generator.version).status == EmbeddingStatus.FAILED

    # stays failed: more ticks and a non-forced enqueue change nothing
    clock.advance(60)
    assert job_queue.process_queue()["processed"] == 0
    job_queue.enqueue("b1", force=False)
    assert job_queue.get_job("b1").status == JobStatus.FAILED

    # explicit force brings it back
    provider.fail_times = 0
    job_queue.enqueue("b1", force=True)
    assert job_queue.get_job("b1").status == JobStatus.PENDING
    job_queue.process_queue()
    assert job_queue.get_job("b1").status == JobStatus.COMPLETED


def test_dimension_mismatch_is_not_retried(job_queue, generator, provider):
    provider.fail_times = 1
    provider.fail_with = DimensionMismatch(expected=1024, actual=1536, model_id="m")
    job_queue.enqueue("b1")
    job_queue.process_queue()

    job = job_queue.get_job("b1")
    assert job.status == JobStatus.FAILED
    assert job.attempts == 1
    assert len(provider.calls) == 1


def test_missing_business_fails_terminally(job_queue):
    job_queue.enqueue("ghost")
    assert job_queue.process_queue()["failed"] == 1
    assert job_queue.get_job("ghost").status == JobStatus.FAILED


def test_one_failure_does_not_abort_siblings(job_queue):
    job_queue.enqueue("ghost")
    job_queue.enqueue("b1")
    job_queue.enqueue("b2")
    outcome = job_queue.process_queue()
    assert outcome == {"processed": 3, "completed": 2, "retrying": 0, "failed": 1, "requeued": 0}


def test_enqueue_while_processing_requests_rerun(job_queue, generator, catalog):
    started = threading.Event()
    release = threading.Event()
    original = generator.generate_business_embedding

    def slow(business, version=None):
        started.set()
        release.wait(5)
        return original(business, version=version)

    generator.generate_business_embedding = slow
    job_queue.enqueue("b1")

    worker = threading.Thread(target=job_queue.process_queue)
    worker.start()
    assert started.wait(5)

    # a second tick while the first is running is skipped
    assert job_queue.process_queue() is None

    job_queue.enqueue("b1", priority=2, force=True)
    assert job_queue.get_job("b1").rerun_requested is True

    release.set()
    worker.join(5)

    job = job_queue.get_job("b1")
    assert job.status == JobStatus.PENDING
    assert job.priority == 2


def test_introspection_and_clear_completed(job_queue):
    job_queue.enqueue("b1")
    job_queue.enqueue("b2")
    job_queue.process_queue()
    job_queue.enqueue("b3")

    stats = job_queue.stats()
    assert stats["completed"] == 2
    assert stats["pending"] == 1
    assert stats["total"] == 3

    assert job_queue.clear_completed() == 2
    assert [j.business_id for j in job_queue.all_jobs()] == ["b3"]


def test_hooks_never_raise(job_queue):
    job_queue.on_business_created("")  # invalid id is logged, not raised
    job_queue.on_business_updated("b1")
    job = job_queue.get_job("b1")
    assert job.priority == 2


def test_background_loop_processes_jobs(job_queue, generator, store):
    job_queue.enqueue("b1")
    job_queue.start()
    try:
        deadline = time.time() + 5
        while time.time() < deadline and not store.has("b1", generator.version):
            time.sleep(0.01)
    finally:
        job_queue.stop(timeout=5)
    assert store.has("b1", generator.version)
    assert not job_queue.is_running
