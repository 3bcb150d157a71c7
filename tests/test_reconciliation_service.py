# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-02
# Description: test_reconciliation_service.py
# -----------------------------------------------------------------------------
import pytest

from conftest import DIMS, FakeProvider, hash_vector
from document.Business import Business
from jobqueue.EmbeddingJob import JobStatus
from services.EmbeddingReconciliationService import EmbeddingReconciliationService
from status.EmbeddingStatusRecord import EmbeddingStatus
from utility.errors import ValidationFailure


class ShortVectorFor(FakeProvider):
    """Returns a wrong-sized vector for any text containing the marker."""

    def __init__(self, marker: str):
        super().__init__()
        self.marker = marker

    def invoke(self, text, input_type):
        if self.marker in text:
            self.calls.append((text, input_type))
            return {"embedding": hash_vector(text, DIMS // 2)}
        return super().invoke(text, input_type)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def service(catalog, generator, status_tracker, job_queue, sleeps):
    return EmbeddingReconciliationService(
        catalog=catalog,
        generator=generator,
        status_tracker=status_tracker,
        queue=job_queue,
        sleep=sleeps.append,
    )


def test_needing_uses_completed_status(service, status_tracker, generator):
    status_tracker.update_status("b1", generator.version, EmbeddingStatus.COMPLETED)
    assert service.businesses_needing_embedding() == ["b2", "b3"]


def test_enqueue_missing(service, job_queue):
    assert service.enqueue_missing() == 3
    assert sorted(j.business_id for j in job_queue.jobs_by_status(JobStatus.PENDING)) == ["b1", "b2", "b3"]


def test_enqueue_missing_does_not_recount_queued_jobs(service, job_queue):
    assert service.enqueue_missing() == 3
    assert service.enqueue_missing() == 0
    assert len(job_queue.jobs_by_status(JobStatus.PENDING)) == 3


def test_enqueue_missing_skips_terminally_failed_job(service, job_queue, catalog):
    catalog.delete_business("b3")
    assert job_queue.enqueue("b3") is not None
    job_queue.process_queue()
    assert job_queue.get_job("b3").status == JobStatus.FAILED

    catalog.put_business(Business(business_id="b3", name="Leopold Cafe", category="Cafe", city="Mumbai"))
    assert service.enqueue_missing() == 2
    assert job_queue.get_job("b3").status == JobStatus.FAILED


def test_migrate_generates_all_then_nothing(service, store, status_tracker, generator):
    summary = service.migrate_to_version()
    assert summary == {
        "version": generator.version,
        "total": 3,
        "targeted": 3,
        "succeeded": 3,
        "failed": 0,
        "failed_ids": [],
        "dry_run": False,
    }
    assert sorted(store.list_business_ids(generator.version)) == ["b1", "b2", "b3"]
    assert status_tracker.get_status("b2", generator.version).status == EmbeddingStatus.COMPLETED

    again = service.migrate_to_version()
    assert again["targeted"] == 0
    assert again["succeeded"] == 0


def test_regenerate_targets_everything(service, provider):
    service.migrate_to_version()
    calls_before = len(provider.calls)
    summary = service.migrate_to_version(regenerate=True)
    assert summary["targeted"] == 3
    assert summary["succeeded"] == 3
    assert len(provider.calls) == calls_before + 3


def test_dry_run_generates_nothing(service, provider, store, generator):
    summary = service.migrate_to_version(dry_run=True)
    assert summary["dry_run"] is True
    assert summary["targeted"] == 3
    assert provider.calls == []
    assert store.list_business_ids(generator.version) == []


def test_new_version_is_separate(service, store):
    service.migrate_to_version()
    summary = service.migrate_to_version("cohere-embed-english-v3")
    assert summary["targeted"] == 3
    assert sorted(store.list_business_ids("cohere-embed-english-v3")) == ["b1", "b2", "b3"]


def test_transient_failure_retried_with_linear_backoff(service, provider, status_tracker, generator, sleeps):
    # generator exhausts its 3 provider attempts once, then succeeds on the next pass
    provider.fail_times = 4
    [result] = service.generate_for_businesses(["b1"], max_retries=3, retry_delay=0.5)

    assert result.success is True
    assert result.attempts == 2
    assert sleeps == [0.5]
    rec = status_tracker.get_status("b1", generator.version)
    assert rec.status == EmbeddingStatus.COMPLETED
    assert rec.attempts == 2


def test_exhausted_retries_mark_failed(service, provider, status_tracker, generator, sleeps):
    provider.fail_times = 100
    [result] = service.generate_for_businesses(["b1"], max_retries=2, retry_delay=1.0)

    assert result.success is False
    assert result.attempts == 2
    assert sleeps == [1.0]
    rec = status_tracker.get_status("b1", generator.version)
    assert rec.status == EmbeddingStatus.FAILED
    assert "boom" in rec.error


def test_fatal_error_is_not_retried(service, provider, sleeps):
    provider.fail_times = 1
    provider.fail_with = ValidationFailure("input too long")
    [result] = service.generate_for_businesses(["b1"], max_retries=3)

    assert result.success is False
    assert result.attempts == 1
    assert sleeps == []


def test_missing_business_fails(service, status_tracker, generator):
    [result] = service.generate_for_businesses(["ghost"])
    assert result.success is False
    assert result.attempts == 1
    assert "not found" in result.error
    assert status_tracker.get_status("ghost", generator.version).status == EmbeddingStatus.FAILED


def test_one_failure_does_not_stop_the_rest(catalog, store, query_cache, background, status_tracker, job_queue, clock):
    from embedding.EmbeddingGenerator import EmbeddingGenerator

    generator = EmbeddingGenerator(
        provider=ShortVectorFor("Leopold"),
        model_id="amazon.titan-embed-text-v2:0",
        store=store,
        query_cache=query_cache,
        background=background,
        expected_dimension_override=DIMS,
        initial_retry_delay=0.0,
        clock=clock,
        sleep=lambda s: None,
    )
    service = EmbeddingReconciliationService(
        catalog=catalog,
        generator=generator,
        status_tracker=status_tracker,
        queue=job_queue,
        sleep=lambda s: None,
    )

    summary = service.migrate_to_version(batch_size=2)
    assert summary["succeeded"] == 2
    assert summary["failed"] == 1
    assert summary["failed_ids"] == ["b3"]
