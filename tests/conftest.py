# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-12
# Updated: 2026-02-02
# Description: conftest.py
# -----------------------------------------------------------------------------

import hashlib
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from cache.Cache import InMemoryCache  # noqa: E402
from catalog.BusinessCatalog import InMemoryBusinessCatalog  # noqa: E402
from document.Business import Business  # noqa: E402
from embedding.EmbeddingGenerator import EmbeddingGenerator  # noqa: E402
from embedding.QueryEmbeddingCache import QueryEmbeddingCache  # noqa: E402
from jobqueue.EmbeddingJobQueue import EmbeddingJobQueue  # noqa: E402
from location.NominatimGeocodingClient import GeocodeResult  # noqa: E402
from status.EmbeddingStatusTracker import EmbeddingStatusTracker  # noqa: E402
from status.StatusRepository import InMemoryStatusRepository  # noqa: E402
from utility.BackgroundTaskRunner import BackgroundTaskRunner  # noqa: E402
from utility.errors import TransientProviderFailure  # noqa: E402
from vectorstore.InMemoryEmbeddingStore import InMemoryEmbeddingStore  # noqa: E402

MODEL_ID = "amazon.titan-embed-text-v2:0"
DIMS = 8


def hash_vector(text: str, dims: int = DIMS) -> List[float]:
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return [(digest[i % len(digest)] / 255.0) - 0.5 + 0.01 for i in range(dims)]


class FixedClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider:
    """Returns {"embedding": [...]}; can fail the first N calls."""

    provider = "fake"

    def __init__(self, dims: int = DIMS, vectors: Optional[Dict[str, List[float]]] = None):
        self.dims = dims
        self.vectors = vectors or {}
        self.calls: List[tuple] = []
        self.fail_times = 0
        self.fail_with: Exception = TransientProviderFailure("boom", provider="fake")

    def invoke(self, text: str, input_type: str):
        self.calls.append((text, input_type))
        if self.fail_times > 0:
            self.fail_times -= 1
            raise self.fail_with
        return {"embedding": self.vectors.get(text, hash_vector(text, self.dims))}


class FakeGeocoder:
    def __init__(self, forward_map=None, reverse_map=None):
        self.forward_map = forward_map or {}
        self.reverse_map = reverse_map or {}
        self.forward_calls: List[str] = []
        self.reverse_calls: List[tuple] = []
        self.reverse_error: Optional[Exception] = None

    def forward(self, address: str) -> Optional[GeocodeResult]:
        self.forward_calls.append(address)
        return self.forward_map.get(address)

    def reverse(self, lat: float, lng: float) -> Optional[str]:
        self.reverse_calls.append((lat, lng))
        if self.reverse_error is not None:
            raise self.reverse_error
        return self.reverse_map.get((lat, lng))


class FakeIPClient:
    def __init__(self, result=None):
        self.result = result
        self.calls: List[str] = []

    def lookup(self, ip_address: str):
        self.calls.append(ip_address)
        return self.result


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def businesses():
    return [
        Business(
            business_id="b1", name="Blue Tokai Coffee", description="Specialty coffee roasters",
            category="Cafe", subcategory="Coffee", tags=["coffee", "wifi"], city="Bengaluru",
            rating=4.6, latitude=12.9352, longitude=77.6245,
        ),
        Business(
            business_id="b2", name="Toit Brewpub", description="Craft beer and pizza",
            category="Restaurant", city="Bengaluru", rating=4.4, latitude=12.9791, longitude=77.6408,
        ),
        Business(
            business_id="b3", name="Leopold Cafe", description="Historic cafe",
            category="Cafe", city="Mumbai", rating=3.9, latitude=18.9225, longitude=72.8317,
        ),
    ]


@pytest.fixture
def catalog(businesses):
    return InMemoryBusinessCatalog(businesses)


@pytest.fixture
def store(clock):
    return InMemoryEmbeddingStore(clock=clock)


@pytest.fixture
def cache(clock):
    return InMemoryCache(clock=clock)


@pytest.fixture
def background():
    runner = BackgroundTaskRunner()
    yield runner
    runner.shutdown()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def query_cache(cache, clock):
    return QueryEmbeddingCache(cache=cache, ttl_ms=60_000, clock=clock)


@pytest.fixture
def generator(provider, store, query_cache, background, clock):
    return EmbeddingGenerator(
        provider=provider,
        model_id=MODEL_ID,
        store=store,
        query_cache=query_cache,
        background=background,
        expected_dimension_override=DIMS,
        max_retries=3,
        initial_retry_delay=0.0,
        clock=clock,
        sleep=lambda s: None,
    )


@pytest.fixture
def status_tracker(clock):
    return EmbeddingStatusTracker(repository=InMemoryStatusRepository(), clock=clock)


@pytest.fixture
def job_queue(generator, catalog, status_tracker, background, cache, clock):
    q = EmbeddingJobQueue(
        generator=generator,
        catalog=catalog,
        status_tracker=status_tracker,
        background=background,
        mirror_cache=cache,
        batch_size=10,
        retry_delay_seconds=5.0,
        max_attempts=3,
        processing_interval_seconds=0.05,
        concurrency=3,
        clock=clock,
    )
    yield q
    q.close()
