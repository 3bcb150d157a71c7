# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-02
# Description: test_embedding_generator.py
# -----------------------------------------------------------------------------
import pytest

from conftest import DIMS, MODEL_ID, FakeProvider
from document.Business import Business
from embedding.EmbeddingGenerator import EmbeddingGenerator, build_business_text
from embedding.EmbeddingModels import derive_version, dimensions_for_model, input_type_for
from embedding.QueryEmbeddingCache import KEY_PREFIX, query_hash
from utility.errors import DimensionMismatch, TransientProviderFailure, ValidationFailure


def _generator(provider, store, query_cache, background, clock, override=0):
    return EmbeddingGenerator(
        provider=provider,
        model_id=MODEL_ID,
        store=store,
        query_cache=query_cache,
        background=background,
        expected_dimension_override=override,
        initial_retry_delay=0.0,
        clock=clock,
        sleep=lambda s: None,
    )


# ---- business text ----

def test_business_text_joins_non_empty_segments():
    b = Business(
        business_id="x", name="Blue Tokai", description="  Coffee roasters  ",
        category="Cafe", subcategory="Coffee", tags=["coffee", "", "wifi"],
    )
    assert build_business_text(b) == (
        "Blue Tokai. Coffee roasters. Category: Cafe. Subcategory: Coffee. Tags: coffee, wifi"
    )


def test_business_text_omits_empty_segments():
    b = Business(business_id="x", name="Corner Shop", category="Grocery")
    assert build_business_text(b) == "Corner Shop. Category: Grocery"


def test_business_text_truncates_with_ellipsis():
    b = Business(business_id="x", name="N", description="d" * 2000)
    text = build_business_text(b)
    assert len(text) == 1000
    assert text.endswith("...")


# ---- model helpers ----

def test_version_is_derived_from_model_id():
    assert derive_version("amazon.titan-embed-text-v1") == "amazon-titan-embed-text-v1"
    assert derive_version("amazon.titan-embed-text-v2:0") == "amazon-titan-embed-text-v2-0"
    assert derive_version("Cohere.Embed-English-v3") == "cohere-embed-english-v3"


def test_model_dimension_table():
    assert dimensions_for_model("amazon.titan-embed-text-v1") == 1536
    assert dimensions_for_model("amazon.titan-embed-text-v2:0") == 1024
    assert dimensions_for_model("cohere.embed-multilingual-v3") == 1024
    assert dimensions_for_model("text-embedding-3-large") == 3072
    assert dimensions_for_model("something-else") == 1024


# ---- expected dimension ----

def test_expected_dimension_sampled_from_store(store, query_cache, background, clock):
    gen = _generator(FakeProvider(dims=16), store, query_cache, background, clock)
    store.put("b1", gen.version, [0.1] * 16)
    assert gen.get_expected_dimension() == 16


def test_expected_dimension_falls_back_to_model_table(store, query_cache, background, clock):
    gen = _generator(FakeProvider(), store, query_cache, background, clock)
    assert gen.get_expected_dimension() == 1024


def test_expected_dimension_is_cached_for_ttl(store, query_cache, background, clock):
    gen = _generator(FakeProvider(), store, query_cache, background, clock)
    assert gen.get_expected_dimension() == 1024

    store.put("b1", gen.version, [0.1] * 16)
    assert gen.get_expected_dimension() == 1024

    clock.advance(301)
    assert gen.get_expected_dimension() == 16


# ---- generation ----

def test_generate_returns_vector_and_uses_input_type(generator, provider):
    vec = generator.generate("hello", "query")
    assert len(vec) == DIMS
    assert provider.calls == [("hello", "search_query")]


def test_generate_rejects_empty_text(generator, provider):
    with pytest.raises(ValidationFailure):
        generator.generate("   ", "document")
    assert provider.calls == []


def test_unknown_kind_is_a_validation_failure(generator, provider):
    with pytest.raises(ValidationFailure):
        input_type_for("image")
    with pytest.raises(ValidationFailure):
        generator.generate("espresso bar", kind="image")
    assert provider.calls == []


def test_transient_failures_are_retried(generator, provider):
    provider.fail_times = 2
    vec = generator.generate("hello", "document")
    assert len(vec) == DIMS
    assert len(provider.calls) == 3


def test_transient_failure_surfaces_after_retries(generator, provider):
    provider.fail_times = 10
    with pytest.raises(TransientProviderFailure):
        generator.generate("hello", "document")
    assert len(provider.calls) == 3


def test_generate_business_embedding_writes_through(generator, store, businesses):
    record = generator.generate_business_embedding(businesses[0])
    stored = store.get("b1", generator.version)
    assert stored is not None
    assert stored.vector == record.vector
    assert stored.source_text.startswith("Blue Tokai Coffee")


# ---- query path ----

def test_query_embedding_is_cached_and_reused(generator, provider, background):
    first = generator.generate_query_embedding("  Coffee  Shops ")
    background.flush()
    second = generator.generate_query_embedding("coffee shops")
    assert first == second
    assert len(provider.calls) == 1


def test_cached_vector_with_wrong_dimension_is_regenerated(generator, provider, query_cache):
    query_cache.put("coffee", [0.5] * (DIMS + 1), MODEL_ID)
    vec = generator.generate_query_embedding("coffee")
    assert len(vec) == DIMS
    assert len(provider.calls) == 1


def test_cache_write_failure_does_not_fail_caller(generator, query_cache, background):
    def broken_put(*args, **kwargs):
        raise ConnectionError("cache down")

    query_cache.put = broken_put
    vec = generator.generate_query_embedding("coffee")
    background.flush()
    assert len(vec) == DIMS


def test_dimension_mismatch_is_raised_and_nothing_is_cached_or_stored(store, query_cache, cache, background, clock):
    # catalog holds 1024-d vectors; the model now produces 1536-d
    provider = FakeProvider(dims=1536)
    gen = _generator(provider, store, query_cache, background, clock)
    store.put("b1", gen.version, [0.01] * 1024)

    with pytest.raises(DimensionMismatch) as exc:
        gen.generate_query_embedding("coffee shops")
    background.flush()

    assert exc.value.expected == 1024
    assert exc.value.actual == 1536
    assert cache.get(KEY_PREFIX + query_hash("coffee shops")) is None
    assert len(provider.calls) == 1

    with pytest.raises(DimensionMismatch):
        gen.generate_business_embedding(Business(business_id="b2", name="New Place"))
    assert store.get("b2", gen.version) is None


def test_validate_embedding_dimensions_reports_mismatch(store, query_cache, background, clock):
    gen = _generator(FakeProvider(dims=1536), store, query_cache, background, clock)
    store.put("b1", gen.version, [0.01] * 1024)

    report = gen.validate_embedding_dimensions()
    assert report["valid"] is False
    assert report["query_dimensions"] == 1536
    assert report["business_dimensions"] == 1024
    assert "1024" in report["recommendation"]


def test_validate_embedding_dimensions_ok(generator):
    report = generator.validate_embedding_dimensions()
    assert report["valid"] is True
    assert report["query_dimensions"] == DIMS
