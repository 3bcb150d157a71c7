# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-29
# Description: EmbeddingGenerator
# -----------------------------------------------------------------------------
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Protocol

import settings
from document.Business import Business
from embedding import EmbeddingResponse
from embedding.EmbeddingModels import derive_version, dimensions_for_model, input_type_for
from embedding.EmbeddingRecord import BusinessEmbeddingRecord
from embedding.QueryEmbeddingCache import QueryEmbeddingCache, normalize_query
from utility.BackgroundTaskRunner import BackgroundTaskRunner
from utility.RateLimiter import RateLimiter
from utility.errors import DimensionMismatch, TransientProviderFailure, ValidationFailure
from utility.logging_utils import get_class_logger
from vectorstore.EmbeddingStore import EmbeddingStore


class EmbeddingProvider(Protocol):
    provider: str

    def invoke(self, text: str, input_type: str) -> Dict[str, Any]:
        ...


def build_business_text(business: Business, max_chars: int = 1000) -> str:
    """
    Canonical text embedded for a business:
    "<name>. <description>. Category: X. Subcategory: Y. Tags: a, b"
    """
    parts: List[str] = []
    if business.name:
        parts.append(business.name)
    if business.description and business.description.strip():
        parts.append(business.description.strip())
    if business.category:
        parts.append(f"Category: {business.category}")
    if business.subcategory:
        parts.append(f"Subcategory: {business.subcategory}")
    tags = [t for t in (business.tags or []) if t and t.strip()]
    if tags:
        parts.append(f"Tags: {', '.join(tags)}")

    text = ". ".join(parts)
    if not text:
        text = business.name or ""

    if len(text) > max_chars:
        text = text[:max_chars - 3] + "..."
    return text


class EmbeddingGenerator:
    """
    Turns business records and queries into vectors with one model.

    Every vector is checked against the catalog's expected dimension before
    it is returned, stored, or cached. A mismatch raises DimensionMismatch
    and is never retried.
    """

    def __init__(
            self,
            *,
            provider: EmbeddingProvider,
            model_id: str,
            store: EmbeddingStore,
            query_cache: QueryEmbeddingCache,
            background: BackgroundTaskRunner,
            rate_limiter: Optional[RateLimiter] = None,
            expected_dimension_override: int = settings.EXPECTED_DIMENSION_OVERRIDE,
            dimension_cache_ttl_seconds: float = settings.DIMENSION_CACHE_TTL_SECONDS,
            max_retries: int = settings.PROVIDER_MAX_RETRIES,
            initial_retry_delay: float = settings.PROVIDER_INITIAL_RETRY_DELAY_SECONDS,
            text_max_chars: int = settings.BUSINESS_TEXT_MAX_CHARS,
            clock: Callable[[], float] = time.time,
            sleep: Callable[[float], None] = time.sleep,
            logger=None,
    ):
        self.provider = provider
        self.model_id = model_id
        self.store = store
        self.query_cache = query_cache
        self.background = background
        self.rate_limiter = rate_limiter
        self.expected_dimension_override = expected_dimension_override
        self.dimension_cache_ttl_seconds = dimension_cache_ttl_seconds
        self.max_retries = max(1, max_retries)
        self.initial_retry_delay = initial_retry_delay
        self.text_max_chars = text_max_chars
        self._clock = clock
        self._sleep = sleep
        self.logger = logger or get_class_logger(self.__class__)

        self._dim_lock = threading.Lock()
        self._cached_dimension: Optional[int] = None
        self._cached_dimension_at = 0.0

    @property
    def version(self) -> str:
        return derive_version(self.model_id)

    # ---- expected dimension ----

    def get_expected_dimension(self) -> int:
        """
        Catalog dimension: override, else a sampled business vector of the
        current version, else the model table. Cached for a short TTL.
        """
        if self.expected_dimension_override > 0:
            return self.expected_dimension_override

        now = self._clock()
        with self._dim_lock:
            if (
                self._cached_dimension is not None
                and now - self._cached_dimension_at < self.dimension_cache_ttl_seconds
            ):
                return self._cached_dimension

        dims: Optional[int] = None
        try:
            sample = self.store.sample(self.version)
            if sample is not None and sample.vector:
                dims = len(sample.vector)
                self.logger.info("Detected business embedding dimensions: %d (version=%s)", dims, self.version)
        except Exception as e:
            self.logger.warning("Could not sample business embeddings for dimension check: %s", e)

        if dims is None:
            dims = dimensions_for_model(self.model_id)
            self.logger.info("No stored business embeddings; using model table dimensions %d for %s", dims, self.model_id)

        with self._dim_lock:
            self._cached_dimension = dims
            self._cached_dimension_at = now
        return dims

    def invalidate_dimension_cache(self) -> None:
        with self._dim_lock:
            self._cached_dimension = None
            self._cached_dimension_at = 0.0

    def _check_dimension(self, vector: List[float]) -> None:
        expected = self.get_expected_dimension()
        if len(vector) != expected:
            err = DimensionMismatch(expected=expected, actual=len(vector), model_id=self.model_id)
            self.logger.error("CRITICAL: %s", err)
            raise err

    # ---- provider calls ----

    def _invoke_with_retry(self, text: str, input_type: str) -> Dict[str, Any]:
        delay = self.initial_retry_delay
        for attempt in range(1, self.max_retries + 1):
            try:
                if self.rate_limiter is not None:
                    self.rate_limiter.acquire()
                return self.provider.invoke(text, input_type)
            except TransientProviderFailure as e:
                self.logger.warning(
                    "Embedding call failed (attempt %d/%d): %s", attempt, self.max_retries, e
                )
                if attempt == self.max_retries:
                    raise
                self._sleep(delay)
                delay *= 1.7  # backoff

        # Unreachable
        raise TransientProviderFailure("retries exhausted", provider=getattr(self.provider, "provider", "unknown"))

    def _embed_raw(self, text: str, kind: str) -> List[float]:
        if not isinstance(text, str) or not text.strip():
            raise ValidationFailure("Cannot embed empty text")
        body = self._invoke_with_retry(text, input_type_for(kind))
        return EmbeddingResponse.parse(body).first()

    def generate(self, text: str, kind: str = "document") -> List[float]:
        """Embed text as a 'query' or 'document' and enforce the catalog dimension."""
        vector = self._embed_raw(text, kind)
        self._check_dimension(vector)
        return vector

    # ---- business path ----

    def build_business_text(self, business: Business) -> str:
        return build_business_text(business, self.text_max_chars)

    def generate_business_embedding(self, business: Business, version: Optional[str] = None) -> BusinessEmbeddingRecord:
        version = version or self.version
        text = self.build_business_text(business)
        vector = self.generate(text, "document")
        record = self.store.put(business.business_id, version, vector, source_text=text)
        self.logger.info(
            "Stored embedding for business '%s' (version=%s, dims=%d)",
            business.business_id,
            version,
            len(vector),
        )
        return record

    def has_embedding(self, business_id: str, version: Optional[str] = None) -> bool:
        return self.store.has(business_id, version or self.version)

    # ---- query path ----

    def generate_query_embedding(self, query: str) -> List[float]:
        normalized = normalize_query(query or "")
        if not normalized:
            raise ValidationFailure("Query text is empty")

        cached = self.query_cache.get(normalized, self.model_id)
        if cached is not None:
            expected = self.get_expected_dimension()
            if len(cached.vector) == expected:
                self.logger.debug("Query embedding cache hit for %r", normalized)
                return cached.vector
            self.logger.warning(
                "Cached query embedding has %d dimensions, expected %d. Regenerating.",
                len(cached.vector),
                expected,
            )

        vector = self.generate(normalized, "query")
        self.background.submit(
            "cache query embedding",
            self.query_cache.put,
            normalized,
            vector,
            self.model_id,
        )
        return vector

    # ---- diagnostics ----

    def validate_embedding_dimensions(self, probe_text: str = "test") -> Dict[str, Any]:
        """Compare what the model produces now with what the catalog holds."""
        try:
            business_dims = self.get_expected_dimension()
            query_dims = len(self._embed_raw(probe_text, "query"))
        except Exception as e:
            return {
                "valid": False,
                "query_dimensions": None,
                "business_dimensions": None,
                "model_id": self.model_id,
                "issue": f"Failed to validate dimensions: {e}",
                "recommendation": "Check embedding provider access and vector store connectivity",
            }

        if query_dims != business_dims:
            mismatch = DimensionMismatch(expected=business_dims, actual=query_dims, model_id=self.model_id)
            return {
                "valid": False,
                "query_dimensions": query_dims,
                "business_dimensions": business_dims,
                "model_id": self.model_id,
                "issue": (
                    f"Dimension mismatch: Query embeddings are {query_dims}D "
                    f"but business embeddings are {business_dims}D"
                ),
                "recommendation": mismatch.recommendation,
            }

        return {
            "valid": True,
            "query_dimensions": query_dims,
            "business_dimensions": business_dims,
            "model_id": self.model_id,
            "issue": None,
            "recommendation": None,
        }
