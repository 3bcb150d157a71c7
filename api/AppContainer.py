# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-02-02
# Description: AppContainer.py
# -----------------------------------------------------------------------------
import uuid
from typing import Dict, Optional, Union

import settings
from api.schemas.search import (
    ClientContext,
    EmbeddingStatsResponse,
    SearchFilters,
    SearchRequest,
    SearchResponse,
    UserProfile,
)
from cache.Cache import Cache, InMemoryCache
from cache.RedisCache import RedisCache
from catalog.BusinessCatalog import BusinessCatalog, InMemoryBusinessCatalog
from config.Config import Config
from embedding.BedrockEmbeddingClient import BedrockEmbeddingClient
from embedding.EmbeddingGenerator import EmbeddingGenerator, EmbeddingProvider
from embedding.OpenAIEmbeddingClient import OpenAIEmbeddingClient
from embedding.QueryEmbeddingCache import QueryEmbeddingCache
from health.EmbeddingHealth import EmbeddingHealth
from health.TestRunner import TestRunner
from jobqueue.EmbeddingJob import EmbeddingJob
from jobqueue.EmbeddingJobQueue import EmbeddingJobQueue
from location.GeocodingCache import GeocodingCache
from location.IPGeolocationClient import IPGeolocationClient
from location.LocationResolver import LocationResolutionResult, LocationResolver
from location.NominatimGeocodingClient import NominatimGeocodingClient
from ranking.RankingEngine import RankingEngine
from services.BizSearchService import BizSearchService
from services.EmbeddingReconciliationService import EmbeddingReconciliationService
from services.EmbeddingStatsService import EmbeddingStatsService
from status.EmbeddingStatusTracker import EmbeddingStatusTracker
from status.StatusRepository import SqliteStatusRepository, StatusRepository
from utility.BackgroundTaskRunner import BackgroundTaskRunner
from utility.RateLimiter import RateLimiter
from utility.logging_utils import get_class_logger
from vectorstore.ChromaEmbeddingStore import ChromaEmbeddingStore
from vectorstore.EmbeddingStore import EmbeddingStore


class AppContainer:
    """
    Owns heavy object instantiation and application wiring.

    The business document store is external; pass a BusinessCatalog backed
    by it. Anything not passed in is built from Config.
    """

    def __init__(
            self,
            cfg: Optional[Config] = None,
            *,
            catalog: Optional[BusinessCatalog] = None,
            provider: Optional[EmbeddingProvider] = None,
            store: Optional[EmbeddingStore] = None,
            cache: Optional[Cache] = None,
            status_repository: Optional[StatusRepository] = None,
            geocoder: Optional[NominatimGeocodingClient] = None,
            ip_client: Optional[IPGeolocationClient] = None,
    ) -> None:
        # Configuration
        self.cfg = cfg or Config.from_env()
        self.logger = get_class_logger(self.__class__)
        self.logger.info("Building application container: %s", self.cfg.summary())
        if provider is None or store is None:
            self.cfg.validate_provider()

        # Core infrastructure
        self.background = BackgroundTaskRunner()
        self.cache = cache or (RedisCache(url=self.cfg.redis_url) if self.cfg.redis_url else InMemoryCache())
        self.store = store or ChromaEmbeddingStore(self.cfg)
        self.catalog = catalog or InMemoryBusinessCatalog()
        self.provider = provider or self._build_provider()

        # Embedding generation
        self.embedding_rate_limiter = RateLimiter(
            name=getattr(self.provider, "provider", "embedding"),
            min_interval_seconds=settings.EMBEDDING_MIN_INTERVAL_SECONDS,
            max_calls=settings.EMBEDDING_MAX_CALLS_PER_HOUR,
            window_seconds=3600.0,
            wait_timeout_seconds=settings.RATE_LIMIT_WAIT_TIMEOUT_SECONDS,
        )
        self.query_cache = QueryEmbeddingCache(cache=self.cache, ttl_ms=settings.QUERY_CACHE_TTL_MS)
        self.generator = EmbeddingGenerator(
            provider=self.provider,
            model_id=self.cfg.embedding_model_id,
            store=self.store,
            query_cache=self.query_cache,
            background=self.background,
            rate_limiter=self.embedding_rate_limiter,
        )

        # Status tracking + queue
        self.status_tracker = EmbeddingStatusTracker(
            repository=status_repository or SqliteStatusRepository(self.cfg.status_db_path),
        )
        self.queue = EmbeddingJobQueue(
            generator=self.generator,
            catalog=self.catalog,
            status_tracker=self.status_tracker,
            background=self.background,
            mirror_cache=self.cache,
        )

        # Ranking + location
        self.ranking = RankingEngine(similarity_cache_size=settings.SIMILARITY_CACHE_SIZE)
        self.geocoder = geocoder or NominatimGeocodingClient(
            base_url=self.cfg.geocoding_base_url,
            user_agent=self.cfg.geocoding_user_agent,
        )
        self.ip_client = ip_client or IPGeolocationClient(
            base_url=self.cfg.ip_geolocation_base_url,
            country_code=self.cfg.country_code,
            user_agent=self.cfg.geocoding_user_agent,
        )
        self.resolver = LocationResolver(
            geocoder=self.geocoder,
            geocoding_cache=GeocodingCache(cache=self.cache, ttl_ms=settings.GEOCODING_CACHE_TTL_MS),
            ip_client=self.ip_client,
        )

        # Services
        self.search_service = BizSearchService(
            catalog=self.catalog,
            store=self.store,
            generator=self.generator,
            ranking=self.ranking,
            resolver=self.resolver,
        )
        self.stats_service = EmbeddingStatsService(
            catalog=self.catalog,
            status_tracker=self.status_tracker,
            queue=self.queue,
            default_version=self.generator.version,
        )
        self.reconciliation_service = EmbeddingReconciliationService(
            catalog=self.catalog,
            generator=self.generator,
            status_tracker=self.status_tracker,
            queue=self.queue,
        )

        # Smoke tests / health
        self.test_runner = TestRunner(
            embedding_health=EmbeddingHealth(self.generator),
            store_check=self.store.test_connection,
            cache_check=self._cache_roundtrip,
        )

    def _build_provider(self) -> EmbeddingProvider:
        if self.cfg.embedding_provider == "openai":
            return OpenAIEmbeddingClient(self.cfg)
        return BedrockEmbeddingClient(self.cfg)

    def _cache_roundtrip(self) -> bool:
        key = f"healthcheck:{uuid.uuid4().hex}"
        self.cache.set(key, {"ok": True}, 60_000)
        ok = self.cache.get(key) == {"ok": True}
        self.cache.delete(key)
        return ok

    # ---- lifecycle ----

    def start(self) -> None:
        self.queue.start()

    def stop(self) -> None:
        self.queue.close()
        self.background.flush()
        self.background.shutdown()

    # ---- surface for the CRUD / API layer ----

    def enqueue_embedding_generation(
            self,
            business_id: str,
            *,
            priority: int = settings.PRIORITY_CREATE,
            force: bool = False,
    ) -> Optional[EmbeddingJob]:
        return self.queue.enqueue(business_id, priority=priority, force=force)

    def search(
            self,
            query_text: str,
            filters: Union[SearchFilters, Dict, None] = None,
            client_context: Union[ClientContext, Dict, None] = None,
            profile: Union[UserProfile, Dict, None] = None,
            limit: int = settings.SEARCH_RESULT_LIMIT,
    ) -> SearchResponse:
        request = SearchRequest(
            query=query_text,
            filters=SearchFilters.model_validate(filters or {}),
            client=ClientContext.model_validate(client_context or {}),
            profile=UserProfile.model_validate(profile) if profile is not None else None,
            limit=limit,
        )
        return self.search_service.search(request)

    def resolve_location(
            self,
            query_text: str,
            profile: Union[UserProfile, Dict, None] = None,
            client_context: Union[ClientContext, Dict, None] = None,
    ) -> Optional[LocationResolutionResult]:
        return self.resolver.resolve(
            query_text,
            UserProfile.model_validate(profile) if profile is not None else None,
            ClientContext.model_validate(client_context or {}),
        )

    def get_embedding_stats(self, version: Optional[str] = None) -> EmbeddingStatsResponse:
        return self.stats_service.get_stats(version)
