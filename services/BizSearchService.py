# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-01
# Description: BizSearchService.py
# -----------------------------------------------------------------------------
import logging
from typing import List, Optional

import settings
from api.schemas.search import LocationModel, SearchHit, SearchRequest, SearchResponse
from catalog.BusinessCatalog import BusinessCatalog
from document.Business import Business
from embedding.EmbeddingGenerator import EmbeddingGenerator
from location.LocationExtractor import detect_near_me
from location.LocationResolver import LocationResolutionResult, LocationResolver
from ranking.RankingEngine import Candidate, RankingEngine
from utility.VectorMath import haversine_distance_m
from utility.errors import ValidationFailure
from utility.logging_utils import get_class_logger
from vectorstore.EmbeddingStore import EmbeddingStore


class BizSearchService:
    """
    Free-text business search.

    Responsibilities:
      - resolve the geographic anchor
      - embed the query (cache first)
      - narrow the catalog to candidates inside the anchor's radius
      - rank candidates by similarity
    """

    def __init__(
        self,
        *,
        catalog: BusinessCatalog,
        store: EmbeddingStore,
        generator: EmbeddingGenerator,
        ranking: RankingEngine,
        resolver: LocationResolver,
        max_candidates: int = settings.MAX_SIMILARITY_CANDIDATES,
        logger: logging.Logger | None = None,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.generator = generator
        self.ranking = ranking
        self.resolver = resolver
        self.max_candidates = max_candidates
        self.logger = logger or get_class_logger(self.__class__)

    def search(self, request: SearchRequest) -> SearchResponse:
        query = request.query.strip()
        if not query:
            raise ValidationFailure("Search query is empty")

        self.logger.info("Search query=%r filters=%s", query, request.filters.model_dump(exclude_none=True))

        location = self.resolver.resolve(query, request.profile, request.client)
        if location is None and detect_near_me(query):
            return SearchResponse(query=query, location_required=True)

        query_vector = self.generator.generate_query_embedding(query)

        businesses = self.catalog.query_businesses(
            category=request.filters.category,
            city=request.filters.city,
        )
        businesses = self._within_radius(businesses, location)

        vectors = self.store.get_many([b.business_id for b in businesses], self.generator.version)
        candidates = [
            Candidate(business=b, vector=vectors[b.business_id].vector)
            for b in businesses
            if b.business_id in vectors
        ]
        missing = len(businesses) - len(candidates)
        if missing:
            self.logger.debug("%d candidate(s) have no %s embedding yet", missing, self.generator.version)

        ranked = self.ranking.rank(
            query_vector,
            candidates,
            request.filters.to_ranking_filters(),
            self.max_candidates,
        )

        return SearchResponse(
            query=query,
            location=LocationModel(**location.to_dict()) if location else None,
            total_candidates=len(candidates),
            results=[SearchHit(business_id=r.business_id, score=r.score) for r in ranked[:request.limit]],
        )

    @staticmethod
    def _within_radius(
        businesses: List[Business],
        location: Optional[LocationResolutionResult],
    ) -> List[Business]:
        if location is None:
            return list(businesses)
        return [
            b for b in businesses
            if b.has_coordinates
            and haversine_distance_m(location.lat, location.lng, b.latitude, b.longitude) <= location.radius
        ]
