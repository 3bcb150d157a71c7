# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-31
# Description: RankingEngine
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import List, Optional, Sequence

import settings
from document.Business import Business
from ranking.SimilarityCache import SimilarityCache
from utility.VectorMath import batch_cosine_similarity
from utility.logging_utils import get_class_logger


@dataclass(frozen=True)
class RankingFilters:
    category: Optional[str] = None
    city: Optional[str] = None
    min_rating: Optional[float] = None

    def accepts(self, business: Business) -> bool:
        if self.category and (business.category or "").lower() != self.category.lower():
            return False
        if self.city and (business.city or "").lower() != self.city.lower():
            return False
        if self.min_rating is not None and (business.rating or 0.0) < self.min_rating:
            return False
        return True


@dataclass
class Candidate:
    business: Business
    vector: List[float]

    @property
    def business_id(self) -> str:
        return self.business.business_id


@dataclass(frozen=True)
class RankedResult:
    business_id: str
    score: float


class RankingEngine:
    """
    Filter, cap, then score by cosine similarity.

    The cap is applied before scoring, so this is a bounded-cost ranking of
    the first max_candidates survivors, not an exhaustive top-k.

    Memoised scores live for one rank() call unless the caller passes a
    SimilarityCache shared across a request batch. Stored vectors change
    when a business is re-embedded, so scores are never kept process-wide.
    """

    def __init__(self, *, similarity_cache_size: int = settings.SIMILARITY_CACHE_SIZE, logger=None):
        self.similarity_cache_size = similarity_cache_size
        self.logger = logger or get_class_logger(self.__class__)

    def prefilter(self, candidates: Sequence[Candidate], filters: Optional[RankingFilters]) -> List[Candidate]:
        if filters is None:
            return list(candidates)
        return [c for c in candidates if filters.accepts(c.business)]

    def rank(
            self,
            query_vector: Sequence[float],
            candidates: Sequence[Candidate],
            filters: Optional[RankingFilters] = None,
            max_candidates: int = settings.MAX_SIMILARITY_CANDIDATES,
            similarity_cache: Optional[SimilarityCache] = None,
    ) -> List[RankedResult]:
        cache = similarity_cache if similarity_cache is not None else SimilarityCache(self.similarity_cache_size)
        pool = self.prefilter(candidates, filters)
        excluded = len(candidates) - len(pool)
        if len(pool) > max_candidates:
            self.logger.debug("Capping %d candidates to %d before scoring", len(pool), max_candidates)
            pool = pool[:max_candidates]

        dims = len(query_vector)
        usable: List[Candidate] = []
        for c in pool:
            if len(c.vector) != dims:
                self.logger.warning(
                    "Skipping business '%s': vector has %d dimensions, query has %d",
                    c.business_id, len(c.vector), dims,
                )
                continue
            usable.append(c)

        scores: List[Optional[float]] = [cache.get(query_vector, c.business_id) for c in usable]
        misses = [i for i, s in enumerate(scores) if s is None]
        if misses:
            fresh = batch_cosine_similarity(query_vector, [usable[i].vector for i in misses])
            for i, score in zip(misses, fresh):
                scores[i] = score
                cache.put(query_vector, usable[i].business_id, score)

        ranked = [RankedResult(business_id=c.business_id, score=s) for c, s in zip(usable, scores)]
        # sorted() is stable, so equal scores keep input order
        ranked = sorted(ranked, key=lambda r: r.score, reverse=True)

        self.logger.info(
            "Ranked %d of %d candidates (excluded by filters=%d, cap=%d)",
            len(ranked), len(candidates), excluded, max_candidates,
        )
        return ranked
