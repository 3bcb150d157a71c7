# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-01
# Description: search.py
# -----------------------------------------------------------------------------
from typing import Optional, List

from pydantic import BaseModel, Field

from ranking.RankingEngine import RankingFilters


class SearchFilters(BaseModel):
    category: Optional[str] = None
    city: Optional[str] = None
    min_rating: Optional[float] = Field(None, ge=0, le=5)

    def to_ranking_filters(self) -> RankingFilters:
        return RankingFilters(category=self.category, city=self.city, min_rating=self.min_rating)


class ClientContext(BaseModel):
    """What the caller knows about the device making the request."""
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    ip_address: Optional[str] = None


class UserProfile(BaseModel):
    user_id: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = None
    location_last_updated: Optional[float] = None  # unix seconds


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)
    filters: SearchFilters = Field(default_factory=SearchFilters)
    client: ClientContext = Field(default_factory=ClientContext)
    profile: Optional[UserProfile] = None
    limit: int = Field(20, ge=1, le=100)


class LocationModel(BaseModel):
    lat: float
    lng: float
    address: str
    source: str
    radius: int
    is_stale: bool = False
    city: Optional[str] = None


class SearchHit(BaseModel):
    business_id: str
    score: float


class SearchResponse(BaseModel):
    query: str
    location: Optional[LocationModel] = None
    location_required: bool = False
    total_candidates: int = 0
    results: List[SearchHit] = []


class EmbeddingStatsResponse(BaseModel):
    version: str
    total: int
    completed: int
    pending: int
    processing: int
    failed: int
    with_embeddings: int
    without_embeddings: int
    queue: dict = {}
