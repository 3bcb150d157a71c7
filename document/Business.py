# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-26
# Description: Business
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Business:
    business_id: str
    name: str
    description: str = ""
    category: str = ""
    subcategory: str = ""
    tags: List[str] = field(default_factory=list)
    city: str = ""
    state: str = ""
    address: str = ""
    rating: float = 0.0
    review_count: int = 0
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_verified: bool = False

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None
