# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-31
# Description: GeoBounds
# -----------------------------------------------------------------------------
import math
import re
from dataclasses import dataclass
from typing import Optional

import settings

METRO_CITIES = frozenset({
    "mumbai", "delhi", "bengaluru", "hyderabad", "chennai", "kolkata",
    "pune", "ahmedabad", "jaipur", "surat", "gurugram", "noida",
    "faridabad", "ghaziabad", "nagpur", "indore", "vadodara",
    "visakhapatnam", "coimbatore", "madurai", "kochi", "kanpur",
    "lucknow", "patna", "bhopal", "chandigarh", "dehradun",
})

_LEADING_DIGIT = re.compile(r"^\d")


@dataclass(frozen=True)
class GeoBounds:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @classmethod
    def from_settings(cls) -> "GeoBounds":
        return cls(**settings.BOUNDS)

    def contains(self, lat: Optional[float], lng: Optional[float]) -> bool:
        """False for missing, non-finite, or out-of-box coordinates."""
        if lat is None or lng is None:
            return False
        try:
            lat = float(lat)
            lng = float(lng)
        except (TypeError, ValueError):
            return False
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return False
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


def city_from_address(address: Optional[str]) -> Optional[str]:
    """
    'Koramangala, Bengaluru, Karnataka' -> 'Koramangala'
    '12 MG Road, Pune, Maharashtra'     -> 'Pune'
    Single-part strings are not treated as addresses.
    """
    if not address:
        return None
    parts = [p.strip() for p in address.split(",")]
    if len(parts) < 2:
        return None
    first = parts[0]
    if len(first) < 50 and not _LEADING_DIGIT.match(first):
        return first
    return parts[1] or None


def is_metro_city(city: Optional[str]) -> bool:
    return bool(city) and city.strip().lower() in METRO_CITIES


def radius_for_city(city: Optional[str]) -> int:
    """Metro cities get the tight radius; everything else, known or not, the wide one."""
    if is_metro_city(city):
        return settings.METRO_RADIUS_METERS
    return settings.DEFAULT_RADIUS_METERS
