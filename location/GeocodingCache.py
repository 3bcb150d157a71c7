# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-31
# Description: GeocodingCache
# -----------------------------------------------------------------------------
import hashlib
from typing import Callable, Optional

from cache.Cache import Cache
from location.NominatimGeocodingClient import GeocodeResult
from utility.logging_utils import get_class_logger

KEY_PREFIX = "geocode:"


def location_key(location: str) -> str:
    return KEY_PREFIX + hashlib.sha256(location.strip().lower().encode("utf-8")).hexdigest()


class GeocodingCache:
    """Forward-geocoding results keyed by the lower-cased location string."""

    def __init__(self, *, cache: Cache, ttl_ms: int, logger=None):
        self.cache = cache
        self.ttl_ms = ttl_ms
        self.logger = logger or get_class_logger(self.__class__)

    def get(self, location: str) -> Optional[GeocodeResult]:
        try:
            raw = self.cache.get(location_key(location))
        except Exception as e:
            self.logger.warning("Geocoding cache read failed for %r: %s", location, e)
            return None
        if not raw:
            return None
        try:
            return GeocodeResult(address=raw["address"], lat=float(raw["lat"]), lng=float(raw["lng"]))
        except (KeyError, TypeError, ValueError):
            return None

    def put(self, location: str, result: GeocodeResult) -> None:
        try:
            self.cache.set(
                location_key(location),
                {"address": result.address, "lat": result.lat, "lng": result.lng},
                self.ttl_ms,
            )
        except Exception as e:
            self.logger.warning("Geocoding cache write failed for %r: %s", location, e)

    def get_or_fetch(
            self,
            location: str,
            fetch: Callable[[str], Optional[GeocodeResult]],
    ) -> Optional[GeocodeResult]:
        cached = self.get(location)
        if cached is not None:
            return cached
        result = fetch(location)
        if result is not None:
            self.put(location, result)
        return result
