# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-01
# Description: LocationResolver
# -----------------------------------------------------------------------------
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

import settings
from location.GeoBounds import GeoBounds, city_from_address, radius_for_city
from location.GeocodingCache import GeocodingCache
from location.IPGeolocationClient import IPGeolocationClient
from location.LocationExtractor import detect_near_me, extract_location
from location.NominatimGeocodingClient import NominatimGeocodingClient
from utility.logging_utils import get_class_logger

GEOLOCATION_PLACEHOLDER = "Current location"
PROFILE_PLACEHOLDER = "User location"


@dataclass
class LocationResolutionResult:
    lat: float
    lng: float
    address: str
    source: str  # explicit | profile | geolocation | ip
    radius: int
    is_stale: bool = False
    city: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class LocationResolver:
    """
    Search anchor from, in order: a place named in the query, the user's
    profile (near-me queries), client geolocation, then IP lookup.

    Every tier is checked against the deployment bounds; an out-of-bounds
    tier is a miss and resolution moves on. A near-me query with no usable
    profile location stops the chain and returns None.
    """

    def __init__(
            self,
            *,
            geocoder: NominatimGeocodingClient,
            geocoding_cache: GeocodingCache,
            ip_client: Optional[IPGeolocationClient] = None,
            bounds: Optional[GeoBounds] = None,
            stale_after_seconds: int = settings.PROFILE_STALE_AFTER_SECONDS,
            clock: Callable[[], float] = time.time,
            logger=None,
    ):
        self.geocoder = geocoder
        self.geocoding_cache = geocoding_cache
        self.ip_client = ip_client
        self.bounds = bounds or GeoBounds.from_settings()
        self.stale_after_seconds = stale_after_seconds
        self._clock = clock
        self.logger = logger or get_class_logger(self.__class__)

    def resolve(self, query_text: Optional[str], profile=None, client=None) -> Optional[LocationResolutionResult]:
        explicit = self.resolve_explicit(query_text)
        if explicit is not None:
            return explicit

        if detect_near_me(query_text):
            result = self.resolve_profile(profile)
            if result is None:
                self.logger.info("Near-me query without a usable profile location; location setup required")
            return result

        result = self.resolve_geolocation(client)
        if result is not None:
            return result

        result = self.resolve_ip(client)
        if result is not None:
            return result

        # Last resort for non near-me queries
        return self.resolve_profile(profile)

    # ---- tier 1 ----

    def resolve_explicit(self, query_text: Optional[str]) -> Optional[LocationResolutionResult]:
        place = extract_location(query_text)
        if not place:
            return None

        try:
            geocoded = self.geocoding_cache.get_or_fetch(place, self.geocoder.forward)
        except Exception as e:
            self.logger.warning("Geocoding failed for explicit location %r: %s", place, e)
            return None

        if geocoded is None or not self.bounds.contains(geocoded.lat, geocoded.lng):
            self.logger.info("Explicit location %r not resolvable inside bounds", place)
            return None

        address = geocoded.address or place
        city = city_from_address(address) or place
        return LocationResolutionResult(
            lat=geocoded.lat,
            lng=geocoded.lng,
            address=address,
            source="explicit",
            radius=radius_for_city(city),
            city=city,
        )

    # ---- tier 2 ----

    def is_stale(self, location_last_updated: Optional[float]) -> bool:
        if not location_last_updated:
            return False
        return self._clock() - float(location_last_updated) > self.stale_after_seconds

    def resolve_profile(self, profile) -> Optional[LocationResolutionResult]:
        if profile is None:
            return None
        lat = getattr(profile, "latitude", None)
        lng = getattr(profile, "longitude", None)
        if not self.bounds.contains(lat, lng):
            return None

        address = getattr(profile, "address", None)
        city = city_from_address(address)
        return LocationResolutionResult(
            lat=float(lat),
            lng=float(lng),
            address=address or PROFILE_PLACEHOLDER,
            source="profile",
            radius=radius_for_city(city),
            is_stale=self.is_stale(getattr(profile, "location_last_updated", None)),
            city=city,
        )

    # ---- tier 3 ----

    def resolve_geolocation(self, client) -> Optional[LocationResolutionResult]:
        if client is None:
            return None
        lat = getattr(client, "latitude", None)
        lng = getattr(client, "longitude", None)
        if not self.bounds.contains(lat, lng):
            return None

        address = GEOLOCATION_PLACEHOLDER
        try:
            reversed_address = self.geocoder.reverse(float(lat), float(lng))
            if reversed_address:
                address = reversed_address
        except Exception as e:
            self.logger.warning("Reverse geocoding failed for client geolocation: %s", e)

        city = city_from_address(address)
        return LocationResolutionResult(
            lat=float(lat),
            lng=float(lng),
            address=address,
            source="geolocation",
            radius=radius_for_city(city),
            city=city,
        )

    # ---- tier 4 ----

    def resolve_ip(self, client) -> Optional[LocationResolutionResult]:
        if client is None or self.ip_client is None:
            return None
        ip_address = getattr(client, "ip_address", None)
        if not ip_address:
            return None

        loc = self.ip_client.lookup(ip_address)
        if loc is None or not self.bounds.contains(loc.lat, loc.lng):
            return None

        return LocationResolutionResult(
            lat=loc.lat,
            lng=loc.lng,
            address=loc.address,
            source="ip",
            radius=radius_for_city(loc.city),
            city=loc.city,
        )
