# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-31
# Description: NominatimGeocodingClient
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

import settings
from utility.RateLimiter import RateLimiter
from utility.errors import TransientProviderFailure
from utility.logging_utils import get_class_logger


@dataclass(frozen=True)
class GeocodeResult:
    address: str
    lat: float
    lng: float


class NominatimGeocodingClient:
    """
    Forward / reverse geocoding against a Nominatim-compatible endpoint.
    Calls go through a RateLimiter (Nominatim policy: 1 request/second).
    """

    provider = "nominatim"

    def __init__(
            self,
            *,
            base_url: str,
            user_agent: str,
            rate_limiter: Optional[RateLimiter] = None,
            timeout_seconds: float = settings.HTTP_TIMEOUT_SECONDS,
            session: Optional[requests.Session] = None,
            logger=None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self.logger = logger or get_class_logger(self.__class__)
        self.rate_limiter = rate_limiter or RateLimiter(
            name=self.provider,
            min_interval_seconds=settings.GEOCODING_MIN_INTERVAL_SECONDS,
            wait_timeout_seconds=settings.RATE_LIMIT_WAIT_TIMEOUT_SECONDS,
        )

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        self.rate_limiter.acquire()
        url = f"{self.base_url}/{path}"
        try:
            r = self.session.get(
                url,
                params={"format": "json", "addressdetails": 1, **params},
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise TransientProviderFailure(str(e), provider=self.provider) from e

        if r.status_code == 429 or r.status_code >= 500:
            retry_after = r.headers.get("Retry-After")
            raise TransientProviderFailure(
                f"HTTP {r.status_code} from {path}",
                provider=self.provider,
                retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if r.status_code >= 400:
            self.logger.warning("Geocoding %s returned HTTP %d", path, r.status_code)
            return None

        try:
            return r.json()
        except ValueError as e:
            raise TransientProviderFailure(f"non-JSON response from {path}: {e}", provider=self.provider) from e

    def forward(self, address: str) -> Optional[GeocodeResult]:
        if not address or not address.strip():
            return None
        data = self._get("search", {"q": address.strip(), "limit": 1})
        if not isinstance(data, list) or not data:
            self.logger.info("No geocoding result for %r", address)
            return None

        hit = data[0]
        try:
            return GeocodeResult(
                address=hit.get("display_name") or address,
                lat=float(hit["lat"]),
                lng=float(hit["lon"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            self.logger.warning("Malformed geocoding result for %r: %s", address, e)
            return None

    def reverse(self, lat: float, lng: float) -> Optional[str]:
        data = self._get("reverse", {"lat": lat, "lon": lng})
        if not isinstance(data, dict) or data.get("error"):
            return None
        return data.get("display_name") or None
