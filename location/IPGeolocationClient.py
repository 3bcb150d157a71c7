# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-31
# Description: IPGeolocationClient
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Optional

import requests

import settings
from utility.logging_utils import get_class_logger


@dataclass(frozen=True)
class IPLocation:
    lat: float
    lng: float
    city: Optional[str]
    region: Optional[str]
    address: str


class IPGeolocationClient:
    """
    City-level lookup from an ipapi-style JSON endpoint. Results outside the
    deployment country are discarded. Failures read as "no location".
    """

    def __init__(
            self,
            *,
            base_url: str,
            country_code: str = "IN",
            country_name: str = "India",
            user_agent: str = "bizsearch/0.1",
            timeout_seconds: float = settings.HTTP_TIMEOUT_SECONDS,
            session: Optional[requests.Session] = None,
            logger=None,
    ):
        self.base_url = base_url.rstrip("/")
        self.country_code = country_code.upper()
        self.country_name = country_name
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self.logger = logger or get_class_logger(self.__class__)

    def lookup(self, ip_address: str) -> Optional[IPLocation]:
        if not ip_address:
            return None
        try:
            r = self.session.get(
                f"{self.base_url}/{ip_address}/json/",
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_seconds,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            self.logger.warning("IP geolocation failed for %s: %s", ip_address, e)
            return None

        if not isinstance(data, dict) or (data.get("country_code") or "").upper() != self.country_code:
            return None

        try:
            lat = float(data["latitude"])
            lng = float(data["longitude"])
        except (KeyError, TypeError, ValueError):
            return None

        city = data.get("city") or None
        region = data.get("region") or None
        if city:
            address = f"{city}, {region}, {self.country_name}" if region else f"{city}, {self.country_name}"
        elif region:
            address = f"{region}, {self.country_name}"
        else:
            address = self.country_name
        return IPLocation(lat=lat, lng=lng, city=city, region=region, address=address)
