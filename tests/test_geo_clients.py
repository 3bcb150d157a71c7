# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-01
# Description: test_geo_clients.py
# -----------------------------------------------------------------------------
import pytest
import requests

from location.IPGeolocationClient import IPGeolocationClient
from location.NominatimGeocodingClient import GeocodeResult, NominatimGeocodingClient
from utility.RateLimiter import RateLimiter
from utility.errors import TransientProviderFailure


class StubResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class StubSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


def _nominatim(*responses):
    session = StubSession(*responses)
    client = NominatimGeocodingClient(
        base_url="https://nominatim.example/",
        user_agent="bizsearch-tests",
        rate_limiter=RateLimiter(name="test"),
        session=session,
    )
    return client, session


def test_forward_parses_first_hit():
    client, session = _nominatim(StubResponse(payload=[
        {"display_name": "Pune, Maharashtra, India", "lat": "18.52", "lon": "73.85"},
    ]))
    assert client.forward(" Pune ") == GeocodeResult(address="Pune, Maharashtra, India", lat=18.52, lng=73.85)

    url, kwargs = session.calls[0]
    assert url == "https://nominatim.example/search"
    assert kwargs["params"]["q"] == "Pune"
    assert kwargs["headers"]["User-Agent"] == "bizsearch-tests"


def test_forward_empty_and_malformed():
    client, _ = _nominatim(StubResponse(payload=[]), StubResponse(payload=[{"lat": "x"}]))
    assert client.forward("Atlantis") is None
    assert client.forward("Atlantis") is None
    assert client.forward("   ") is None


def test_reverse():
    client, _ = _nominatim(
        StubResponse(payload={"display_name": "MG Road, Bengaluru, Karnataka"}),
        StubResponse(payload={"error": "Unable to geocode"}),
    )
    assert client.reverse(12.97, 77.6) == "MG Road, Bengaluru, Karnataka"
    assert client.reverse(0.0, 0.0) is None


@pytest.mark.parametrize(
    "response",
    [
        StubResponse(status_code=429, headers={"Retry-After": "3"}),
        StubResponse(status_code=503),
        requests.ConnectionError("refused"),
        StubResponse(payload=ValueError("not json")),
    ],
)
def test_provider_trouble_is_transient(response):
    client, _ = _nominatim(response)
    with pytest.raises(TransientProviderFailure):
        client.forward("Pune")


def test_client_error_is_a_miss():
    client, _ = _nominatim(StubResponse(status_code=400))
    assert client.forward("Pune") is None


def _ip(*responses):
    session = StubSession(*responses)
    return IPGeolocationClient(base_url="https://ipapi.example", session=session), session


def test_ip_lookup_in_country():
    client, session = _ip(StubResponse(payload={
        "country_code": "IN", "latitude": 19.07, "longitude": 72.87, "city": "Mumbai", "region": "Maharashtra",
    }))
    loc = client.lookup("49.36.0.1")
    assert (loc.lat, loc.lng) == (19.07, 72.87)
    assert loc.address == "Mumbai, Maharashtra, India"
    assert session.calls[0][0] == "https://ipapi.example/49.36.0.1/json/"


def test_ip_lookup_rejects_other_countries_and_failures():
    client, _ = _ip(
        StubResponse(payload={"country_code": "GB", "latitude": 51.5, "longitude": -0.1}),
        StubResponse(status_code=500),
        requests.Timeout("slow"),
    )
    assert client.lookup("1.1.1.1") is None
    assert client.lookup("1.1.1.1") is None
    assert client.lookup("1.1.1.1") is None
    assert client.lookup("") is None
