# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-09
# Updated: 2026-02-03
# Description: settings.py
# -----------------------------------------------------------------------------
import os
from typing import Any, Dict


def _env(name: str, default: str = "") -> str:
    """Read env var safely and strip whitespace."""
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be an int, got {v!r}") from e


def _env_float(name: str, default: float) -> float:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return float(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be a float, got {v!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name, "")
    if v == "":
        return default
    v = v.lower()
    if v in ("1", "true", "t", "yes", "y", "on"):
        return True
    if v in ("0", "false", "f", "no", "n", "off"):
        return False
    raise RuntimeError(f"Env var {name} must be a boolean, got {v!r}")


# -----------------------------------------------------------------------------
# Embedding queue
# -----------------------------------------------------------------------------
QUEUE_DEFAULTS: Dict[str, Any] = {
    "batch_size": _env_int("BIZ_QUEUE_BATCH_SIZE", 10),
    "retry_delay_seconds": _env_float("BIZ_QUEUE_RETRY_DELAY_SECONDS", 5.0),
    "max_attempts": _env_int("BIZ_QUEUE_MAX_ATTEMPTS", 3),
    "processing_interval_seconds": _env_float("BIZ_QUEUE_INTERVAL_SECONDS", 10.0),
    "concurrency": _env_int("BIZ_QUEUE_CONCURRENCY", 3),
    "job_mirror_ttl_ms": _env_int("BIZ_QUEUE_JOB_MIRROR_TTL_MS", 24 * 60 * 60 * 1000),
}

# Priority convention: regeneration after an update beats fresh backlog
PRIORITY_CREATE = 1
PRIORITY_UPDATE = 2


# -----------------------------------------------------------------------------
# Embedding generation
# -----------------------------------------------------------------------------
DIMENSION_CACHE_TTL_SECONDS = _env_float("BIZ_DIMENSION_CACHE_TTL_SECONDS", 300.0)

# 0 = derive from the catalog / model table
EXPECTED_DIMENSION_OVERRIDE = _env_int("BIZ_EXPECTED_DIMENSION", 0)

QUERY_CACHE_TTL_MS = _env_int("BIZ_QUERY_CACHE_TTL_MS", 30 * 24 * 60 * 60 * 1000)

BUSINESS_TEXT_MAX_CHARS = _env_int("BIZ_BUSINESS_TEXT_MAX_CHARS", 1000)

PROVIDER_MAX_RETRIES = _env_int("BIZ_PROVIDER_MAX_RETRIES", 3)
PROVIDER_INITIAL_RETRY_DELAY_SECONDS = _env_float("BIZ_PROVIDER_RETRY_DELAY_SECONDS", 0.8)

EMBEDDING_MIN_INTERVAL_SECONDS = _env_float("BIZ_EMBEDDING_MIN_INTERVAL_SECONDS", 0.05)
EMBEDDING_MAX_CALLS_PER_HOUR = _env_int("BIZ_EMBEDDING_MAX_CALLS_PER_HOUR", 1000)
RATE_LIMIT_WAIT_TIMEOUT_SECONDS = _env_float("BIZ_RATE_LIMIT_WAIT_TIMEOUT_SECONDS", 30.0)


# -----------------------------------------------------------------------------
# Ranking
# -----------------------------------------------------------------------------
MAX_SIMILARITY_CANDIDATES = _env_int("BIZ_MAX_SIMILARITY_CANDIDATES", 200)
SIMILARITY_CACHE_SIZE = _env_int("BIZ_SIMILARITY_CACHE_SIZE", 10000)
SEARCH_RESULT_LIMIT = _env_int("BIZ_SEARCH_RESULT_LIMIT", 20)


# -----------------------------------------------------------------------------
# Location resolution
# -----------------------------------------------------------------------------
GEOCODING_MIN_INTERVAL_SECONDS = _env_float("BIZ_GEOCODING_MIN_INTERVAL_SECONDS", 1.0)
GEOCODING_CACHE_TTL_MS = _env_int("BIZ_GEOCODING_CACHE_TTL_MS", 30 * 24 * 60 * 60 * 1000)
HTTP_TIMEOUT_SECONDS = _env_float("BIZ_HTTP_TIMEOUT_SECONDS", 10.0)

PROFILE_STALE_AFTER_SECONDS = _env_int("BIZ_PROFILE_STALE_AFTER_SECONDS", 30 * 24 * 60 * 60)

METRO_RADIUS_METERS = _env_int("BIZ_METRO_RADIUS_METERS", 5000)
DEFAULT_RADIUS_METERS = _env_int("BIZ_DEFAULT_RADIUS_METERS", 10000)

# Deployment bounding box (defaults: India)
BOUNDS: Dict[str, float] = {
    "min_lat": _env_float("BIZ_BOUNDS_MIN_LAT", 6.5),
    "max_lat": _env_float("BIZ_BOUNDS_MAX_LAT", 37.5),
    "min_lng": _env_float("BIZ_BOUNDS_MIN_LNG", 68.0),
    "max_lng": _env_float("BIZ_BOUNDS_MAX_LNG", 97.5),
}


# -----------------------------------------------------------------------------
# Sanity checks (tunable)
# -----------------------------------------------------------------------------
if QUEUE_DEFAULTS["batch_size"] < 1:
    raise RuntimeError("BIZ_QUEUE_BATCH_SIZE must be >= 1")

if QUEUE_DEFAULTS["max_attempts"] < 1:
    raise RuntimeError("BIZ_QUEUE_MAX_ATTEMPTS must be >= 1")

if BOUNDS["min_lat"] >= BOUNDS["max_lat"] or BOUNDS["min_lng"] >= BOUNDS["max_lng"]:
    raise RuntimeError(f"Deployment bounds are inverted: {BOUNDS}")
