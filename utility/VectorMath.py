# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-26
# Description: VectorMath.py
# -----------------------------------------------------------------------------
import math
from typing import List, Sequence

import numpy as np

from utility.errors import VectorDimensionError

EARTH_RADIUS_M = 6_371_000.0


def _as_array(v: Sequence[float]) -> np.ndarray:
    return np.asarray(v, dtype=np.float64)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity in [-1, 1].

    Unequal lengths raise VectorDimensionError. Empty or zero-magnitude
    vectors score 0.0 (never NaN).
    """
    if len(a) != len(b):
        raise VectorDimensionError(f"Vectors must have same length: {len(a)} != {len(b)}")
    if len(a) == 0:
        return 0.0

    va = _as_array(a)
    vb = _as_array(b)
    denom = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0

    score = float(np.dot(va, vb) / denom)
    # Clamp float noise at the ends of the range
    return max(-1.0, min(1.0, score))


def batch_cosine_similarity(query: Sequence[float], vectors: Sequence[Sequence[float]]) -> List[float]:
    """
    Score many same-length vectors against one query in a single matrix op.
    """
    if not vectors:
        return []
    q = _as_array(query)
    m = np.asarray(vectors, dtype=np.float64)
    if m.ndim != 2 or m.shape[1] != q.shape[0]:
        raise VectorDimensionError(
            f"Vectors must have same length as query ({q.shape[0]}), got shape {m.shape}"
        )

    q_norm = float(np.linalg.norm(q))
    row_norms = np.linalg.norm(m, axis=1)
    if q_norm == 0.0:
        return [0.0] * len(vectors)

    dots = m @ q
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(row_norms > 0, dots / (row_norms * q_norm), 0.0)
    return [max(-1.0, min(1.0, float(s))) for s in scores]


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise VectorDimensionError(f"Vectors must have same length: {len(a)} != {len(b)}")
    return float(np.linalg.norm(_as_array(a) - _as_array(b)))


def normalize_similarity(score: float) -> float:
    """Map cosine range [-1, 1] onto [0, 1]."""
    return (score + 1.0) / 2.0


def haversine_distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))
