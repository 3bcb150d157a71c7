# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-26
# Description: errors.py
# -----------------------------------------------------------------------------
from typing import Optional


class SearchSubsystemError(Exception):
    """Base class for errors raised by the embedding / search subsystem."""


class ValidationFailure(SearchSubsystemError, ValueError):
    """Bad input shape. Rejected immediately, never retried."""


class DimensionMismatch(SearchSubsystemError):
    """
    A generated vector does not match the catalog's established dimension.

    Fatal: requires operator action (regenerate the catalog or change the
    configured model). Vectors are never truncated or padded to fit.
    """

    def __init__(self, expected: int, actual: int, model_id: str):
        self.expected = expected
        self.actual = actual
        self.model_id = model_id
        super().__init__(
            f"Embedding dimension mismatch: generated {actual}, expected {expected} "
            f"(from business embeddings). {self.recommendation}"
        )

    @property
    def recommendation(self) -> str:
        return (
            f"Either (1) regenerate business embeddings with model {self.model_id}, or "
            f"(2) change the embedding model to one that produces {self.expected} dimensions."
        )


class TransientProviderFailure(SearchSubsystemError):
    """Network / rate-limit / 5xx failure from the embedding or geocoding provider."""

    def __init__(self, message: str, provider: str = "unknown", retry_after: Optional[float] = None):
        self.provider = provider
        self.retry_after = retry_after
        super().__init__(f"[{provider}] {message}")


class NotFound(SearchSubsystemError):
    """Record absent where the caller cannot express absence as None."""


class VectorDimensionError(ValueError):
    """Structural error: vectors of unequal length were compared."""
