# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: EmbeddingModels
# -----------------------------------------------------------------------------
import re

from utility.errors import ValidationFailure

DEFAULT_DIMENSIONS = 1024

# Substring of model id -> vector length. First match wins.
MODEL_DIMENSIONS = (
    ("titan-embed-text-v1", 1536),
    ("titan-embed-text-v2", 1024),
    ("titan-embed-g1-text-02", 1024),
    ("cohere", 1024),
    ("text-embedding-3-small", 1536),
    ("text-embedding-3-large", 3072),
    ("text-embedding-ada-002", 1536),
)

INPUT_TYPES = {
    "query": "search_query",
    "document": "search_document",
}


def derive_version(model_id: str) -> str:
    """amazon.titan-embed-text-v1 -> amazon-titan-embed-text-v1"""
    return re.sub(r"[^a-z0-9-]", "-", model_id, flags=re.IGNORECASE).lower()


def dimensions_for_model(model_id: str) -> int:
    mid = model_id.lower()
    for needle, dims in MODEL_DIMENSIONS:
        if needle in mid:
            return dims
    return DEFAULT_DIMENSIONS


def input_type_for(kind: str) -> str:
    try:
        return INPUT_TYPES[kind]
    except KeyError:
        raise ValidationFailure(f"kind must be one of {sorted(INPUT_TYPES)}, got {kind!r}") from None
