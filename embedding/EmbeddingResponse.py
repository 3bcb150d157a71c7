# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: EmbeddingResponse
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from numbers import Real
from typing import Any, List, Mapping, Union

from utility.errors import ValidationFailure


@dataclass(frozen=True)
class DirectEmbedding:
    """Provider returned one vector for the single input."""
    vector: List[float]

    def first(self) -> List[float]:
        return self.vector


@dataclass(frozen=True)
class IndexedEmbeddings:
    """Provider returned one vector per input, in input order."""
    vectors: List[List[float]]

    def first(self) -> List[float]:
        if not self.vectors:
            raise ValidationFailure("Embedding response contained no vectors")
        return self.vectors[0]


EmbeddingResponse = Union[DirectEmbedding, IndexedEmbeddings]


def _is_vector(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(x, Real) and not isinstance(x, bool) for x in value)
    )


def _to_vector(value: Any) -> List[float]:
    if not _is_vector(value):
        raise ValidationFailure("Embedding vector must be a non-empty list of numbers")
    return [float(x) for x in value]


def _indexed(items: List[Any]) -> IndexedEmbeddings:
    vectors = []
    for item in items:
        if isinstance(item, Mapping):
            item = item.get("embedding")
        vectors.append(_to_vector(item))
    return IndexedEmbeddings(vectors=vectors)


def parse(body: Any) -> EmbeddingResponse:
    """
    Classify a raw provider response body.

    Direct:  {"embedding": [..]}  or Titan's {"embeddings": [..floats..]}
    Indexed: {"embeddings": [[..], ..]}, {"embeddings": [{"embedding": [..]}]},
             {"embeddings": {"float": [[..]]}}, {"data": [{"embedding": [..]}]}
    """
    if not isinstance(body, Mapping):
        raise ValidationFailure(f"Embedding response must be an object, got {type(body).__name__}")

    if "embedding" in body:
        return DirectEmbedding(vector=_to_vector(body["embedding"]))

    embeddings = body.get("embeddings")
    if isinstance(embeddings, Mapping) and isinstance(embeddings.get("float"), list):
        return _indexed(embeddings["float"])
    if isinstance(embeddings, list) and embeddings:
        if _is_vector(embeddings):
            return DirectEmbedding(vector=_to_vector(embeddings))
        return _indexed(embeddings)

    data = body.get("data")
    if isinstance(data, list) and data:
        return _indexed(data)

    raise ValidationFailure(f"Unrecognised embedding response shape (keys={sorted(body.keys())})")
