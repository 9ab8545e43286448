"""
Cosine similarity scoring for the in-process retrieval fallback.

Dependencies: math (stdlib)
System role: Vector ranking without an external index
"""

import math
from collections.abc import Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity dot(a, b) / (|a| * |b|).

    Returns 0.0 when the vectors differ in length or either norm is zero.
    """
    if len(a) != len(b) or not a:
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    denominator = math.sqrt(norm_a) * math.sqrt(norm_b)
    if denominator == 0:
        return 0.0
    return dot / denominator


def rank_by_similarity(
    query: Sequence[float],
    candidates: Iterable[tuple[T, Sequence[float]]],
    top_k: int,
    threshold: float,
) -> list[tuple[T, float]]:
    """
    Score candidates against the query and keep the best top_k above threshold.

    Candidates keep their input order on equal scores (sorted() is stable).

    Args:
        query: Query embedding
        candidates: (item, embedding) pairs in storage order
        top_k: Maximum results
        threshold: Minimum similarity (inclusive)

    Returns:
        list[tuple[T, float]]: (item, similarity) ordered by similarity descending
    """
    scored = [
        (item, cosine_similarity(query, embedding))
        for item, embedding in candidates
    ]
    kept = [pair for pair in scored if pair[1] >= threshold]
    kept = sorted(kept, key=lambda pair: pair[1], reverse=True)
    return kept[:top_k]
