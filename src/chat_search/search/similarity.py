"""Cosine similarity over sparse term vectors."""

from __future__ import annotations

from collections.abc import Mapping
import math


def cosine_similarity(vec_a: Mapping[str, float], vec_b: Mapping[str, float]) -> float:
    """Return the cosine similarity of two non-negative sparse vectors.

    Vectors that share no term score exactly 0.0, as does any vector with zero
    magnitude. The result is clamped to ``[0, 1]``.
    """

    if not vec_a or not vec_b or vec_a.keys().isdisjoint(vec_b.keys()):
        return 0.0

    dot_product = 0.0
    magnitude_a = 0.0
    magnitude_b = 0.0
    for term in vec_a.keys() | vec_b.keys():
        value_a = vec_a.get(term, 0.0)
        value_b = vec_b.get(term, 0.0)
        dot_product += value_a * value_b
        magnitude_a += value_a * value_a
        magnitude_b += value_b * value_b

    magnitude = math.sqrt(magnitude_a) * math.sqrt(magnitude_b)
    if magnitude == 0:
        return 0.0
    return min(max(dot_product / magnitude, 0.0), 1.0)
