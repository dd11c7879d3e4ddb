"""Statistical helpers for TF-IDF scoring.

The functions here stay independent of the index so they can be unit tested
on plain counts.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
import math


def count_terms(terms: Sequence[str]) -> dict[str, int]:
    """Return per-term occurrence counts, keyed in first-seen order."""

    return dict(Counter(terms))


def calculate_tf(count: int, total_terms: int) -> float:
    """Return the length-normalized term frequency."""

    if total_terms <= 0:
        return 0.0
    return count / total_terms


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return ``ln(total_docs / max(doc_freq, 1))``.

    Terms the index has never seen fall back to a document frequency of 1,
    which gives them a high but finite weight at query time. An empty index
    has no meaningful idf and returns 0.
    """

    if total_docs <= 0:
        return 0.0
    return math.log(total_docs / max(doc_freq, 1))


def group_counts(keys: Iterable[str]) -> dict[str, int]:
    """Count occurrences of each key, keyed in first-seen order."""

    counts: dict[str, int] = {}
    for key in keys:
        counts[key] = counts.get(key, 0) + 1
    return counts
