"""TF-IDF vectorization against the current inverted index state."""

from __future__ import annotations

from typing import TYPE_CHECKING

from chat_search.search.analyzers import tokenize
from chat_search.search.stats import calculate_idf, calculate_tf, count_terms


if TYPE_CHECKING:
    from chat_search.search.inverted_index import InvertedIndex


TermVector = dict[str, float]


def vectorize(text: str, index: InvertedIndex) -> TermVector:
    """Return the sparse TF-IDF vector of ``text``.

    Indexed documents and queries both go through here, so a document scored
    against itself always sees the same weights the query does.
    """

    terms = tokenize(text)
    if not terms:
        return {}
    total_terms = len(terms)
    total_docs = index.total_documents
    vector: TermVector = {}
    for term, count in count_terms(terms).items():
        idf = calculate_idf(index.document_frequency.get(term, 0), total_docs)
        vector[term] = calculate_tf(count, total_terms) * idf
    return vector
