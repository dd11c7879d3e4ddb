"""Query engine: ranks indexed documents against a free-text query."""

from __future__ import annotations

import logging

from chat_search.search.analyzers import tokenize
from chat_search.search.index_manager import IndexManager
from chat_search.search.models import Document, SearchResult
from chat_search.search.similarity import cosine_similarity
from chat_search.search.vectorizer import vectorize


logger = logging.getLogger(__name__)

MAX_RESULTS = 50
MIN_QUERY_LENGTH = 2
DEFAULT_LIMIT = 20


class QueryEngine:
    """Scores every candidate document by cosine similarity of TF-IDF vectors."""

    def __init__(self, manager: IndexManager) -> None:
        self.manager = manager

    def search(self, query: str, scope: str | None = None, limit: int = DEFAULT_LIMIT) -> list[SearchResult]:
        """Return documents matching ``query``, best first.

        Args:
            query: Free-text query; fewer than two non-blank characters yields no results
            scope: Restrict candidates to this scope; None or "" searches all scopes
            limit: Maximum results, capped at MAX_RESULTS

        Equal scores keep index insertion order.
        """
        if len(query.strip()) < MIN_QUERY_LENGTH:
            return []

        index = self.manager.index
        query_vector = vectorize(query, index)
        if not query_vector:
            return []
        query_terms = list(dict.fromkeys(tokenize(query)))

        results: list[SearchResult] = []
        for document in self._candidates(scope):
            score = cosine_similarity(query_vector, vectorize(document.text, index))
            if score <= 0:
                continue
            document_terms = set(tokenize(document.text))
            results.append(
                SearchResult(
                    document=document,
                    score=score,
                    matched_terms=[term for term in query_terms if term in document_terms],
                )
            )

        results.sort(key=lambda result: result.score, reverse=True)
        capped = min(max(limit, 0), MAX_RESULTS)
        logger.debug(
            "Query matched %d documents",
            len(results),
            extra={"query_terms": query_terms, "returned": min(capped, len(results))},
        )
        return results[:capped]

    def _candidates(self, scope: str | None) -> list[Document]:
        documents = self.manager.index.documents
        if not scope:
            return documents
        return [doc for doc in documents if doc.scope == scope]
