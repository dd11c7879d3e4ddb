"""In-memory inverted index over chat documents.

The index keeps, per term, a postings map of document id to term count plus
a document frequency per term. Postings never outlive their last document:
when a term's document frequency reaches zero the term is dropped from both
maps in the same step.
"""

from __future__ import annotations

import logging
import time

from chat_search.search.analyzers import tokenize
from chat_search.search.models import Document
from chat_search.search.stats import count_terms


logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"
MIN_DOCUMENT_LENGTH = 10


def now_ms() -> int:
    return int(time.time() * 1000)


def is_indexable(text: str) -> bool:
    """Return True when ``text`` is long enough to be worth indexing."""

    return len(text.strip()) >= MIN_DOCUMENT_LENGTH


class InvertedIndex:
    """Term -> document postings with document frequencies."""

    def __init__(self) -> None:
        self.documents: list[Document] = []
        self.term_frequency: dict[str, dict[str, int]] = {}
        self.document_frequency: dict[str, int] = {}
        self.last_updated: int = now_ms()
        self.schema_version: str = SCHEMA_VERSION
        self._positions: dict[str, int] = {}

    @property
    def total_documents(self) -> int:
        return len(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    def contains(self, doc_id: str) -> bool:
        return doc_id in self._positions

    def get_document(self, doc_id: str) -> Document | None:
        position = self._positions.get(doc_id)
        if position is None:
            return None
        return self.documents[position]

    def add_document(self, doc: Document) -> bool:
        """Append ``doc`` and its postings.

        Returns False when the text is too short to index; nothing is stored
        in that case.

        Raises:
            ValueError: if a document with the same id is already indexed.
        """
        if self.contains(doc.id):
            msg = f"Document '{doc.id}' is already indexed; use update_document"
            raise ValueError(msg)
        if not is_indexable(doc.text):
            logger.debug("Skipping short document %s", doc.id)
            return False

        self._add_postings(doc)
        self._positions[doc.id] = len(self.documents)
        self.documents.append(doc)
        self.last_updated = now_ms()
        return True

    def remove_document_postings(self, doc_id: str) -> None:
        """Drop every posting of ``doc_id``; the stored document is left alone."""

        emptied: list[str] = []
        for term, postings in self.term_frequency.items():
            if doc_id not in postings:
                continue
            del postings[doc_id]
            remaining = self.document_frequency.get(term, 0) - 1
            if remaining <= 0:
                emptied.append(term)
            else:
                self.document_frequency[term] = remaining
        for term in emptied:
            self.term_frequency.pop(term, None)
            self.document_frequency.pop(term, None)

    def update_document(self, doc: Document) -> bool:
        """Replace the stored document with the same id, or add it if new.

        A replacement too short to index leaves the stored version untouched.
        Returns True when the index changed.
        """
        position = self._positions.get(doc.id)
        if position is None:
            return self.add_document(doc)
        if not is_indexable(doc.text):
            logger.debug("Ignoring short replacement for document %s", doc.id)
            return False

        self.remove_document_postings(doc.id)
        self.documents[position] = doc
        self._add_postings(doc)
        self.last_updated = now_ms()
        return True

    def reset(self) -> None:
        """Return to the freshly created state, bumping ``last_updated``."""

        self.documents = []
        self.term_frequency = {}
        self.document_frequency = {}
        self._positions = {}
        self.schema_version = SCHEMA_VERSION
        self.last_updated = now_ms()

    def restore(
        self,
        documents: list[Document],
        term_frequency: dict[str, dict[str, int]],
        document_frequency: dict[str, int],
        last_updated: int,
    ) -> None:
        """Replace the whole state with previously persisted values.

        Raises:
            ValueError: if the values break the index invariants.
        """
        positions: dict[str, int] = {}
        for position, doc in enumerate(documents):
            if doc.id in positions:
                msg = f"Duplicate document id '{doc.id}' in snapshot"
                raise ValueError(msg)
            positions[doc.id] = position
        if term_frequency.keys() != document_frequency.keys():
            raise ValueError("Term frequency and document frequency terms differ")
        for term, postings in term_frequency.items():
            live = [doc_id for doc_id, count in postings.items() if count > 0]
            if not live or len(live) != len(postings):
                msg = f"Term '{term}' has empty or non-positive postings"
                raise ValueError(msg)
            if document_frequency[term] != len(postings):
                msg = f"Document frequency mismatch for term '{term}'"
                raise ValueError(msg)
            if any(doc_id not in positions for doc_id in postings):
                msg = f"Term '{term}' references an unknown document"
                raise ValueError(msg)

        self.documents = list(documents)
        self.term_frequency = {term: dict(postings) for term, postings in term_frequency.items()}
        self.document_frequency = dict(document_frequency)
        self._positions = positions
        self.schema_version = SCHEMA_VERSION
        self.last_updated = last_updated

    def _add_postings(self, doc: Document) -> None:
        for term, count in count_terms(tokenize(doc.text)).items():
            self.term_frequency.setdefault(term, {})[doc.id] = count
            self.document_frequency[term] = self.document_frequency.get(term, 0) + 1
