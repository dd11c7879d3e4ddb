"""Persistence for the inverted index.

The engine needs exactly two operations from its host: ``get`` and ``set`` on
a key-value store. The whole index is stored under one key as a single JSON
document encoded with orjson. Dictionaries are written as ordered
``[key, value]`` pair lists, so the format does not depend on any language's
map literal:

    {"schema_version": "1.0.0",
     "documents": [{"id": "...", "scope": "...", "text": "...", ...}],
     "term_frequency": [["term", [["doc-id", 2]]]],
     "document_frequency": [["term", 1]],
     "total_documents": 1,
     "last_updated": 1700000000000}
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import orjson
from pydantic import BaseModel, model_validator

from chat_search.search.inverted_index import SCHEMA_VERSION, InvertedIndex
from chat_search.search.models import Document


DEFAULT_STORAGE_KEY = "chat_search.index"


class SchemaVersionMismatch(ValueError):
    """Raised when a persisted snapshot was written by another schema version."""

    def __init__(self, found: object) -> None:
        super().__init__(f"Unsupported index schema version {found!r}; expected {SCHEMA_VERSION!r}")
        self.found = found


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol implemented by host-provided persistence backends."""

    async def get(self, key: str) -> str | bytes | None:  # pragma: no cover - interface definition
        ...

    async def set(self, key: str, value: str) -> None:  # pragma: no cover - interface definition
        ...


class InMemoryKeyValueStore:
    """Dictionary-backed store, used by default and in tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


class IndexSnapshot(BaseModel):
    """Validated shape of a persisted index."""

    schema_version: str
    documents: list[Document]
    term_frequency: list[tuple[str, list[tuple[str, int]]]]
    document_frequency: list[tuple[str, int]]
    total_documents: int
    last_updated: int

    @model_validator(mode="after")
    def _check_document_total(self) -> IndexSnapshot:
        if self.total_documents != len(self.documents):
            raise ValueError(
                f"total_documents={self.total_documents} does not match {len(self.documents)} stored documents"
            )
        return self

    @classmethod
    def from_index(cls, index: InvertedIndex) -> IndexSnapshot:
        return cls(
            schema_version=index.schema_version,
            documents=list(index.documents),
            term_frequency=[(term, list(postings.items())) for term, postings in index.term_frequency.items()],
            document_frequency=list(index.document_frequency.items()),
            total_documents=index.total_documents,
            last_updated=index.last_updated,
        )

    def apply_to(self, index: InvertedIndex) -> None:
        """Load this snapshot into ``index``.

        Raises:
            ValueError: if the snapshot breaks the index invariants.
        """
        index.restore(
            documents=list(self.documents),
            term_frequency={term: dict(postings) for term, postings in self.term_frequency},
            document_frequency=dict(self.document_frequency),
            last_updated=self.last_updated,
        )


def encode_index(index: InvertedIndex) -> str:
    """Serialize ``index`` into the portable JSON blob."""

    snapshot = IndexSnapshot.from_index(index)
    return orjson.dumps(snapshot.model_dump(mode="json")).decode("utf-8")


def decode_index(raw: str | bytes | dict[str, Any]) -> IndexSnapshot:
    """Parse and validate a persisted blob.

    The schema version is checked before anything else is validated, so a blob
    from another version is rejected even if its layout changed completely.

    Raises:
        SchemaVersionMismatch: if the blob carries another schema version.
        orjson.JSONDecodeError: if the blob is not JSON.
        pydantic.ValidationError: if the blob does not match the snapshot shape.
    """
    payload = raw if isinstance(raw, dict) else orjson.loads(raw)
    if not isinstance(payload, dict):
        raise SchemaVersionMismatch(None)
    version = payload.get("schema_version")
    if version != SCHEMA_VERSION:
        raise SchemaVersionMismatch(version)
    return IndexSnapshot.model_validate(payload)
