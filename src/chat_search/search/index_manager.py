"""Index lifecycle: incremental indexing, statistics and persistence.

``IndexManager`` owns one ``InvertedIndex`` and the key-value store it is
persisted to. Mutations of the in-memory index are synchronous and complete
before any await, so readers only ever observe whole states. Indexing, saving,
loading and clearing are serialized by a single ``asyncio.Lock``; a second
caller waits for the first to finish.

Persistence never raises into the caller. A failed save leaves the in-memory
index authoritative. A stored index that cannot be decoded, or was written
under another schema version, loads as an empty index. A store read failure
also starts empty on first load, but a later reload keeps the index already
in memory.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
import logging
from typing import Any

from pydantic import ValidationError

from chat_search.observability.metrics import INDEX_DOC_COUNT, INDEXED_DOCUMENTS, PERSISTENCE_ERRORS
from chat_search.search.inverted_index import InvertedIndex
from chat_search.search.models import Document, IndexStats
from chat_search.search.stats import group_counts
from chat_search.search.storage import (
    DEFAULT_STORAGE_KEY,
    KeyValueStore,
    SchemaVersionMismatch,
    decode_index,
    encode_index,
)


logger = logging.getLogger(__name__)


class IndexManager:
    """Orchestrates document indexing against an inverted index and its store."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        autosave: bool = True,
    ) -> None:
        """Initialize the manager with an empty index.

        Args:
            store: Host-provided key-value persistence backend
            storage_key: Key the whole index is stored under
            autosave: Save after every change made by index_documents/clear
        """
        self.store = store
        self.storage_key = storage_key
        self.autosave = autosave
        self.index = InvertedIndex()
        self._lock = asyncio.Lock()
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def ensure_loaded(self) -> None:
        """Load the persisted index the first time it is needed."""
        if self._loaded:
            return
        async with self._lock:
            if not self._loaded:
                await self._load_unlocked()

    async def index_documents(self, docs: Iterable[Document | Mapping[str, Any]], scope: str) -> int:
        """Add or update ``docs`` under ``scope``.

        Documents whose id is already indexed are re-tokenized from their new
        text. Short texts and records that cannot be coerced are skipped.

        Returns:
            Number of documents added or updated.
        """
        async with self._lock:
            if not self._loaded:
                await self._load_unlocked()
            changed = self._apply(docs, scope)
            if changed and self.autosave:
                await self._save_unlocked()
        return changed

    async def clear(self) -> None:
        """Reset to an empty index."""
        async with self._lock:
            self.index.reset()
            self._loaded = True
            INDEX_DOC_COUNT.labels(index=self.storage_key).set(0)
            logger.info("Search index cleared", extra={"storage_key": self.storage_key})
            if self.autosave:
                await self._save_unlocked()

    async def save(self) -> None:
        async with self._lock:
            await self._save_unlocked()

    async def load(self) -> None:
        async with self._lock:
            await self._load_unlocked()

    def stats(self) -> IndexStats:
        """Return index statistics; per-scope counts are grouped on demand."""
        index = self.index
        return IndexStats(
            total_documents=index.total_documents,
            total_terms=len(index.document_frequency),
            last_updated=datetime.fromtimestamp(index.last_updated / 1000, tz=timezone.utc),
            schema_version=index.schema_version,
            per_scope_counts=group_counts(doc.scope for doc in index.documents),
        )

    def is_available(self) -> bool:
        return self.index.total_documents > 0

    def _apply(self, docs: Iterable[Document | Mapping[str, Any]], scope: str) -> int:
        added = updated = skipped = 0
        for record in docs:
            try:
                doc = Document.from_record(record, scope)
            except ValidationError as exc:
                skipped += 1
                logger.warning(
                    "Skipping document that failed validation",
                    extra={"scope": scope, "errors": exc.error_count()},
                )
                continue

            existed = self.index.contains(doc.id)
            if not self.index.update_document(doc):
                skipped += 1
            elif existed:
                updated += 1
            else:
                added += 1

        for outcome, count in (("added", added), ("updated", updated), ("skipped", skipped)):
            if count:
                INDEXED_DOCUMENTS.labels(outcome=outcome).inc(count)
        INDEX_DOC_COUNT.labels(index=self.storage_key).set(self.index.total_documents)
        if added or updated:
            logger.info(
                "Indexed %d new and %d updated documents for scope %s",
                added,
                updated,
                scope,
                extra={"skipped": skipped, "total_documents": self.index.total_documents},
            )
        return added + updated

    async def _save_unlocked(self) -> None:
        try:
            payload = encode_index(self.index)
            await self.store.set(self.storage_key, payload)
        except Exception:
            PERSISTENCE_ERRORS.labels(operation="save").inc()
            logger.warning("Failed to save search index", exc_info=True, extra={"storage_key": self.storage_key})
            return
        logger.debug("Saved search index", extra={"storage_key": self.storage_key, "bytes": len(payload)})

    async def _load_unlocked(self) -> None:
        try:
            raw = await self.store.get(self.storage_key)
        except Exception:
            PERSISTENCE_ERRORS.labels(operation="load").inc()
            if self._loaded:
                logger.warning(
                    "Failed to read search index, keeping the current one",
                    exc_info=True,
                    extra={"storage_key": self.storage_key, "total_documents": self.index.total_documents},
                )
                return
            logger.warning(
                "Failed to read search index, starting empty",
                exc_info=True,
                extra={"storage_key": self.storage_key},
            )
            raw = None

        fresh = InvertedIndex()
        try:
            if raw is not None:
                decode_index(raw).apply_to(fresh)
        except SchemaVersionMismatch as exc:
            logger.warning("Discarding persisted search index: %s", exc, extra={"storage_key": self.storage_key})
            fresh = InvertedIndex()
        except Exception:
            PERSISTENCE_ERRORS.labels(operation="load").inc()
            logger.warning(
                "Failed to load search index, starting empty",
                exc_info=True,
                extra={"storage_key": self.storage_key},
            )
            fresh = InvertedIndex()

        self.index = fresh
        self._loaded = True
        INDEX_DOC_COUNT.labels(index=self.storage_key).set(fresh.total_documents)
        logger.info(
            "Search index ready",
            extra={"storage_key": self.storage_key, "total_documents": fresh.total_documents},
        )
