"""Search service exposed to the host application.

The service is constructed once with its settings and key-value store and
passed by reference to whoever needs it. It loads the persisted index lazily
on first use, so constructing it never touches storage.
"""

from collections.abc import Iterable, Mapping
import logging
from typing import Any

from ..config import Settings
from ..observability.context import operation_context
from ..observability.metrics import SEARCH_LATENCY, SEARCH_RESULTS, track_latency
from ..search.index_manager import IndexManager
from ..search.models import Document, IndexStats, SearchResult
from ..search.query_engine import QueryEngine
from ..search.storage import KeyValueStore


logger = logging.getLogger(__name__)

_ALL_SCOPES = "*"


class ChatSearchService:
    """TF-IDF search over chat messages with incremental indexing."""

    def __init__(self, settings: Settings, store: KeyValueStore):
        """Initialize search service.

        Args:
            settings: Settings instance with all configuration
            store: Key-value backend the index is persisted to
        """
        self.settings = settings
        self.manager = IndexManager(store, storage_key=settings.storage_key, autosave=settings.autosave)
        self.engine = QueryEngine(self.manager)

    async def index_documents(self, docs: Iterable[Document | Mapping[str, Any]], scope: str) -> int:
        """Add or update messages of one conversation."""
        with operation_context(scope=scope):
            return await self.manager.index_documents(docs, scope)

    async def search(self, query: str, scope: str | None = None, limit: int | None = None) -> list[SearchResult]:
        """Rank indexed messages against ``query``."""
        await self.manager.ensure_loaded()
        effective_limit = self.settings.default_limit if limit is None else limit
        label = scope or _ALL_SCOPES
        with operation_context(scope=scope), track_latency(SEARCH_LATENCY, scope=label):
            results = self.engine.search(query, scope, effective_limit)
        SEARCH_RESULTS.labels(scope=label).observe(len(results))
        return results

    async def stats(self) -> IndexStats:
        await self.manager.ensure_loaded()
        return self.manager.stats()

    async def clear(self) -> None:
        await self.manager.clear()

    async def save(self) -> None:
        await self.manager.save()

    async def reload(self) -> None:
        """Replace the in-memory index with the stored one.

        If the store cannot be read, the current index stays in place.
        """
        logger.info("Reloading search index", extra={"storage_key": self.manager.storage_key})
        await self.manager.load()

    async def is_index_available(self) -> bool:
        """Return True when at least one document is indexed."""
        await self.manager.ensure_loaded()
        return self.manager.is_available()
