"""Local TF-IDF search over chat messages."""

from chat_search.app_builder import build_search_service
from chat_search.config import Settings
from chat_search.search.models import Document, IndexStats, SearchResult
from chat_search.search.storage import InMemoryKeyValueStore, KeyValueStore
from chat_search.services.search_service import ChatSearchService


__all__ = [
    "ChatSearchService",
    "Document",
    "InMemoryKeyValueStore",
    "IndexStats",
    "KeyValueStore",
    "SearchResult",
    "Settings",
    "build_search_service",
]
