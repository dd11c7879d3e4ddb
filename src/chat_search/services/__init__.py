"""Service layer for chat-search."""

from .search_service import ChatSearchService


__all__ = ["ChatSearchService"]
