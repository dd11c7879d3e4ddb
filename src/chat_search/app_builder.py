"""Construction of a ready-to-use search service."""

from __future__ import annotations

import logging

from chat_search.config import Settings
from chat_search.observability.logging import configure_logging
from chat_search.observability.metrics import init_metrics
from chat_search.search.storage import InMemoryKeyValueStore, KeyValueStore
from chat_search.services.search_service import ChatSearchService


logger = logging.getLogger(__name__)


def build_search_service(
    settings: Settings | None = None,
    store: KeyValueStore | None = None,
    *,
    configure_logs: bool = True,
) -> ChatSearchService:
    """Build a ``ChatSearchService`` wired to ``store``.

    Settings default to the environment, the store to an in-memory one. Pass
    ``configure_logs=False`` when the host already owns logging setup.
    """
    resolved = settings or Settings()  # type: ignore[call-arg]
    if configure_logs:
        configure_logging(resolved.log_level, resolved.log_json)
    init_metrics(service_name=resolved.service_name)
    if store is None:
        store = InMemoryKeyValueStore()
        logger.info("No key-value store supplied; the search index will not outlive this process")
    return ChatSearchService(resolved, store)
