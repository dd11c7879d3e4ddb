"""Observability module: structured logging, trace correlation and metrics."""

from chat_search.observability.context import get_trace_context, operation_context, trace_context
from chat_search.observability.logging import JsonFormatter, configure_logging
from chat_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEXED_DOCUMENTS,
    PERSISTENCE_ERRORS,
    SEARCH_LATENCY,
    SEARCH_RESULTS,
    get_metrics,
    init_metrics,
    track_latency,
)


__all__ = [
    "INDEXED_DOCUMENTS",
    "INDEX_DOC_COUNT",
    "PERSISTENCE_ERRORS",
    "SEARCH_LATENCY",
    "SEARCH_RESULTS",
    "JsonFormatter",
    "configure_logging",
    "get_metrics",
    "get_trace_context",
    "init_metrics",
    "operation_context",
    "trace_context",
    "track_latency",
]
