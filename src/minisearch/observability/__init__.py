"""Observability module for logging, tracing and metrics."""

from minisearch.observability.context import get_trace_context, set_trace_context, trace_context
from minisearch.observability.logging import JsonFormatter, configure_logging
from minisearch.observability.metrics import (
    DOCUMENTS_INDEXED,
    INDEX_TERM_COUNT,
    SEARCH_LATENCY,
    SNAPSHOT_OPERATIONS,
    get_metrics,
    track_latency,
    write_metrics,
)
from minisearch.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "DOCUMENTS_INDEXED",
    "INDEX_TERM_COUNT",
    "SEARCH_LATENCY",
    "SNAPSHOT_OPERATIONS",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
    "write_metrics",
]
