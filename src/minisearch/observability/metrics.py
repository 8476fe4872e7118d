"""Prometheus metrics for indexing and query latency."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


SEARCH_LATENCY = Histogram(
    "minisearch_search_latency_seconds",
    "Ranking latency in seconds",
    ["model"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)

DOCUMENTS_INDEXED = Counter(
    "minisearch_documents_indexed_total",
    "Documents ingested into an index",
)

INDEX_TERM_COUNT = Gauge(
    "minisearch_index_terms",
    "Distinct terms in the most recently updated index",
)

SNAPSHOT_OPERATIONS = Counter(
    "minisearch_snapshot_operations_total",
    "Snapshot save/load attempts",
    ["operation", "status"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def write_metrics(path: Path) -> None:
    """Dump the current metrics in text exposition format for a textfile collector."""
    path.write_bytes(get_metrics())
