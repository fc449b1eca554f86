"""
Prometheus metrics for comparison runs.

Tracks statements issued per dialect, per-table outcomes and the number of
drifted rows found. A comparison is a batch job, so the registry is written
to a file for the node exporter textfile collector instead of being served.

Usage:
    from dbcompare.utils.metrics import QUERIES_TOTAL, write_metrics

    QUERIES_TOTAL.labels(dialect="postgres", status="ok").inc()
    write_metrics("/var/lib/node_exporter/dbcompare.prom")
"""

import logging
from collections.abc import Callable
from typing import TypeVar

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, write_to_textfile

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Create a new metric or return the existing one if already registered.

    Args:
        metric_factory: Callable that creates the metric (e.g., lambda: Counter(...))
        metric_name: Name of the metric for lookup if already registered
        registry: Prometheus registry to use (default: global REGISTRY)

    Returns:
        The metric instance (either newly created or existing)
    """
    try:
        return metric_factory()
    except ValueError:
        existing = registry._names_to_collectors.get(metric_name)
        if existing is not None:
            return existing
        raise


QUERIES_TOTAL = get_or_create_metric(
    lambda: Counter(
        "dbcompare_queries_total",
        "Statements executed against compared databases",
        ["dialect", "status"],
    ),
    "dbcompare_queries_total",
)

QUERY_DURATION = get_or_create_metric(
    lambda: Histogram(
        "dbcompare_query_duration_seconds",
        "Statement execution time",
        ["dialect"],
        buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0, 120.0, 600.0],
    ),
    "dbcompare_query_duration_seconds",
)

TABLES_TOTAL = get_or_create_metric(
    lambda: Counter(
        "dbcompare_tables_total",
        "Tables visited by comparison runs",
        ["status"],  # unchanged, changed, failed
    ),
    "dbcompare_tables_total",
)

DIFF_ROWS_TOTAL = get_or_create_metric(
    lambda: Counter(
        "dbcompare_diff_rows_total",
        "Rows reported as drifted",
        ["kind"],  # rows, deleted, new
    ),
    "dbcompare_diff_rows_total",
)


def write_metrics(path: str, registry: CollectorRegistry = REGISTRY) -> None:
    """
    Write the registry in Prometheus text format.

    Args:
        path: Destination file, replaced atomically
        registry: Registry to export (default: global REGISTRY)
    """
    write_to_textfile(path, registry)
    logger.info(f"Metrics written to {path}")
