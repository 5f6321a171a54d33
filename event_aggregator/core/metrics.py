"""Prometheus metric definitions for the aggregator.

Every name is snake_case and exported under the ``aggregator_`` namespace.
"""

from __future__ import annotations

import re
from typing import TypeVar

from prometheus_client import Counter, Gauge, Histogram

NAMESPACE = "aggregator"

_SNAKE_CASE = re.compile(r"^[a-z][a-z0-9_]*$")

M = TypeVar("M", Counter, Gauge, Histogram)


def _metric(kind: type[M], name: str, doc: str, **kwargs) -> M:
    if not _SNAKE_CASE.match(name):
        raise ValueError(f"metric name must be snake_case: {name!r}")
    return kind(f"{NAMESPACE}_{name}", doc, **kwargs)


# Ingestion queue
EVENTS_SUBMITTED_TOTAL = _metric(
    Counter, "events_submitted_total", "Events accepted into the ingestion queue."
)
EVENTS_REJECTED_TOTAL = _metric(
    Counter, "events_rejected_total", "Events rejected because the queue stayed full."
)
EVENTS_PROCESSED_TOTAL = _metric(
    Counter, "events_processed_total", "Events applied to the storage backend."
)
EVENTS_DROPPED_TOTAL = _metric(
    Counter,
    "events_dropped_total",
    "Queued events discarded when the consumer stopped.",
)
STORAGE_APPLY_ERRORS_TOTAL = _metric(
    Counter,
    "storage_apply_errors_total",
    "Unexpected failures applying an event to storage.",
)
QUEUE_CURRENT_SIZE = _metric(
    Gauge,
    "queue_current_size",
    "Current number of events waiting in the ingestion queue.",
)

# Storage
REDIS_WRITE_ERRORS_TOTAL = _metric(
    Counter,
    "redis_write_errors_total",
    "Events dropped because Redis was unreachable.",
)
REDIS_RECORDS_SKIPPED_TOTAL = _metric(
    Counter,
    "redis_records_skipped_total",
    "Stored records skipped because they failed to parse.",
)
QUERY_LATENCY_SECONDS = _metric(
    Histogram,
    "query_latency_seconds",
    "Latency of aggregate queries against storage.",
)
