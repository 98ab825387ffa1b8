"""Prometheus counters for privileged user administration."""

from __future__ import annotations

from prometheus_client import Counter

OPERATIONS = Counter(
    "user_admin_operations_total",
    "User administration requests partitioned by operation and outcome.",
    ["operation", "outcome"],
)


def record(operation: str, outcome: str) -> None:
    OPERATIONS.labels(operation=operation, outcome=outcome).inc()
