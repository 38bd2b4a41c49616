"""Prometheus metrics for permission evaluation."""

from __future__ import annotations

from prometheus_client import Counter, Summary

ACCESS_EVALUATION_COUNT = Counter(
    "accesscore_access_evaluations",
    "Number of access control evaluations",
)

ACCESS_EVALUATION_DURATION = Summary(
    "accesscore_access_evaluation_duration_seconds",
    "Time spent evaluating access",
)

ACCESS_PERMISSIONS_DURATION = Summary(
    "accesscore_access_permissions_duration_seconds",
    "Time spent computing user permissions",
)

__all__ = [
    "ACCESS_EVALUATION_COUNT",
    "ACCESS_EVALUATION_DURATION",
    "ACCESS_PERMISSIONS_DURATION",
]
