"""Tests for evaluation metrics recorded by AccessControlService."""

from __future__ import annotations

from prometheus_client import REGISTRY
from accesscore import AccessControlService, Principal, eval_permission


def _sample(name: str) -> float:
    return REGISTRY.get_sample_value(name) or 0.0


class TestEvaluationMetrics:
    """Tests for the prometheus counter and summaries."""

    def test_evaluate_counts_and_times(self, service: AccessControlService, viewer: Principal) -> None:
        evaluations = _sample("accesscore_access_evaluations_total")
        timed = _sample("accesscore_access_evaluation_duration_seconds_count")

        service.evaluate(viewer, eval_permission("dashboards:read"))
        service.evaluate(viewer, eval_permission("dashboards:read"))

        assert _sample("accesscore_access_evaluations_total") == evaluations + 2
        assert _sample("accesscore_access_evaluation_duration_seconds_count") == timed + 2

    def test_evaluate_times_permission_computation(self, service: AccessControlService, viewer: Principal) -> None:
        computed = _sample("accesscore_access_permissions_duration_seconds_count")
        service.evaluate(viewer, eval_permission("dashboards:read"))
        assert _sample("accesscore_access_permissions_duration_seconds_count") == computed + 1

    def test_get_user_permissions_timed_not_counted(self, service: AccessControlService, viewer: Principal) -> None:
        evaluations = _sample("accesscore_access_evaluations_total")
        computed = _sample("accesscore_access_permissions_duration_seconds_count")

        service.get_user_permissions(viewer)

        assert _sample("accesscore_access_permissions_duration_seconds_count") == computed + 1
        assert _sample("accesscore_access_evaluations_total") == evaluations
