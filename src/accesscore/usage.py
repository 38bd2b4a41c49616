"""Usage statistics collaborator.

Services register metric callbacks; a report collects every callback's
values into one flat mapping.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Union

logger = logging.getLogger(__name__)

MetricsFunc = Callable[[], Union[dict[str, Any], Awaitable[dict[str, Any]]]]


@dataclass
class UsageReport:
    """Collected usage metrics."""

    metrics: dict[str, Any] = field(default_factory=dict)


class UsageStats:
    """Collects usage metrics from registered callbacks."""

    def __init__(self) -> None:
        self._funcs: list[MetricsFunc] = []

    def register_metrics_func(self, fn: MetricsFunc) -> None:
        self._funcs.append(fn)

    async def get_usage_report(self) -> UsageReport:
        """Run every callback and merge their metrics.

        A failing callback is logged and skipped so one feature cannot
        break the whole report.
        """
        report = UsageReport()
        for fn in self._funcs:
            try:
                values = fn()
                if inspect.isawaitable(values):
                    values = await values
            except Exception as e:
                logger.warning("Usage metrics callback %r failed: %s", fn, e)
                continue
            report.metrics.update(values)
        return report


__all__ = ["MetricsFunc", "UsageReport", "UsageStats"]
