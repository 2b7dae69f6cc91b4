"""
Aggregate statistics over per-item evaluation results.

The significance score here is a simplified heuristic derived from the size of
the algorithm/baseline difference. It is NOT a hypothesis test and must not be
read as one; it is kept for behavioural compatibility with the dashboard.
"""
from __future__ import annotations

from typing import Callable, Dict, Sequence

import numpy as np

from autosearchpro.models import (
    AdvancedStats,
    ImprovementReport,
    MetricsResult,
    PerItemResult,
    SignificanceReport,
)

METRIC_FIELDS = ("precision", "recall", "f1_score")

SIGNIFICANCE_THRESHOLD = 0.05
MIN_P_VALUE = 0.001


def _reduce(per_item: Sequence[PerItemResult], fn: Callable[[np.ndarray], float]) -> MetricsResult:
    if not per_item:
        return MetricsResult.zero()
    values: Dict[str, float] = {}
    for name in METRIC_FIELDS:
        arr = np.array([getattr(r.metrics, name) for r in per_item], dtype=float)
        values[name] = float(fn(arr))
    return MetricsResult(**values)


def compute_advanced_stats(per_item: Sequence[PerItemResult]) -> AdvancedStats:
    """
    mean / median / stdDev / min / max of each metric field across per-item results.

    stdDev is the population standard deviation (0.0 for a single item).
    An empty collection yields all-zero stats.
    """
    items = list(per_item or [])
    return AdvancedStats(
        mean=_reduce(items, np.mean),
        median=_reduce(items, np.median),
        std_dev=_reduce(items, lambda a: np.std(a) if len(a) > 1 else 0.0),
        min=_reduce(items, np.min),
        max=_reduce(items, np.max),
    )


def improvement_percent(current: float, baseline: float) -> float:
    if baseline == 0:
        return 100.0 if current > 0 else 0.0
    return (current - baseline) / baseline * 100.0


def compare_to_baseline(overall: MetricsResult, baseline: MetricsResult) -> ImprovementReport:
    return ImprovementReport(
        precision_improvement=improvement_percent(overall.precision, baseline.precision),
        recall_improvement=improvement_percent(overall.recall, baseline.recall),
        f1_improvement=improvement_percent(overall.f1_score, baseline.f1_score),
    )


def heuristic_p_value(current: float, baseline: float) -> float:
    return max(MIN_P_VALUE, SIGNIFICANCE_THRESHOLD - abs(current - baseline))


def is_significant(p_value: float) -> bool:
    return p_value < SIGNIFICANCE_THRESHOLD


def evaluate_significance(overall: MetricsResult, baseline: MetricsResult) -> SignificanceReport:
    p_values = {
        name: heuristic_p_value(getattr(overall, name), getattr(baseline, name))
        for name in METRIC_FIELDS
    }
    return SignificanceReport(
        p_values=p_values,
        significant={name: is_significant(p) for name, p in p_values.items()},
    )
