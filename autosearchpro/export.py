from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import List, Optional, Union

from autosearchpro.models import EvaluationResult, MetricsResult

SUMMARY_HEADER = ["Metric", "Overall", "Baseline", "Mean", "Median", "StdDev", "Min", "Max"]
ITEM_HEADER = [
    "Item", "Precision", "Recall", "F1 Score",
    "Baseline Precision", "Baseline Recall", "Baseline F1 Score", "Using Fallback",
]

_METRIC_ROWS = (
    ("Precision", "precision"),
    ("Recall", "recall"),
    ("F1 Score", "f1_score"),
)


def format_percent(value: Optional[float]) -> str:
    if value is None:
        return ""
    return f"{value * 100:.2f}%"


def result_to_json(result: EvaluationResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


def _summary_row(label: str, attr: str, result: EvaluationResult) -> List[str]:
    row = [label, format_percent(getattr(result.overall, attr)), format_percent(getattr(result.baseline, attr))]
    adv = result.advanced
    stats: List[Optional[MetricsResult]] = (
        [adv.mean, adv.median, adv.std_dev, adv.min, adv.max] if adv else [None] * 5
    )
    row.extend(format_percent(getattr(s, attr)) if s else "" for s in stats)
    return row


def result_to_csv(result: EvaluationResult) -> str:
    """
    Summary block (Precision / Recall / F1 x Overall, Baseline, Mean, Median,
    StdDev, Min, Max), then one row per evaluated item. Values are percentages
    with two decimals.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(SUMMARY_HEADER)
    for label, attr in _METRIC_ROWS:
        writer.writerow(_summary_row(label, attr, result))

    writer.writerow([])
    writer.writerow(["Per-Item Results"])
    writer.writerow(ITEM_HEADER)
    for item in result.per_item:
        writer.writerow([
            item.id,
            format_percent(item.metrics.precision),
            format_percent(item.metrics.recall),
            format_percent(item.metrics.f1_score),
            format_percent(item.baseline_metrics.precision),
            format_percent(item.baseline_metrics.recall),
            format_percent(item.baseline_metrics.f1_score),
            "yes" if item.using_fallback else "no",
        ])
    return buf.getvalue()


def write_export(result: EvaluationResult, path: Union[str, Path]) -> Path:
    """Writes JSON or CSV depending on the file suffix."""
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".json":
        content = result_to_json(result)
    elif suffix == ".csv":
        content = result_to_csv(result)
    else:
        raise ValueError(f"Unsupported export format '{suffix}'. Use .json or .csv.")
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    return p
