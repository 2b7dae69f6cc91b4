from __future__ import annotations

import sys
from typing import Any, Iterable, Optional, Sequence, Set

from autosearchpro.core.text_processing import normalize_keyword
from autosearchpro.models import MetricsResult


def clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else (1.0 if x > 1.0 else x)


def _keyword_of(item: Any) -> Optional[str]:
    """KeywordItem, mapping or bare object with a .keyword attribute -> normalized key."""
    if item is None:
        return None
    if isinstance(item, dict):
        kw = item.get("keyword")
    else:
        kw = getattr(item, "keyword", None)
    if not isinstance(kw, str) or not kw.strip():
        return None
    return normalize_keyword(kw)


def keyword_set(items: Iterable[Any]) -> Set[str]:
    """Presence-only set; frequency plays no part in matching."""
    out: Set[str] = set()
    for it in items:
        key = _keyword_of(it)
        if key is not None:
            out.add(key)
    return out


def calculate_metrics(ground_truth: Sequence[Any], extracted: Sequence[Any]) -> MetricsResult:
    """
    Set-based precision / recall / F1 of extracted keywords against ground truth.

    - non-list inputs -> zero metrics
    - items without a non-empty keyword are ignored
    - both sets empty -> zero metrics (absence on both sides is not a match)
    - never raises; any internal failure -> zero metrics
    """
    try:
        if not isinstance(ground_truth, (list, tuple)) or not isinstance(extracted, (list, tuple)):
            return MetricsResult.zero()

        truth_set = keyword_set(ground_truth)
        extracted_set = keyword_set(extracted)
        if not truth_set and not extracted_set:
            return MetricsResult.zero()

        true_positives = extracted_set & truth_set

        precision = len(true_positives) / len(extracted_set) if extracted_set else 0.0
        recall = len(true_positives) / len(truth_set) if truth_set else 0.0
        f1 = (2 * precision * recall / (precision + recall)) if (precision + recall) > 0 else 0.0

        return MetricsResult(
            precision=clamp01(precision),
            recall=clamp01(recall),
            f1_score=clamp01(f1),
            average_rank_correlation=0.0,
        )
    except Exception as exc:
        print(f"[AutoSearchPro] WARNING: metric computation failed: {type(exc).__name__}", file=sys.stderr)
        return MetricsResult.zero()


def calculate_average(values: Iterable[float]) -> float:
    vals = list(values or [])
    if not vals:
        return 0.0
    return sum(vals) / len(vals)


def average_metrics(results: Sequence[MetricsResult]) -> MetricsResult:
    """Per-field arithmetic mean; an empty sequence averages to zero."""
    return MetricsResult(
        precision=calculate_average(r.precision for r in results),
        recall=calculate_average(r.recall for r in results),
        f1_score=calculate_average(r.f1_score for r in results),
        average_rank_correlation=0.0,
    )
