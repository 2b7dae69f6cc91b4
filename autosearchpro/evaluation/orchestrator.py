"""
autosearchpro/evaluation/orchestrator.py

Runs an extractor-vs-baseline evaluation over a dataset.

Quota policy (the AI extractor has a call budget):
- more than policy.large_dataset_threshold items -> baseline for every item
- otherwise item i goes to the AI path when i % policy.ai_every_nth == 0
- an AI failure on the AI path falls back to the baseline for that item

Baseline keywords are computed for every item regardless of path, so each
item carries both the primary metrics and the baseline metrics.

Items are scheduled together and awaited as a group; per_item keeps input order.
"""
from __future__ import annotations

import asyncio
import sys
from typing import Any, List, Optional, Sequence, Tuple

from autosearchpro.config import EvaluationPolicy, load_evaluation_policy
from autosearchpro.evaluation.metrics import average_metrics, calculate_metrics
from autosearchpro.evaluation.statistics import compute_advanced_stats
from autosearchpro.extraction.baseline import extract_baseline_keywords
from autosearchpro.extraction.pipeline import KeywordExtractor, extract_or_baseline
from autosearchpro.io.dataset_loader import validate_item
from autosearchpro.models import (
    EvaluationDataItem,
    EvaluationResult,
    KeywordItem,
    MetricsResult,
    PerItemResult,
)
from autosearchpro.notifications import Notifier, StderrNotifier

REASON_LARGE_DATASET = "large_dataset"
REASON_QUOTA_POLICY = "quota_policy"
REASON_ITEM_ERROR = "item_error"


class EvaluationError(Exception):
    """Base class for errors that stop an evaluation run."""


class EmptyDatasetError(EvaluationError):
    pass


class NoValidResultsError(EvaluationError):
    pass


def _failed_item(item: EvaluationDataItem) -> PerItemResult:
    """Partial-failure record: baseline keywords, zeroed metrics, marked as fallback."""
    baseline_keywords = tuple(extract_baseline_keywords(item.description))
    return PerItemResult(
        id=item.id,
        metrics=MetricsResult.zero(),
        baseline_metrics=MetricsResult.zero(),
        ground_truth=tuple(item.ground_truth),
        extracted_keywords=baseline_keywords,
        baseline_keywords=baseline_keywords,
        using_fallback=True,
        fallback_reason=REASON_ITEM_ERROR,
    )


def _bare_item(raw: Any, index: int) -> Optional[EvaluationDataItem]:
    """The item without its ground truth, or None when it has no usable description."""
    description = raw.get("description") if isinstance(raw, dict) else getattr(raw, "description", None)
    if not isinstance(description, str) or not description.strip():
        return None
    raw_id = raw.get("id") if isinstance(raw, dict) else getattr(raw, "id", None)
    item_id = raw_id if isinstance(raw_id, (str, int)) and raw_id != "" else f"item-{index}"
    return EvaluationDataItem(id=item_id, description=description)


def _warn_item_failed(item: EvaluationDataItem, exc: Exception) -> None:
    print(
        f"[AutoSearchPro] WARNING: item {item.id} failed ({type(exc).__name__}), using baseline fallback.",
        file=sys.stderr,
    )


async def _score_item(
        item: EvaluationDataItem,
        index: int,
        total: int,
        ai_extractor: Optional[KeywordExtractor],
        policy: EvaluationPolicy,
) -> PerItemResult:
    baseline_keywords: Tuple[KeywordItem, ...] = tuple(extract_baseline_keywords(item.description))

    if policy.uses_ai(index, total):
        outcome = await extract_or_baseline(ai_extractor, item.description)
        extracted = outcome.keywords
        using_fallback = outcome.used_fallback
        reason = outcome.error.kind if outcome.error else None
    else:
        extracted = baseline_keywords
        using_fallback = True
        reason = REASON_LARGE_DATASET if total > policy.large_dataset_threshold else REASON_QUOTA_POLICY

    ground_truth = list(item.ground_truth)
    return PerItemResult(
        id=item.id,
        metrics=calculate_metrics(ground_truth, list(extracted)),
        baseline_metrics=calculate_metrics(ground_truth, list(baseline_keywords)),
        ground_truth=tuple(item.ground_truth),
        extracted_keywords=tuple(extracted),
        baseline_keywords=baseline_keywords,
        using_fallback=using_fallback,
        fallback_reason=reason,
    )


async def _evaluate_item(
        raw: Any,
        index: int,
        total: int,
        ai_extractor: Optional[KeywordExtractor],
        policy: EvaluationPolicy,
) -> Optional[PerItemResult]:
    try:
        item = validate_item(raw, index)
    except Exception as exc:
        # Validation itself broke; keep the item when its description is usable.
        item = _bare_item(raw, index)
        if item is None:
            return None
        _warn_item_failed(item, exc)
        return _failed_item(item)

    if item is None:
        # Malformed items are skipped, never fatal.
        return None
    try:
        return await _score_item(item, index, total, ai_extractor, policy)
    except Exception as exc:
        _warn_item_failed(item, exc)
        return _failed_item(item)


async def run_evaluation(
        items: Sequence[Any],
        *,
        ai_extractor: Optional[KeywordExtractor] = None,
        policy: Optional[EvaluationPolicy] = None,
        notifier: Optional[Notifier] = None,
) -> EvaluationResult:
    """
    Evaluate every item and aggregate.

    Raises EmptyDatasetError for an empty or non-list dataset and
    NoValidResultsError when no item survives validation. Extraction and
    metric failures never propagate.
    """
    if not isinstance(items, (list, tuple)) or len(items) == 0:
        raise EmptyDatasetError("No valid data items to evaluate")

    policy = policy or load_evaluation_policy()
    notifier = notifier or StderrNotifier()
    total = len(items)

    if total > policy.large_dataset_threshold:
        notifier.warning(
            f"Large dataset detected ({total} items). "
            "Using baseline algorithm for all items to conserve AI quota."
        )

    settled = await asyncio.gather(
        *(_evaluate_item(raw, idx, total, ai_extractor, policy) for idx, raw in enumerate(items)),
        return_exceptions=True,
    )

    per_item: List[PerItemResult] = []
    for idx, r in enumerate(settled):
        if isinstance(r, PerItemResult):
            per_item.append(r)
        elif isinstance(r, BaseException):
            notifier.warning(f"Item {idx} could not be evaluated ({type(r).__name__}).")
    if not per_item:
        raise NoValidResultsError("No items could be successfully evaluated")

    if all(r.using_fallback for r in per_item):
        notifier.warning("Evaluation completed using the baseline algorithm for all items.")
    elif any(r.using_fallback for r in per_item):
        notifier.info("Some items were processed using the baseline algorithm.")

    return EvaluationResult(
        overall=average_metrics([r.metrics for r in per_item]),
        baseline=average_metrics([r.baseline_metrics for r in per_item]),
        per_item=tuple(per_item),
        advanced=compute_advanced_stats(per_item),
    )


def run_evaluation_sync(items: Sequence[Any], **kwargs: Any) -> EvaluationResult:
    """Blocking wrapper for scripts and the CLI."""
    return asyncio.run(run_evaluation(items, **kwargs))
