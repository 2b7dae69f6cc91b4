from __future__ import annotations

import csv
import io
import json

import pytest

from autosearchpro.evaluation.statistics import compute_advanced_stats
from autosearchpro.export import (
    ITEM_HEADER,
    SUMMARY_HEADER,
    format_percent,
    result_to_csv,
    result_to_json,
    write_export,
)
from autosearchpro.models import EvaluationResult, KeywordItem, MetricsResult, PerItemResult


def _result() -> EvaluationResult:
    items = (
        PerItemResult(
            id="fe-1",
            metrics=MetricsResult(1.0, 0.5, 2 / 3),
            baseline_metrics=MetricsResult(0.25, 0.5, 1 / 3),
            ground_truth=(KeywordItem(keyword="react", frequency=2),),
            extracted_keywords=(KeywordItem(keyword="react"),),
            baseline_keywords=(KeywordItem(keyword="react"), KeywordItem(keyword="senior")),
            using_fallback=False,
        ),
        PerItemResult(
            id="be-2",
            metrics=MetricsResult(0.5, 0.5, 0.5),
            baseline_metrics=MetricsResult(0.5, 0.5, 0.5),
            ground_truth=(),
            extracted_keywords=(),
            baseline_keywords=(),
            using_fallback=True,
            fallback_reason="quota_policy",
        ),
    )
    return EvaluationResult(
        overall=MetricsResult(0.75, 0.5, 7 / 12),
        baseline=MetricsResult(0.375, 0.5, 5 / 12),
        per_item=items,
        advanced=compute_advanced_stats(items),
    )


def test_format_percent() -> None:
    assert format_percent(0.5) == "50.00%"
    assert format_percent(1 / 3) == "33.33%"
    assert format_percent(None) == ""


def test_csv_layout() -> None:
    rows = list(csv.reader(io.StringIO(result_to_csv(_result()))))

    assert rows[0] == SUMMARY_HEADER
    assert rows[1][:3] == ["Precision", "75.00%", "37.50%"]
    assert rows[1][3:] == ["75.00%", "75.00%", "25.00%", "50.00%", "100.00%"]
    assert rows[3][0] == "F1 Score"
    assert rows[4] == []
    assert rows[5] == ["Per-Item Results"]
    assert rows[6] == ITEM_HEADER
    assert rows[7] == ["fe-1", "100.00%", "50.00%", "66.67%", "25.00%", "50.00%", "33.33%", "no"]
    assert rows[8][-1] == "yes"


def test_csv_without_advanced_stats_leaves_columns_blank() -> None:
    result = _result()
    bare = EvaluationResult(overall=result.overall, baseline=result.baseline, per_item=result.per_item)
    rows = list(csv.reader(io.StringIO(result_to_csv(bare))))
    assert rows[1][3:] == ["", "", "", "", ""]


def test_json_uses_camel_case_keys() -> None:
    data = json.loads(result_to_json(_result()))
    assert data["overall"]["f1Score"] == pytest.approx(7 / 12)
    assert data["perItem"][1]["usingFallback"] is True
    assert data["perItem"][1]["fallbackReason"] == "quota_policy"
    assert data["perItem"][0]["groundTruth"] == [{"keyword": "react", "frequency": 2}]
    assert set(data["advanced"]) == {"mean", "median", "stdDev", "min", "max"}


def test_write_export_by_suffix(tmp_path) -> None:
    out = write_export(_result(), tmp_path / "nested" / "results.csv")
    assert out.read_text(encoding="utf-8").startswith("Metric,Overall,Baseline")

    out = write_export(_result(), tmp_path / "results.JSON")
    assert json.loads(out.read_text(encoding="utf-8"))["baseline"]["precision"] == 0.375

    with pytest.raises(ValueError, match="Unsupported export format"):
        write_export(_result(), tmp_path / "results.xlsx")
