import pytest

from autosearchpro.models import KeywordCategory, KeywordItem, MetricsResult
from autosearchpro.notifications import RecordingNotifier, StderrNotifier


def test_keyword_item_trims_and_coerces():
    item = KeywordItem(keyword="  React ", frequency=2, category="SKILL")  # type: ignore[arg-type]
    assert item.keyword == "React"
    assert item.category is KeywordCategory.SKILL
    assert item.match_key == "react"
    assert item.to_dict() == {"keyword": "React", "frequency": 2, "category": "skill"}


@pytest.mark.parametrize("kwargs", [
    {"keyword": ""},
    {"keyword": "   "},
    {"keyword": None},
    {"keyword": "go", "frequency": 0},
    {"keyword": "go", "frequency": 1.5},
    {"keyword": "go", "frequency": True},
])
def test_keyword_item_rejects_invalid(kwargs):
    with pytest.raises(ValueError):
        KeywordItem(**kwargs)


def test_from_dict_is_tolerant():
    item = KeywordItem.from_dict({"keyword": "sql", "frequency": "3", "category": "other"})
    assert (item.frequency, item.category) == (3, KeywordCategory.UNCATEGORIZED)
    assert KeywordItem.from_dict({"keyword": "sql", "frequency": -4}).frequency == 1
    assert KeywordItem.from_dict({"keyword": "sql"}).to_dict() == {"keyword": "sql", "frequency": 1}


def test_metrics_result_zero_and_camel_case():
    assert MetricsResult.zero().to_dict() == {
        "precision": 0.0, "recall": 0.0, "f1Score": 0.0, "averageRankCorrelation": 0.0,
    }


def test_stderr_notifier_prefixes(capsys):
    n = StderrNotifier()
    n.info("hello")
    n.warning("careful")
    n.error("broken")
    err = capsys.readouterr().err.splitlines()
    assert err == [
        "[AutoSearchPro] hello",
        "[AutoSearchPro] WARNING: careful",
        "[AutoSearchPro] ERROR: broken",
    ]


def test_recording_notifier():
    n = RecordingNotifier()
    n.warning("a")
    n.info("b")
    assert n.levels() == ["warning", "info"]


def test_from_dict_non_finite_frequency_defaults_to_one():
    assert KeywordItem.from_dict({"keyword": "go", "frequency": float("inf")}).frequency == 1
    assert KeywordItem.from_dict({"keyword": "go", "frequency": float("nan")}).frequency == 1
