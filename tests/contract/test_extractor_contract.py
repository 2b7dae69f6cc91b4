"""
Contract: every extractor (baseline or AI) yields the same KeywordItem shape,
and anything that reaches the metrics/query stages keeps it.
"""
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from autosearchpro.evaluation.metrics import calculate_metrics
from autosearchpro.extraction.baseline import extract_baseline_keywords
from autosearchpro.llm.extractor import LLMKeywordExtractor
from autosearchpro.models import KeywordCategory, KeywordItem
from autosearchpro.query import generate_boolean_query


def _assert_keyword_contract(keywords):
    assert isinstance(keywords, list)
    seen = set()
    for k in keywords:
        assert isinstance(k, KeywordItem)
        assert k.keyword == k.keyword.strip() and k.keyword
        assert isinstance(k.frequency, int) and k.frequency >= 1
        assert isinstance(k.category, KeywordCategory)
        assert k.match_key not in seen
        seen.add(k.match_key)
        assert set(k.to_dict()) <= {"keyword", "frequency", "category"}


def test_baseline_output_contract(load_text):
    keywords = extract_baseline_keywords(load_text("job_description.txt"))
    _assert_keyword_contract(keywords)
    assert len(keywords) <= 15
    assert all(k.category is KeywordCategory.UNCATEGORIZED for k in keywords)


def test_ai_output_contract(run, load_text):
    payload = json.dumps([
        {"keyword": "Kubernetes", "frequency": 3, "category": "skill"},
        {"keyword": "kubernetes ", "frequency": 1, "category": "skill"},
        {"keyword": " Terraform", "frequency": 2, "category": "skill"},
        {"keyword": "On-call rotation", "frequency": 0, "category": "requirement"},
    ])
    mock_block = MagicMock()
    mock_block.type = "text"
    mock_block.text = payload
    mock_message = MagicMock()
    mock_message.content = [mock_block]
    mock_client = MagicMock()
    mock_client.messages.create = AsyncMock(return_value=mock_message)
    mock_client.close = AsyncMock()

    with patch("autosearchpro.llm.extractor.anthropic") as mock_anthropic:
        mock_anthropic.AsyncAnthropic.return_value = mock_client
        mock_anthropic.RateLimitError = type("RateLimitError", (Exception,), {})
        mock_anthropic.APITimeoutError = type("APITimeoutError", (Exception,), {})
        mock_anthropic.APIError = type("APIError", (Exception,), {})

        keywords = run(LLMKeywordExtractor(api_key="sk-fake").extract(load_text("job_description.txt")))

    _assert_keyword_contract(keywords)
    assert [k.keyword for k in keywords] == ["Kubernetes", "Terraform", "On-call rotation"]

    query = generate_boolean_query(keywords)
    assert query == '(Kubernetes AND Terraform) AND ("On-call rotation")'

    m = calculate_metrics([KeywordItem(keyword="kubernetes")], keywords)
    assert m.recall == pytest.approx(1.0)
