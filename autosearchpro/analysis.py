from __future__ import annotations

from typing import Optional

from autosearchpro.extraction.pipeline import KeywordExtractor, extract_or_baseline
from autosearchpro.extraction.baseline import extract_baseline_keywords
from autosearchpro.models import KeywordAnalysis, utc_now_iso
from autosearchpro.query import generate_boolean_query
from autosearchpro.store import RowStore


async def analyze_description(
        description: str,
        *,
        extractor: Optional[KeywordExtractor] = None,
) -> KeywordAnalysis:
    """
    Main app flow: description -> keywords -> Boolean query.

    Without an extractor the baseline is used directly. With one, a failed
    extraction falls back to the baseline and the reason is reported.

    Baseline keywords carry no category, so a baseline-only analysis yields
    an empty query; categorized terms come from the AI extractor.
    """
    if extractor is None:
        keywords = extract_baseline_keywords(description)
        return KeywordAnalysis(keywords=keywords, query=generate_boolean_query(keywords), source="baseline")

    outcome = await extract_or_baseline(extractor, description)
    keywords = list(outcome.keywords)
    return KeywordAnalysis(
        keywords=keywords,
        query=generate_boolean_query(keywords),
        source="baseline" if outcome.used_fallback else "ai",
        fallback_reason=outcome.error.kind if outcome.error else None,
    )


def create_job_posting(store: RowStore, description: str) -> str:
    """Insert a pending job posting and return its id."""
    posting = store.insert(
        "job_postings",
        {"description": description, "status": "pending", "created_at": utc_now_iso()},
    )
    return posting["id"]


def record_analysis(store: RowStore, job_id: str, analysis: KeywordAnalysis) -> None:
    """
    Persist the keywords and a search-history entry for a posting, then mark
    it processed. A failed write marks the posting failed and re-raises.
    """
    try:
        for kw in analysis.keywords:
            row = kw.to_dict()
            row["job_posting_id"] = job_id
            store.insert("extracted_keywords", row)

        store.insert(
            "search_history",
            {"job_posting_id": job_id, "query": analysis.query, "source": analysis.source, "created_at": utc_now_iso()},
        )
    except Exception as exc:
        store.update("job_postings", job_id, {"status": "failed", "error": type(exc).__name__})
        raise
    store.update("job_postings", job_id, {"status": "processed", "processed_at": utc_now_iso()})
