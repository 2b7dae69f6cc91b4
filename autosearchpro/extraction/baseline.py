from __future__ import annotations

import sys
from typing import List

from autosearchpro.config import BASELINE_TOP_N
from autosearchpro.core.text_processing import tokenize
from autosearchpro.models import KeywordItem


def extract_baseline_keywords(text: str, *, top_n: int = BASELINE_TOP_N) -> List[KeywordItem]:
    """
    Deterministic frequency/stopword extraction, the reference every other
    extractor is compared against.

    Sorted by frequency (desc); ties keep first-seen order (stable sort).
    Never raises: any internal failure yields [].
    """
    try:
        counts = tokenize(text)
        items = [KeywordItem(keyword=word, frequency=count) for word, count in counts.items()]
        items.sort(key=lambda k: k.frequency, reverse=True)
        return items[:top_n]
    except Exception as exc:
        print(f"[AutoSearchPro] WARNING: baseline extraction failed: {type(exc).__name__}", file=sys.stderr)
        return []

