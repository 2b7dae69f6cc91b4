from __future__ import annotations

import re
from typing import Dict

from autosearchpro.config import MIN_TOKEN_LENGTH

# NOTE: This module is "core infrastructure".
# Baseline extraction and metrics both depend on this module
# rather than re-implementing tokenization.

# Anything that is not an ASCII word character becomes a separator.
_NON_WORD_RE = re.compile(r"[^\w]+", re.ASCII)

# Common English stopwords plus job-description boilerplate. Keep verbatim: keyword outputs are compared in tests.
# Contractions stay in the set even though apostrophes are stripped before lookup.
STOPWORDS = frozenset({
    "a", "about", "above", "after", "again", "against", "all", "am", "an", "and", "any", "are", "as", "at", "be", "because",
    "been", "before", "being", "below", "between", "both", "but", "by", "could", "did", "do", "does", "doing", "down", "during",
    "each", "few", "for", "from", "further", "had", "has", "have", "having", "he", "he'd", "he'll", "he's", "her", "here",
    "here's", "hers", "herself", "him", "himself", "his", "how", "how's", "i", "i'd", "i'll", "i'm", "i've", "if", "in", "into",
    "is", "it", "it's", "its", "itself", "let's", "me", "more", "most", "my", "myself", "nor", "of", "on", "once", "only", "or",
    "other", "ought", "our", "ours", "ourselves", "out", "over", "own", "same", "she", "she'd", "she'll", "she's", "should",
    "so", "some", "such", "than", "that", "that's", "the", "their", "theirs", "them", "themselves", "then", "there", "there's",
    "these", "they", "they'd", "they'll", "they're", "they've", "this", "those", "through", "to", "too", "under", "until", "up",
    "very", "was", "we", "we'd", "we'll", "we're", "we've", "were", "what", "what's", "when", "when's", "where", "where's",
    "which", "while", "who", "who's", "whom", "why", "why's", "with", "would", "you", "you'd", "you'll", "you're", "you've",
    "your", "yours", "yourself", "yourselves",
    # job-description boilerplate
    "job", "work", "experience", "skills", "team", "company", "position", "role", "will", "ability", "years", "required",
    "requirements", "knowledge", "must", "candidate", "applicant", "looking", "working", "responsibilities", "qualifications",
})


def tokenize(text: str) -> Dict[str, int]:
    """
    Count qualifying tokens in text.

    - lowercase, non-word characters -> spaces, split on whitespace
    - drop tokens shorter than MIN_TOKEN_LENGTH and stopwords
    - insertion order of the returned dict is first-seen order

    Anything that is not a non-empty string yields {}.
    """
    if not isinstance(text, str) or not text:
        return {}

    counts: Dict[str, int] = {}
    for tok in _NON_WORD_RE.sub(" ", text.lower()).split():
        if len(tok) < MIN_TOKEN_LENGTH:
            continue
        if tok in STOPWORDS:
            continue
        counts[tok] = counts.get(tok, 0) + 1
    return counts


def normalize_keyword(keyword: str) -> str:
    """Case-insensitive, trimmed identity used for keyword set comparisons."""
    return keyword.strip().lower()
