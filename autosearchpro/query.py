from __future__ import annotations

from typing import List, Sequence

from autosearchpro.config import ESSENTIAL_SKILL_COUNT
from autosearchpro.models import KeywordCategory, KeywordItem


def _rank(keywords: Sequence[KeywordItem]) -> List[KeywordItem]:
    # frequency desc; on ties skills come first; otherwise input order (stable)
    return sorted(
        keywords,
        key=lambda k: (-k.frequency, 0 if k.category is KeywordCategory.SKILL else 1),
    )


def generate_boolean_query(keywords: Sequence[KeywordItem]) -> str:
    """
    Ranked, categorized keywords -> Boolean search string.

      (top 3 skills AND-ed) AND (remaining skills OR-ed) AND ("requirement" OR ...)

    Empty clauses are omitted. Uncategorized keywords never enter the query.
    """
    if not keywords:
        return ""

    skills: List[str] = []
    requirements: List[str] = []
    for k in _rank(keywords):
        if k.category is KeywordCategory.SKILL:
            skills.append(k.keyword)
        elif k.category is KeywordCategory.REQUIREMENT:
            requirements.append(k.keyword)
        elif k.category is KeywordCategory.UNCATEGORIZED:
            continue
        else:
            raise ValueError(f"Unhandled keyword category: {k.category!r}")

    essential = " AND ".join(skills[:ESSENTIAL_SKILL_COUNT])
    optional = " OR ".join(skills[ESSENTIAL_SKILL_COUNT:])
    required = " OR ".join(f'"{r}"' for r in requirements)

    parts = [f"({clause})" for clause in (essential, optional, required) if clause]
    return " AND ".join(parts)
