from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


class KeywordCategory(str, Enum):
    SKILL = "skill"
    REQUIREMENT = "requirement"
    UNCATEGORIZED = "uncategorized"

    @classmethod
    def coerce(cls, value: Any) -> "KeywordCategory":
        if isinstance(value, KeywordCategory):
            return value
        raw = (str(value) if value is not None else "").strip().lower()
        for member in cls:
            if member.value == raw:
                return member
        return cls.UNCATEGORIZED


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_whitespace(text: str) -> str:
    return " ".join((text or "").split()).strip()


@dataclass(frozen=True)
class KeywordItem:
    """
    One extracted (or annotated) keyword.
    Equality for set comparisons is done on match_key, never on the dataclass itself.
    """
    keyword: str
    frequency: int = 1
    category: KeywordCategory = KeywordCategory.UNCATEGORIZED

    def __post_init__(self) -> None:
        if not isinstance(self.keyword, str):
            raise ValueError("keyword must be a string")
        kw = self.keyword.strip()
        if not kw:
            raise ValueError("keyword must not be empty")
        object.__setattr__(self, "keyword", kw)

        if isinstance(self.frequency, bool) or not isinstance(self.frequency, int):
            raise ValueError(f"frequency must be an integer, got {self.frequency!r}")
        if self.frequency < 1:
            raise ValueError(f"frequency must be >= 1, got {self.frequency}")

        object.__setattr__(self, "category", KeywordCategory.coerce(self.category))

    @property
    def match_key(self) -> str:
        return self.keyword.strip().lower()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KeywordItem":
        """Tolerant constructor for ingested rows: frequency defaults to 1."""
        raw_freq = data.get("frequency", 1)
        try:
            freq = int(raw_freq)
        except (TypeError, ValueError, OverflowError):
            freq = 1
        return cls(
            keyword=data.get("keyword"),  # type: ignore[arg-type]
            frequency=max(1, freq),
            category=data.get("category"),  # type: ignore[arg-type]
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"keyword": self.keyword, "frequency": self.frequency}
        if self.category is not KeywordCategory.UNCATEGORIZED:
            d["category"] = self.category.value
        return d


@dataclass(frozen=True)
class EvaluationDataItem:
    """A job description plus its human-annotated keyword set."""
    id: Union[str, int]
    description: str
    ground_truth: Tuple[KeywordItem, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "ground_truth", tuple(self.ground_truth or ()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "groundTruth": [k.to_dict() for k in self.ground_truth],
        }


@dataclass(frozen=True)
class MetricsResult:
    precision: float = 0.0
    recall: float = 0.0
    f1_score: float = 0.0
    # Reserved for rank-based comparison; always 0.0 for now.
    average_rank_correlation: float = 0.0

    @classmethod
    def zero(cls) -> "MetricsResult":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "precision": self.precision,
            "recall": self.recall,
            "f1Score": self.f1_score,
            "averageRankCorrelation": self.average_rank_correlation,
        }


@dataclass(frozen=True)
class PerItemResult:
    id: Union[str, int]
    metrics: MetricsResult
    baseline_metrics: MetricsResult
    ground_truth: Tuple[KeywordItem, ...]
    extracted_keywords: Tuple[KeywordItem, ...]
    baseline_keywords: Tuple[KeywordItem, ...]
    using_fallback: bool
    # Reason the AI path was not used or failed, when known.
    fallback_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "metrics": self.metrics.to_dict(),
            "baselineMetrics": self.baseline_metrics.to_dict(),
            "groundTruth": [k.to_dict() for k in self.ground_truth],
            "extractedKeywords": [k.to_dict() for k in self.extracted_keywords],
            "baselineKeywords": [k.to_dict() for k in self.baseline_keywords],
            "usingFallback": self.using_fallback,
            "fallbackReason": self.fallback_reason,
        }


@dataclass(frozen=True)
class AdvancedStats:
    mean: MetricsResult
    median: MetricsResult
    std_dev: MetricsResult
    min: MetricsResult
    max: MetricsResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": self.mean.to_dict(),
            "median": self.median.to_dict(),
            "stdDev": self.std_dev.to_dict(),
            "min": self.min.to_dict(),
            "max": self.max.to_dict(),
        }


@dataclass(frozen=True)
class ImprovementReport:
    """Percentage deltas of the evaluated extractor over the baseline."""
    precision_improvement: float
    recall_improvement: float
    f1_improvement: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "precisionImprovement": self.precision_improvement,
            "recallImprovement": self.recall_improvement,
            "f1Improvement": self.f1_improvement,
        }


@dataclass(frozen=True)
class SignificanceReport:
    # Heuristic scores derived from |algorithm - baseline|; not a hypothesis test.
    p_values: Dict[str, float]
    significant: Dict[str, bool]

    def to_dict(self) -> Dict[str, Any]:
        return {"pValues": dict(self.p_values), "significant": dict(self.significant)}


@dataclass(frozen=True)
class EvaluationResult:
    overall: MetricsResult
    baseline: MetricsResult
    per_item: Tuple[PerItemResult, ...]
    advanced: Optional[AdvancedStats] = None

    @property
    def fallback_count(self) -> int:
        return sum(1 for r in self.per_item if r.using_fallback)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall.to_dict(),
            "baseline": self.baseline.to_dict(),
            "perItem": [r.to_dict() for r in self.per_item],
            "advanced": self.advanced.to_dict() if self.advanced else None,
        }


@dataclass(frozen=True)
class KeywordAnalysis:
    """Output of the main app flow: description -> keywords -> Boolean query."""
    keywords: List[KeywordItem]
    query: str
    source: str  # "baseline" | "ai"
    fallback_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keywords": [k.to_dict() for k in self.keywords],
            "query": self.query,
            "source": self.source,
            "fallbackReason": self.fallback_reason,
        }
