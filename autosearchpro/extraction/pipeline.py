"""
autosearchpro/extraction/pipeline.py

Extraction as an explicit result pipeline.

An extractor may fail (network, rate limit, bad model output). try_extract turns
every outcome into an ExtractionResult, and extract_or_baseline is the single
place where a failed result is replaced by the deterministic baseline. Callers
never see an exception from this module.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from autosearchpro.extraction.baseline import extract_baseline_keywords
from autosearchpro.models import KeywordItem

RATE_LIMIT_HINTS = (
    "429",
    "rate limit",
    "ratelimit",
    "too many requests",
    "quota",
)


class KeywordExtractorError(Exception):
    """Raised by an extractor when it cannot produce keywords."""

    def __init__(self, message: str, *, kind: str = "failed") -> None:
        super().__init__(message)
        self.kind = kind


class KeywordExtractor(Protocol):
    name: str

    async def extract(self, description: str) -> List[KeywordItem]:
        ...


@dataclass(frozen=True)
class ExtractionError:
    kind: str  # "rate_limited" | "unavailable" | "bad_output" | "failed"
    message: str


@dataclass(frozen=True)
class ExtractionResult:
    keywords: Optional[Tuple[KeywordItem, ...]] = None
    error: Optional[ExtractionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.keywords is not None

    @classmethod
    def success(cls, keywords: List[KeywordItem]) -> "ExtractionResult":
        return cls(keywords=tuple(keywords))

    @classmethod
    def failure(cls, kind: str, message: str) -> "ExtractionResult":
        return cls(error=ExtractionError(kind=kind, message=message))


@dataclass(frozen=True)
class ExtractionOutcome:
    keywords: Tuple[KeywordItem, ...]
    used_fallback: bool
    error: Optional[ExtractionError] = None


def classify_error(err: Exception) -> str:
    kind = getattr(err, "kind", None)
    if isinstance(kind, str) and kind:
        return kind
    msg = (str(err) or "").lower()
    if any(h in msg for h in RATE_LIMIT_HINTS):
        return "rate_limited"
    return "failed"


async def try_extract(extractor: Optional[KeywordExtractor], description: str) -> ExtractionResult:
    if extractor is None:
        return ExtractionResult.failure("unavailable", "no AI extractor configured")
    try:
        keywords = await extractor.extract(description)
    except Exception as exc:
        # Only KeywordExtractorError messages pass through; other errors may carry secrets.
        return ExtractionResult.failure(classify_error(exc), f"{type(exc).__name__}: {_safe_message(exc)}")
    if not isinstance(keywords, (list, tuple)):
        return ExtractionResult.failure("bad_output", "extractor returned a non-list result")
    clean = [k for k in keywords if isinstance(k, KeywordItem)]
    return ExtractionResult.success(clean)


def or_baseline(result: ExtractionResult, description: str) -> ExtractionOutcome:
    """The one fallback combinator: a failed result becomes the baseline keyword list."""
    if result.ok:
        return ExtractionOutcome(keywords=result.keywords or (), used_fallback=False)
    return ExtractionOutcome(
        keywords=tuple(extract_baseline_keywords(description)),
        used_fallback=True,
        error=result.error,
    )


async def extract_or_baseline(extractor: Optional[KeywordExtractor], description: str) -> ExtractionOutcome:
    return or_baseline(await try_extract(extractor, description), description)


def _safe_message(exc: Exception) -> str:
    # KeywordExtractorError messages are already sanitised by the extractor.
    if isinstance(exc, KeywordExtractorError):
        return str(exc)
    return "extraction failed"
