"""
autosearchpro/llm/extractor.py

LLMKeywordExtractor: AI keyword extraction behind the KeywordExtractor protocol.

Design principles:
- User-provided API key only (no backend dependency)
- Single LLM call per description, async client
- Output validated into KeywordItem objects (same shape as the baseline)
- Raises KeywordExtractorError on any failure; the caller falls back to
  the baseline through extraction.pipeline
- No retries or backoff here
- API key MUST NOT appear in any log, exception or structured output
"""
from __future__ import annotations

import json
import re
from typing import Any, List, Optional

from autosearchpro import config as _config
from autosearchpro.extraction.pipeline import KeywordExtractorError
from autosearchpro.llm.prompt import MAX_KEYWORDS, _SYSTEM_PROMPT, build_extraction_prompt
from autosearchpro.models import KeywordItem

# Top-level optional imports so tests can patch them via module attribute.
# A missing library is reported at call time as kind="unavailable".
try:
    import anthropic
except ImportError:
    anthropic = None  # type: ignore[assignment]

try:
    import openai
except ImportError:
    openai = None  # type: ignore[assignment]

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class LLMKeywordExtractor:
    """
    Calls an LLM (Anthropic or OpenAI) to extract categorized keywords.

    One instance is reused for every description in an evaluation run.
    """

    name = "ai"
    _MAX_TOKENS = 1024

    def __init__(
            self,
            *,
            api_key: str,
            provider: str = "anthropic",
            model: Optional[str] = None,
            timeout_seconds: Optional[int] = None,
    ) -> None:
        if not api_key:
            raise KeywordExtractorError("LLM API key must not be empty.", kind="unavailable")
        self._api_key = api_key
        self._provider = provider.strip().lower()
        self._model = (model or _config.AUTOSEARCHPRO_LLM_MODEL).strip()
        self._timeout = timeout_seconds or _config.AUTOSEARCHPRO_LLM_TIMEOUT_SECONDS

        if self._provider not in ("anthropic", "openai"):
            raise KeywordExtractorError(
                f"Unsupported provider '{self._provider}'. Use 'anthropic' or 'openai'.",
                kind="unavailable",
            )

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def model(self) -> str:
        return self._model

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def extract(self, description: str) -> List[KeywordItem]:
        """
        Return keywords for one description.
        Raises KeywordExtractorError on any failure.
        The API key is never included in the exception message.
        """
        if not isinstance(description, str) or not description.strip():
            return []

        prompt = build_extraction_prompt(description)
        try:
            if self._provider == "anthropic":
                raw = await self._call_anthropic(prompt)
            else:
                raw = await self._call_openai(prompt)
        except KeywordExtractorError:
            raise
        except Exception as exc:
            # Sanitize: never let the key propagate through exception messages
            raise KeywordExtractorError(f"LLM call failed: {type(exc).__name__}") from None

        return parse_keyword_response(raw)

    # ------------------------------------------------------------------
    # Provider implementations
    # ------------------------------------------------------------------

    async def _call_anthropic(self, prompt: str) -> str:
        if anthropic is None:
            raise KeywordExtractorError(
                "Package 'anthropic' is not installed. Run: pip install anthropic",
                kind="unavailable",
            )

        client = anthropic.AsyncAnthropic(api_key=self._api_key, timeout=self._timeout)
        try:
            message = await client.messages.create(
                model=self._model,
                max_tokens=self._MAX_TOKENS,
                system=_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.RateLimitError:
            raise KeywordExtractorError("Anthropic API rate limit (429).", kind="rate_limited") from None
        except anthropic.APITimeoutError:
            raise KeywordExtractorError(f"Anthropic API timed out after {self._timeout} seconds.") from None
        except anthropic.APIError as exc:
            raise KeywordExtractorError(f"Anthropic API error: {type(exc).__name__}") from None
        finally:
            await client.close()

        for block in message.content:
            if block.type == "text":
                return block.text
        raise KeywordExtractorError("Anthropic returned no text content.", kind="bad_output")

    async def _call_openai(self, prompt: str) -> str:
        if openai is None:
            raise KeywordExtractorError(
                "Package 'openai' is not installed. Run: pip install openai",
                kind="unavailable",
            )

        client = openai.AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        try:
            response = await client.chat.completions.create(
                model=self._model,
                max_tokens=self._MAX_TOKENS,
                messages=[
                    {"role": "system", "content": _SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except openai.RateLimitError:
            raise KeywordExtractorError("OpenAI API rate limit (429).", kind="rate_limited") from None
        except openai.APITimeoutError:
            raise KeywordExtractorError(f"OpenAI API timed out after {self._timeout} seconds.") from None
        except openai.APIError as exc:
            raise KeywordExtractorError(f"OpenAI API error: {type(exc).__name__}") from None
        finally:
            await client.close()

        content = response.choices[0].message.content
        if not content:
            raise KeywordExtractorError("OpenAI returned empty content.", kind="bad_output")
        return content


# ------------------------------------------------------------------
# Output validation
# ------------------------------------------------------------------

def parse_keyword_response(raw: str) -> List[KeywordItem]:
    """
    Parse the model's JSON array into KeywordItems.

    - tolerates ```json fences and prose around the array
    - drops elements without a non-empty string keyword
    - non-integer or missing frequency -> 1
    - duplicate keywords (case-insensitive) keep the first occurrence
    """
    text = _FENCE_RE.sub("", (raw or "").strip())
    start, end = text.find("["), text.rfind("]")
    if start == -1 or end <= start:
        raise KeywordExtractorError("LLM output is not a JSON array.", kind="bad_output")
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        raise KeywordExtractorError("LLM output is not valid JSON.", kind="bad_output") from None

    out: List[KeywordItem] = []
    seen = set()
    for entry in data:
        item = _coerce_entry(entry)
        if item is None or item.match_key in seen:
            continue
        seen.add(item.match_key)
        out.append(item)
        if len(out) >= MAX_KEYWORDS:
            break

    if not out:
        raise KeywordExtractorError("LLM returned no usable keywords.", kind="bad_output")
    return out


def _coerce_entry(entry: Any) -> Optional[KeywordItem]:
    if isinstance(entry, str):
        entry = {"keyword": entry}
    if not isinstance(entry, dict):
        return None
    kw = entry.get("keyword")
    if not isinstance(kw, str) or not kw.strip():
        return None
    freq = entry.get("frequency")
    if isinstance(freq, bool) or not isinstance(freq, (int, float)) or freq < 1:
        freq = 1
    return KeywordItem(keyword=kw, frequency=int(freq), category=entry.get("category"))


def build_default_extractor() -> Optional[LLMKeywordExtractor]:
    """Extractor from environment config, or None when no API key is configured."""
    provider = _config.AUTOSEARCHPRO_LLM_PROVIDER
    api_key = _config.resolve_llm_key(provider)
    if not api_key:
        return None
    try:
        return LLMKeywordExtractor(api_key=api_key, provider=provider)
    except KeywordExtractorError:
        return None
