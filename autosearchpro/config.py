# autosearchpro/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

# --- Baseline extraction (fixed; keyword outputs are compared in tests) ---

BASELINE_TOP_N = 15
# Tokens shorter than this are discarded (i.e. length <= 2).
MIN_TOKEN_LENGTH = 3

# --- Query synthesis ---

ESSENTIAL_SKILL_COUNT = 3


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# --- Evaluation quota policy ---
# The AI extractor has a call budget. Datasets larger than the threshold run
# baseline-only; smaller ones send every Nth item (index % N == 0) to the AI path.

@dataclass(frozen=True)
class EvaluationPolicy:
    large_dataset_threshold: int = 20
    ai_every_nth: int = 3

    def uses_ai(self, index: int, total: int) -> bool:
        if total > self.large_dataset_threshold:
            return False
        return index % max(1, self.ai_every_nth) == 0


def load_evaluation_policy() -> EvaluationPolicy:
    return EvaluationPolicy(
        large_dataset_threshold=_env_int("AUTOSEARCHPRO_LARGE_DATASET_THRESHOLD", 20),
        ai_every_nth=_env_int("AUTOSEARCHPRO_AI_EVERY_NTH", 3),
    )


# --- AI keyword extraction ---

# User-provided API key. Never logged, never written to disk,
# never included in structured output.
AUTOSEARCHPRO_LLM_KEY: str | None = os.environ.get("AUTOSEARCHPRO_LLM_KEY") or None

# Provider selection: "anthropic" | "openai"  (default: anthropic)
AUTOSEARCHPRO_LLM_PROVIDER: str = os.environ.get("AUTOSEARCHPRO_LLM_PROVIDER", "anthropic").strip().lower()

_DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-6",
    "openai": "gpt-4o-mini",
}
AUTOSEARCHPRO_LLM_MODEL: str = (
        os.environ.get("AUTOSEARCHPRO_LLM_MODEL", "").strip()
        or _DEFAULT_MODELS.get(AUTOSEARCHPRO_LLM_PROVIDER, "claude-sonnet-4-6")
)

AUTOSEARCHPRO_LLM_TIMEOUT_SECONDS: int = _env_int("AUTOSEARCHPRO_LLM_TIMEOUT_SECONDS", 20)

_PROVIDER_KEY_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def resolve_llm_key(provider: Optional[str] = None) -> Optional[str]:
    """The explicit AUTOSEARCHPRO_LLM_KEY wins over the provider's own env var."""
    if AUTOSEARCHPRO_LLM_KEY:
        return AUTOSEARCHPRO_LLM_KEY
    env_name = _PROVIDER_KEY_ENV.get((provider or AUTOSEARCHPRO_LLM_PROVIDER).strip().lower())
    if not env_name:
        return None
    return os.getenv(env_name) or None


def llm_configured() -> bool:
    return bool(resolve_llm_key())


# --- Local persistence ---

def default_store_dir() -> str:
    return os.environ.get("AUTOSEARCHPRO_HOME", ".autosearchpro")
