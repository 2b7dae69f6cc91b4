"""
tests/unit/test_config.py

- quota policy and env overrides
- LLM key resolution and provider defaults
- the key never reaches structured output
"""
import importlib
import json

import pytest

from autosearchpro.config import EvaluationPolicy


def _reload_config(monkeypatch, **env):
    """Helper: set env vars and reload config so module-level vars pick them up."""
    for name in (
            "AUTOSEARCHPRO_LLM_KEY",
            "AUTOSEARCHPRO_LLM_PROVIDER",
            "AUTOSEARCHPRO_LLM_MODEL",
            "ANTHROPIC_API_KEY",
            "OPENAI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    import autosearchpro.config as cfg
    importlib.reload(cfg)
    return cfg


@pytest.fixture(autouse=True)
def _restore_config():
    yield
    import autosearchpro.config as cfg
    importlib.reload(cfg)


# ------------------------------------------------------------------
# Quota policy
# ------------------------------------------------------------------

def test_policy_every_third_item():
    policy = EvaluationPolicy()
    assert [policy.uses_ai(i, 6) for i in range(6)] == [True, False, False, True, False, False]


def test_policy_large_dataset_is_baseline_only():
    policy = EvaluationPolicy()
    assert not any(policy.uses_ai(i, 21) for i in range(21))
    assert policy.uses_ai(0, 20) is True


def test_policy_nonpositive_stride_means_every_item():
    policy = EvaluationPolicy(ai_every_nth=0)
    assert all(policy.uses_ai(i, 4) for i in range(4))


def test_policy_env_overrides(monkeypatch):
    cfg = _reload_config(
        monkeypatch,
        AUTOSEARCHPRO_LARGE_DATASET_THRESHOLD="50",
        AUTOSEARCHPRO_AI_EVERY_NTH="not-a-number",
    )
    policy = cfg.load_evaluation_policy()
    assert policy.large_dataset_threshold == 50
    assert policy.ai_every_nth == 3


# ------------------------------------------------------------------
# LLM settings
# ------------------------------------------------------------------

def test_llm_configured_false_when_no_key(monkeypatch):
    cfg = _reload_config(monkeypatch)
    assert cfg.llm_configured() is False


def test_llm_configured_false_when_key_empty_string(monkeypatch):
    cfg = _reload_config(monkeypatch, AUTOSEARCHPRO_LLM_KEY="")
    assert cfg.llm_configured() is False


def test_explicit_key_wins_over_provider_key(monkeypatch):
    cfg = _reload_config(monkeypatch, AUTOSEARCHPRO_LLM_KEY="sk-own", ANTHROPIC_API_KEY="sk-provider")
    assert cfg.resolve_llm_key() == "sk-own"


def test_provider_key_is_used_as_fallback(monkeypatch):
    cfg = _reload_config(monkeypatch, AUTOSEARCHPRO_LLM_PROVIDER="openai", OPENAI_API_KEY="sk-oa")
    assert cfg.resolve_llm_key() == "sk-oa"
    assert cfg.resolve_llm_key("anthropic") is None
    assert cfg.llm_configured() is True


def test_model_default_follows_provider(monkeypatch):
    cfg = _reload_config(monkeypatch, AUTOSEARCHPRO_LLM_PROVIDER="OpenAI")
    assert cfg.AUTOSEARCHPRO_LLM_PROVIDER == "openai"
    assert cfg.AUTOSEARCHPRO_LLM_MODEL == "gpt-4o-mini"

    cfg = _reload_config(monkeypatch, AUTOSEARCHPRO_LLM_MODEL="claude-test")
    assert cfg.AUTOSEARCHPRO_LLM_MODEL == "claude-test"


def test_default_store_dir(monkeypatch, tmp_path):
    cfg = _reload_config(monkeypatch)
    monkeypatch.delenv("AUTOSEARCHPRO_HOME", raising=False)
    assert cfg.default_store_dir() == ".autosearchpro"
    monkeypatch.setenv("AUTOSEARCHPRO_HOME", str(tmp_path))
    assert cfg.default_store_dir() == str(tmp_path)


def test_build_default_extractor_none_without_key(monkeypatch):
    _reload_config(monkeypatch)
    from autosearchpro.llm.extractor import build_default_extractor
    assert build_default_extractor() is None


def test_key_not_in_analysis_json(monkeypatch):
    secret = "sk-never-print-me"
    _reload_config(monkeypatch, AUTOSEARCHPRO_LLM_KEY=secret)
    from autosearchpro.models import KeywordAnalysis, KeywordItem

    analysis = KeywordAnalysis(keywords=[KeywordItem(keyword="go")], query="", source="baseline")
    assert secret not in json.dumps(analysis.to_dict())
