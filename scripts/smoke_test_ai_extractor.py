from __future__ import annotations

import asyncio
import sys
from pprint import pprint

from autosearchpro import config
from autosearchpro.extraction.pipeline import extract_or_baseline
from autosearchpro.llm.extractor import build_default_extractor
from autosearchpro.query import generate_boolean_query

SAMPLE = (
    "Senior Backend Engineer. Python and Go services on AWS; Kafka for streaming, "
    "PostgreSQL for storage. 5+ years of experience and a degree in Computer Science required."
)


def main() -> int:
    # --- Preflight ---
    extractor = build_default_extractor()
    if extractor is None:
        print("ERROR: Set AUTOSEARCHPRO_LLM_KEY (or the provider's own API key env var)")
        return 2

    print("=== AutoSearchPro Smoke Test: AI extractor ===")
    print(f"Provider: {config.AUTOSEARCHPRO_LLM_PROVIDER}")
    print(f"Model: {extractor.model}")
    print("")

    print(">>> Extracting keywords...")
    outcome = asyncio.run(extract_or_baseline(extractor, SAMPLE))
    if outcome.used_fallback:
        print(f"AI extraction failed ({outcome.error.kind}): {outcome.error.message}", file=sys.stderr)
        return 1
    pprint([k.to_dict() for k in outcome.keywords])
    print("")

    print(">>> Boolean query:")
    print(generate_boolean_query(list(outcome.keywords)))
    print("")

    # --- Basic schema assertions ---
    for k in outcome.keywords:
        assert k.keyword and k.frequency >= 1
    print("OK ✅")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
