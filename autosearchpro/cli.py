from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from autosearchpro import config
from autosearchpro.analysis import analyze_description, create_job_posting, record_analysis
from autosearchpro.evaluation.orchestrator import EvaluationError, run_evaluation
from autosearchpro.evaluation.statistics import compare_to_baseline, evaluate_significance
from autosearchpro.export import write_export
from autosearchpro.io.dataset_loader import InvalidDataset, load_dataset
from autosearchpro.io.description_loader import load_description
from autosearchpro.llm.extractor import build_default_extractor
from autosearchpro.models import EvaluationResult, KeywordAnalysis
from autosearchpro.notifications import RecordingNotifier, StderrNotifier
from autosearchpro.realtime import JobUpdateSubscription
from autosearchpro.store import JsonRowStore


def _pct(x: float) -> str:
    return f"{x * 100:.1f}%"


def _signed(x: float) -> str:
    sign = "+" if x > 0 else ""
    return f"{sign}{x:.1f}%"


def print_analysis_summary(analysis: KeywordAnalysis) -> None:
    print("\n=== AutoSearchPro Keyword Analysis ===")
    label = "AI" if analysis.source == "ai" else "baseline"
    print(f"Extractor: {label}" + (f" (fallback: {analysis.fallback_reason})" if analysis.fallback_reason else ""))
    print("\nKeywords:")
    for k in analysis.keywords:
        cat = f" [{k.category.value}]" if k.category.value != "uncategorized" else ""
        print(f"  {k.keyword} x{k.frequency}{cat}")
    print("\nBoolean query:")
    print(f"  {analysis.query or '(no categorized keywords; run with --ai for skill/requirement terms)'}")


def print_evaluation_summary(result: EvaluationResult) -> None:
    improvement = compare_to_baseline(result.overall, result.baseline)
    significance = evaluate_significance(result.overall, result.baseline)

    print("\n=== AutoSearchPro Evaluation ===")
    print(f"Items evaluated: {len(result.per_item)} | using baseline fallback: {result.fallback_count}")

    print(f"\n{'Metric':<10} {'Algorithm':>10} {'Baseline':>10} {'Improvement':>12} {'p-value':>8}  Significant")
    rows = (
        ("Precision", "precision", improvement.precision_improvement),
        ("Recall", "recall", improvement.recall_improvement),
        ("F1 Score", "f1_score", improvement.f1_improvement),
    )
    for label, attr, delta in rows:
        p = significance.p_values[attr]
        sig = "Yes (p<0.05)" if significance.significant[attr] else "No (p>=0.05)"
        print(
            f"{label:<10} {_pct(getattr(result.overall, attr)):>10} {_pct(getattr(result.baseline, attr)):>10} "
            f"{_signed(delta):>12} {p:>8.3f}  {sig}"
        )
    print("  (p-value is a simplified heuristic on the metric difference, not a statistical test)")

    adv = result.advanced
    if adv is not None:
        print("\nPer-item distribution (algorithm):")
        for label, attr, _ in rows:
            print(
                f"  {label:<10} mean {_pct(getattr(adv.mean, attr))}  median {_pct(getattr(adv.median, attr))}  "
                f"sd {_pct(getattr(adv.std_dev, attr))}  min {_pct(getattr(adv.min, attr))}  "
                f"max {_pct(getattr(adv.max, attr))}"
            )

    print("\nPer item:")
    for r in result.per_item:
        tag = " [baseline]" if r.using_fallback else " [AI]"
        print(
            f"  {r.id}{tag}: P {_pct(r.metrics.precision)}  R {_pct(r.metrics.recall)}  "
            f"F1 {_pct(r.metrics.f1_score)}  (baseline F1 {_pct(r.baseline_metrics.f1_score)})"
        )


def _cmd_analyze(args: argparse.Namespace) -> int:
    loaded = load_description(text=args.text or None, path=args.file or None)
    if not loaded.text:
        print("\n[AutoSearchPro] No job description found. Pass --text or --file (.txt or .pdf).\n")
        return 2

    extractor = build_default_extractor() if args.ai else None
    if args.ai and extractor is None:
        print("[AutoSearchPro] WARNING: no LLM API key configured, using baseline extraction.", file=sys.stderr)

    analysis = asyncio.run(analyze_description(loaded.text, extractor=extractor))

    if args.save:
        store = JsonRowStore(Path(args.store_dir or config.default_store_dir()))
        watcher = JobUpdateSubscription(
            store,
            on_processed=lambda job_id, _at: print(f"[AutoSearchPro] Job processing completed ({job_id}).", file=sys.stderr),
            on_failed=lambda _desc: print("[AutoSearchPro] ERROR: Job processing failed.", file=sys.stderr),
        )
        job_id = create_job_posting(store, loaded.text)
        watcher.start(job_id)
        try:
            record_analysis(store, job_id, analysis)
        finally:
            watcher.stop()

    if args.json:
        print(json.dumps(analysis.to_dict(), indent=2))
    else:
        print_analysis_summary(analysis)
    return 0


def _cmd_evaluate(args: argparse.Namespace) -> int:
    parsed = load_dataset(args.dataset)
    if isinstance(parsed, InvalidDataset):
        print(f"\n[AutoSearchPro] Failed to parse dataset: {parsed.reason}\n")
        return 2

    extractor = None if args.no_ai else build_default_extractor()
    notifier = RecordingNotifier() if args.json else StderrNotifier()
    try:
        result = asyncio.run(run_evaluation(parsed.items, ai_extractor=extractor, notifier=notifier))
    except EvaluationError as exc:
        print(f"[AutoSearchPro] ERROR: Evaluation could not be completed: {exc}", file=sys.stderr)
        return 2

    if args.export:
        try:
            out = write_export(result, args.export)
        except ValueError as exc:
            print(f"[AutoSearchPro] ERROR: {exc}", file=sys.stderr)
            return 2
        print(f"[AutoSearchPro] Results exported to {out}", file=sys.stderr)

    if args.json:
        payload = result.to_dict()
        payload["comparison"] = compare_to_baseline(result.overall, result.baseline).to_dict()
        payload["significance"] = evaluate_significance(result.overall, result.baseline).to_dict()
        payload["notices"] = [{"level": level, "message": msg} for level, msg in notifier.messages]
        print(json.dumps(payload, indent=2))
    else:
        print_evaluation_summary(result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AutoSearchPro: job description keywords, Boolean queries and extractor evaluation")
    sub = parser.add_subparsers(dest="command", required=True)

    p_an = sub.add_parser("analyze", help="Extract keywords and build a Boolean search query")
    p_an.add_argument("--text", type=str, default="", help="Job description text (pasted)")
    p_an.add_argument("--file", type=str, default="", help="Path to a job description .txt or .pdf")
    p_an.add_argument("--ai", action="store_true", help="Use the AI extractor (falls back to baseline on failure)")
    p_an.add_argument("--save", action="store_true", help="Record the posting, keywords and query locally")
    p_an.add_argument("--store-dir", type=str, default="", help="Local store directory (default: .autosearchpro)")
    p_an.add_argument("--json", action="store_true", help="Print JSON only (machine-readable)")
    p_an.set_defaults(func=_cmd_analyze)

    p_ev = sub.add_parser("evaluate", help="Compare the extractor against the baseline on an annotated dataset")
    p_ev.add_argument("dataset", type=str, help="Dataset path (.json or .csv)")
    p_ev.add_argument("--no-ai", action="store_true", help="Never call the AI extractor (AI-path items fall back)")
    p_ev.add_argument("--export", type=str, default="", help="Write results to a .json or .csv file")
    p_ev.add_argument("--json", action="store_true", help="Print JSON only (machine-readable)")
    p_ev.set_defaults(func=_cmd_evaluate)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    code = args.func(args)
    if code:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
