from .metrics import calculate_metrics
from .orchestrator import EmptyDatasetError, NoValidResultsError, run_evaluation
from .statistics import compare_to_baseline, compute_advanced_stats, evaluate_significance

__all__ = [
    "calculate_metrics",
    "run_evaluation",
    "EmptyDatasetError",
    "NoValidResultsError",
    "compute_advanced_stats",
    "compare_to_baseline",
    "evaluate_significance",
]
