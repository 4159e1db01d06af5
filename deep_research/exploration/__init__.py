"""Exploration strategies and their shared plumbing."""

from .aggregate import build_synthesis, collect_tree, dedupe, merge_analysis, merge_results
from .best_first import BestFirstStrategy, detect_timeframe, knowledge_gaps
from .context import ExplorationContext, ResearchCollaborators, clean_query
from .frontier import Frontier
from .linear import LinearChainStrategy, level_breadths, total_query_budget
from .progress import ProgressTracker, format_progress, log_progress, progress_percentage

__all__ = [
    "BestFirstStrategy",
    "LinearChainStrategy",
    "ExplorationContext",
    "ResearchCollaborators",
    "Frontier",
    "ProgressTracker",
    "build_synthesis",
    "clean_query",
    "collect_tree",
    "dedupe",
    "detect_timeframe",
    "format_progress",
    "knowledge_gaps",
    "level_breadths",
    "log_progress",
    "merge_analysis",
    "merge_results",
    "progress_percentage",
    "total_query_budget",
]
