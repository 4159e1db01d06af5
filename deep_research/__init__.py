"""Iterative deep research: breadth/depth exploration over web search and LLMs."""

from .engine import ResearchEngine
from .models import AnalysisOptions, ResearchConfig, ResearchProgress, ResearchResult, StrategyKind

__version__ = "1.0.0"

__all__ = [
    "ResearchEngine",
    "ResearchConfig",
    "ResearchProgress",
    "ResearchResult",
    "AnalysisOptions",
    "StrategyKind",
]
