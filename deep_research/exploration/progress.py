"""Progress tracking and reporting for research runs."""

import logging
import math
from dataclasses import fields
from typing import Optional

from ..models import AnalysisProgress, ContentAnalysis, ProgressObserver, ResearchProgress

logger = logging.getLogger(__name__)

PROGRESS_BAR_WIDTH = 20

_PROGRESS_FIELDS = {f.name for f in fields(ResearchProgress)}


def progress_percentage(completed: int, total: int) -> int:
    """Completion percentage, rounded half up and clamped to [0, 100]."""
    percent = math.floor(100 * completed / max(total, 1) + 0.5)
    return min(100, max(0, percent))


class ProgressTracker:
    """
    Owns the progress record for one run.

    All mutations go through :meth:`update`, which notifies the observer
    synchronously after every change. Observer exceptions propagate to the
    caller.
    """

    def __init__(self, progress: ResearchProgress, observer: Optional[ProgressObserver] = None):
        self.progress = progress
        self.observer = observer

    @property
    def percentage(self) -> int:
        return progress_percentage(self.progress.completed_queries, self.progress.total_queries)

    def update(self, **changes) -> ResearchProgress:
        """Merge ``changes`` into the progress record and notify the observer."""
        unknown = set(changes) - _PROGRESS_FIELDS
        if unknown:
            raise AttributeError(f"Unknown progress fields: {sorted(unknown)}")

        completed = changes.get("completed_queries")
        if completed is not None and completed < self.progress.completed_queries:
            raise ValueError("completed_queries cannot decrease")

        for name, value in changes.items():
            setattr(self.progress, name, value)

        if self.observer is not None:
            self.observer(self.progress)
        return self.progress

    def complete_query(self, **changes) -> ResearchProgress:
        """Count one finished query, applying any other field changes."""
        return self.update(completed_queries=self.progress.completed_queries + 1, **changes)

    def record_analysis(self, analysis: ContentAnalysis) -> ResearchProgress:
        """Add one analysed source and its patterns and claims to the counters."""
        current = self.progress.analysis
        if current is None:
            return self.progress
        return self.update(analysis=AnalysisProgress(
            processed_sources=current.processed_sources + 1,
            identified_patterns=current.identified_patterns + len(analysis.patterns),
            extracted_claims=current.extracted_claims + len(analysis.claims),
        ))


def format_progress(progress: ResearchProgress, width: int = PROGRESS_BAR_WIDTH) -> list[str]:
    """Render progress as console lines."""
    percent = progress_percentage(progress.completed_queries, progress.total_queries)
    filled = round(percent / 100 * width)
    bar = "[" + "█" * filled + "░" * max(width - filled, 0) + "]"

    lines = [
        f"Overall Progress: {bar} {percent}%",
        f"Depth: {progress.current_depth}/{progress.total_depth} | "
        f"Breadth: {progress.current_breadth}/{progress.total_breadth} | "
        f"Queries: {progress.completed_queries}/{progress.total_queries}",
    ]
    if progress.current_query:
        lines.append(f"Current Query: {progress.current_query}")
    if progress.analysis:
        a = progress.analysis
        lines.append(
            f"Analysis Progress: sources={a.processed_sources} "
            f"patterns={a.identified_patterns} claims={a.extracted_claims}"
        )
    return lines


def log_progress(progress: ResearchProgress) -> None:
    """Progress observer that writes the rendered lines to the log."""
    for line in format_progress(progress):
        logger.info(line)
