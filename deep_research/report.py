"""Markdown reports for finished research runs."""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import settings
from .models import ResearchResult

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 50

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated, at most 50 characters."""
    return _NON_ALNUM.sub("-", text.lower()).strip("-")[:SLUG_MAX_LENGTH]


def report_filename(query: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    timestamp = re.sub(r"[:.]", "-", now.isoformat(timespec="milliseconds"))
    return f"research-{slugify(query)}-{timestamp}.md"


def render_report(query: str, breadth: int, depth: int, result: ResearchResult, summary: str) -> str:
    """Render the report body."""
    lines = [
        "# Research Results",
        "----------------\n",
        "## Research Parameters",
        f"- Query: {query}",
        f"- Depth: {depth}",
        f"- Breadth: {breadth}",
        "",
        "## Summary",
        summary,
        "",
        "## Key Learnings",
        *(f"{i}. {learning}" for i, learning in enumerate(result.learnings, start=1)),
        "",
        "## Sources",
        *(f"- {source}" for source in result.sources),
    ]
    return "\n".join(lines)


def write_report(
    query: str,
    breadth: int,
    depth: int,
    result: ResearchResult,
    summary: str,
    directory: Optional[str | Path] = None,
    now: Optional[datetime] = None,
) -> Path:
    """
    Write the report to ``directory`` (created if missing).

    Args:
        query: Root research query
        breadth: Breadth the run used
        depth: Depth the run used
        result: Findings of the run
        summary: Narrative summary
        directory: Target directory (defaults to settings.report_dir)
        now: Timestamp used in the file name

    Returns:
        Path of the written file
    """
    directory = Path(directory or settings.report_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / report_filename(query, now)
    path.write_text(render_report(query, breadth, depth, result, summary), encoding="utf-8")
    logger.info(f"Results saved to {path}")
    return path
