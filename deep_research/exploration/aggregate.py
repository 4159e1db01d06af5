"""Merging per-branch findings into a single research result."""

from collections import Counter
from typing import Iterable, Optional

from ..models import ContentAnalysis, ExplorationNode, ResearchResult, Synthesis


def dedupe(values: Iterable[str]) -> list[str]:
    """Drop exact duplicates, keeping the first occurrence of each value."""
    return list(dict.fromkeys(values))


def collect_tree(root: ExplorationNode) -> tuple[list[str], list[str]]:
    """Concatenate learnings and sources over the tree, depth-first from ``root``."""
    learnings: list[str] = []
    sources: list[str] = []
    for node in root.iter_tree():
        learnings.extend(node.learnings)
        sources.extend(node.sources)
    return learnings, sources


def merge_analysis(target: ContentAnalysis, incoming: ContentAnalysis) -> ContentAnalysis:
    """
    Fold ``incoming`` into ``target`` in place.

    Claims, patterns and relationships are appended; methodologies are
    unioned, keeping first-seen order.
    """
    target.claims.extend(incoming.claims)
    target.methodologies[:] = dedupe([*target.methodologies, *incoming.methodologies])
    target.patterns.extend(incoming.patterns)
    target.relationships.extend(incoming.relationships)
    return target


def merge_results(results: Iterable[ResearchResult]) -> ResearchResult:
    """Combine branch results, deduplicating learnings and sources."""
    results = list(results)
    analysis: Optional[ContentAnalysis] = None
    for result in results:
        if result.analysis is not None:
            analysis = merge_analysis(analysis or ContentAnalysis(), result.analysis)

    return ResearchResult(
        learnings=dedupe(l for r in results for l in r.learnings),
        sources=dedupe(s for r in results for s in r.sources),
        analysis=analysis,
    )


def build_synthesis(analysis: ContentAnalysis) -> Synthesis:
    """Fold the run's analysis into lookup tables for reporting."""
    synthesis = Synthesis()

    for pattern in analysis.patterns:
        synthesis.patterns.setdefault(pattern.type, []).append(pattern.description)
    synthesis.consensus = dict(Counter(p.type for p in analysis.patterns))

    synthesis.methodologies.update(analysis.methodologies)

    for rel in analysis.relationships:
        synthesis.relationships.setdefault(rel.concept1, set()).add(rel.concept2)

    # Later claims overwrite earlier ones with the same statement
    for claim in analysis.claims:
        synthesis.confidence_levels[claim.statement] = claim.confidence

    return synthesis
