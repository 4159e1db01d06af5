"""
Best-first exploration over a relevance-ordered frontier.

The root query is explored first. Every explored node is scored for
relevance to the root query by the reasoning model, and only nodes scoring
above the threshold spawn children. The frontier always yields the
highest-scoring unexplored node next, and the run stops once
``breadth * depth`` nodes have been explored or nothing is left to explore.
"""

import asyncio
import logging
import re
from typing import Optional

from .aggregate import collect_tree, dedupe, merge_analysis
from .context import (
    ExplorationContext,
    extract_sources,
    extract_text,
    halve,
    select_model,
)
from .frontier import Frontier
from ..config import settings
from ..models import (
    ContentAnalysis,
    ExplorationNode,
    NodeContent,
    QueryHints,
    ResearchResult,
    StrategyKind,
)

logger = logging.getLogger(__name__)

LOW_CONFIDENCE = 0.7
CHILD_QUERY_TYPES = ("comparative", "methodological", "consensus")

_TEMPORAL = re.compile(r"recent|latest|current|future|past|years?|months?", re.IGNORECASE)
_TIMEFRAME = re.compile(r"(?:past|recent|last)\s+(\d+)\s+(?:years?|months?|decades?)", re.IGNORECASE)


def knowledge_gaps(analysis: ContentAnalysis, threshold: float = LOW_CONFIDENCE) -> list[str]:
    """Low-confidence claims followed by disagreement patterns."""
    gaps = [claim.statement for claim in analysis.claims if claim.confidence < threshold]
    gaps.extend(p.description for p in analysis.patterns if p.type == "disagreement")
    return gaps


def detect_timeframe(analysis: ContentAnalysis) -> Optional[str]:
    """
    A timeframe such as "past 5 years" taken from the first temporal pattern.

    Only the first pattern that mentions time at all is inspected.
    """
    temporal = [p for p in analysis.patterns if _TEMPORAL.search(p.description)]
    if not temporal:
        return None
    match = _TIMEFRAME.search(temporal[0].description)
    return match.group(0) if match else None


class BestFirstStrategy:
    """Relevance-ordered exploration bounded by a global node budget."""

    kind = StrategyKind.BEST_FIRST

    def __init__(self, context: ExplorationContext):
        self.context = context
        self.config = context.config
        self.max_nodes = self.config.breadth * self.config.depth
        self.child_count = halve(self.config.breadth)
        self.threshold = settings.relevance_threshold
        self.node_delay = (
            self.config.node_delay if self.config.node_delay is not None else settings.node_delay
        )
        self.global_analysis = ContentAnalysis()
        self.explored_count = 0

        self.root = ExplorationNode(query=self.config.query, relevance_score=1.0)
        self.frontier = Frontier()
        self.frontier.push(self.root)

        context.tracker.update(total_queries=self.max_nodes)

    @property
    def models(self) -> dict[str, str]:
        return {
            "path_planning": settings.reasoning_model,
            "multimodal": settings.multimodal_model,
            "content_analysis": settings.reasoning_model,
        }

    async def research(self) -> ResearchResult:
        """Explore until the node budget is spent or the frontier is empty."""
        logger.info(
            f"Starting best-first exploration: query={self.config.query!r} max_nodes={self.max_nodes}"
        )

        while self.explored_count < self.max_nodes:
            node = self.frontier.pop_highest()
            if node is None:
                break

            await self.explore_node(node)
            self.explored_count += 1
            self.context.tracker.complete_query(current_query=node.query, current_depth=node.depth)
            logger.info(
                f"Explored node {self.explored_count}/{self.max_nodes} "
                f"(score {node.relevance_score:.2f}, {len(self.frontier)} queued)"
            )

            if self.frontier and self.explored_count < self.max_nodes and self.node_delay > 0:
                await asyncio.sleep(self.node_delay)

        learnings, sources = collect_tree(self.root)
        logger.info(f"Best-first exploration finished after {self.explored_count} nodes")
        return ResearchResult(
            learnings=dedupe(learnings),
            sources=dedupe(sources),
            analysis=self.global_analysis,
            models=self.models,
        )

    async def explore_node(self, node: ExplorationNode) -> None:
        """
        Search, process, score and possibly expand one node.

        Any failure marks the node explored with a single placeholder
        finding; the run carries on with the next frontier item.
        """
        context = self.context
        try:
            items = await context.search(node.query)
            text = extract_text(items, context.content_max_chars)
            node.sources = extract_sources(items)
            node.content = NodeContent(text="\n".join(text))

            processed = await context.process(
                node.query,
                text,
                model=select_model(items, settings.reasoning_model),
                num_follow_up_questions=self.child_count,
            )
            node.learnings = list(processed.learnings)
            node.relevance_score = await context.score_relevance(node, self.config.query)
        except Exception as e:
            logger.warning(f"Error exploring {node.query!r}: {e}")
            node.content = None
            node.mark_explored()
            node.learnings = [f"Error researching: {node.query}"]
            return

        # Raw material is only needed for scoring
        node.content = None
        node.mark_explored()

        if processed.analysis is not None:
            node.analysis = processed.analysis
            merge_analysis(self.global_analysis, processed.analysis)
            context.tracker.record_analysis(processed.analysis)

        if node.relevance_score > self.threshold:
            await self.expand(node)

    async def expand(self, node: ExplorationNode) -> None:
        """Create one unscored child per generated follow-up query."""
        hints = QueryHints(
            knowledge_gaps=knowledge_gaps(self.global_analysis),
            timeframe=detect_timeframe(self.global_analysis),
            query_types=CHILD_QUERY_TYPES,
        )
        suggestions = await self.context.generate_queries(
            node.query,
            self.child_count,
            prior_findings=node.learnings,
            hints=hints,
            model=settings.reasoning_model,
        )

        node.children = [ExplorationNode(query=s.query, depth=node.depth + 1) for s in suggestions]
        for child in node.children:
            self.frontier.push(child)
        logger.debug(f"Queued {len(node.children)} children of {node.query!r}")
