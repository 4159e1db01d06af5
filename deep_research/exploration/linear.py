"""
Linear-chain exploration.

Each top-level query starts a chain that goes ``depth`` levels deep. At
every level the chain searches, processes the results, and follows the
first follow-up question to the next level with half the breadth. Chains
are independent: they run one after another with a pause in between, or
concurrently when ``ResearchConfig.concurrent_chains`` is set.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .aggregate import merge_analysis, merge_results
from .context import (
    ExplorationContext,
    clean_query,
    extract_sources,
    extract_text,
    halve,
    select_model,
)
from ..config import settings
from ..models import ContentAnalysis, ResearchResult, StrategyKind

logger = logging.getLogger(__name__)


class ChainState(str, Enum):
    """Where a chain is in its current level."""
    PENDING = "pending"
    SEARCHING = "searching"
    PROCESSING = "processing"
    SCORED = "scored"
    CONTINUING = "continuing"
    TERMINAL = "terminal"


def level_breadths(breadth: int, depth: int) -> list[int]:
    """Breadth used at each level: ``breadth``, then halved (rounding up) per level."""
    levels = []
    current = breadth
    for _ in range(depth):
        levels.append(current)
        current = halve(current)
    return levels


def total_query_budget(breadth: int, depth: int) -> int:
    """Planned number of queries for a linear run."""
    return sum(level_breadths(breadth, depth))


@dataclass
class ResearchChain:
    """One top-level query followed down through the levels."""
    root_query: str
    query: str
    remaining_depth: int
    breadth: int
    state: ChainState = ChainState.PENDING
    learnings: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    analysis: Optional[ContentAnalysis] = None

    def to_result(self) -> ResearchResult:
        return ResearchResult(
            learnings=list(self.learnings),
            sources=list(self.sources),
            analysis=self.analysis,
        )


class LinearChainStrategy:
    """Depth-bounded chains with breadth halving per level."""

    kind = StrategyKind.LINEAR

    def __init__(self, context: ExplorationContext, model: Optional[str] = None):
        self.context = context
        self.config = context.config
        self.model = model or settings.llm_model
        self.level_breadths = level_breadths(self.config.breadth, self.config.depth)
        self.query_delay = (
            self.config.query_delay if self.config.query_delay is not None else settings.query_delay
        )

        # Fixed for the run, even if chains end early
        context.tracker.update(total_queries=sum(self.level_breadths))

        logger.info(
            f"Research path initialized: query={self.config.query!r} depth={self.config.depth} "
            f"breadth={self.config.breadth} total_queries={sum(self.level_breadths)}"
        )

    async def research(self) -> ResearchResult:
        """Run every top-level chain and merge their findings."""
        config = self.config
        logger.info("Generating initial queries...")
        queries = await self.context.generate_queries(config.query, config.breadth)
        logger.info(f"Generated {len(queries)} initial queries")

        self.context.tracker.update(current_query=queries[0].query)

        chains = [
            ResearchChain(
                root_query=config.query,
                query=q.query,
                remaining_depth=config.depth,
                breadth=config.breadth,
            )
            for q in queries
        ]

        if config.concurrent_chains:
            await asyncio.gather(*(self.run_chain(chain) for chain in chains))
        else:
            for index, chain in enumerate(chains):
                await self.run_chain(chain)
                if index < len(chains) - 1 and self.query_delay > 0:
                    logger.info(f"Waiting {self.query_delay:g}s before next query...")
                    await asyncio.sleep(self.query_delay)

        logger.info("Research complete, combining results...")
        return merge_results(chain.to_result() for chain in chains)

    async def run_chain(self, chain: ResearchChain) -> ResearchChain:
        """Follow one chain until its depth is used up or a call fails."""
        context = self.context
        tracker = context.tracker

        while chain.remaining_depth > 0:
            query = chain.query
            next_breadth = halve(chain.breadth)
            logger.info(
                f"Processing query at depth {chain.remaining_depth}, breadth {chain.breadth}: {query!r}"
            )

            try:
                chain.state = ChainState.SEARCHING
                items = await context.search(query)
                content = extract_text(items, context.content_max_chars)
                new_sources = extract_sources(items)
                logger.info(f"Found {len(content)} results for {query!r}")

                chain.state = ChainState.PROCESSING
                processed = await context.process(
                    query,
                    content,
                    model=select_model(items, self.model),
                    num_follow_up_questions=next_breadth,
                )
            except Exception as e:
                logger.warning(f"Error processing query {query!r}: {e}")
                chain.learnings.append(f"Error researching: {query}")
                chain.state = ChainState.TERMINAL
                break

            chain.state = ChainState.SCORED
            logger.info(
                f"Extracted {len(processed.learnings)} learnings and "
                f"{len(processed.follow_up_questions)} follow-up questions"
            )
            chain.learnings.extend(processed.learnings)
            chain.sources.extend(new_sources)
            if processed.analysis is not None:
                chain.analysis = merge_analysis(chain.analysis or ContentAnalysis(), processed.analysis)
                tracker.record_analysis(processed.analysis)

            tracker.complete_query(
                current_depth=chain.remaining_depth,
                current_breadth=chain.breadth,
                current_query=query,
            )

            chain.remaining_depth -= 1
            if chain.remaining_depth == 0:
                chain.state = ChainState.TERMINAL
                break

            chain.state = ChainState.CONTINUING
            chain.breadth = next_breadth
            chain.query = (
                processed.follow_up_questions[0]
                if processed.follow_up_questions
                else f"Tell me more about {clean_query(query)}"
            )
            logger.info(f"Continuing research at depth {chain.remaining_depth}, breadth {chain.breadth}")

        return chain
