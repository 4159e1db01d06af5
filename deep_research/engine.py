"""
Research engine: validates a run's configuration, picks the exploration
strategy and turns whatever happens during exploration into a result.
"""

import logging
from dataclasses import replace
from typing import Optional

from .config import settings
from .errors import ConfigurationError
from .exploration import (
    BestFirstStrategy,
    ExplorationContext,
    LinearChainStrategy,
    ProgressTracker,
    ResearchCollaborators,
    build_synthesis,
)
from .models import AnalysisOptions, AnalysisProgress, ResearchConfig, ResearchProgress, ResearchResult, StrategyKind
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

STRATEGIES = {
    StrategyKind.LINEAR: LinearChainStrategy,
    StrategyKind.BEST_FIRST: BestFirstStrategy,
}

FOCUS_AREAS = {"claims", "methodologies", "patterns", "relationships"}
ANALYSIS_DEPTHS = {"basic", "detailed"}


def validate_config(config: ResearchConfig) -> None:
    """Raise ConfigurationError if the run cannot start."""
    if not config.query or not config.query.strip():
        raise ConfigurationError("Research query must not be empty")
    if config.breadth < 1:
        raise ConfigurationError(f"breadth must be at least 1, got {config.breadth}")
    if config.depth < 1:
        raise ConfigurationError(f"depth must be at least 1, got {config.depth}")
    if config.strategy not in STRATEGIES:
        raise ConfigurationError(f"Unknown strategy: {config.strategy}")
    for name in ("query_delay", "node_delay"):
        value = getattr(config, name)
        if value is not None and value < 0:
            raise ConfigurationError(f"{name} must not be negative, got {value}")

    if config.analysis is not None:
        unknown = set(config.analysis.focus_areas) - FOCUS_AREAS
        if unknown:
            raise ConfigurationError(f"Unknown focus areas: {sorted(unknown)}")
        if config.analysis.depth not in ANALYSIS_DEPTHS:
            raise ConfigurationError(f"Unknown analysis depth: {config.analysis.depth}")


class ResearchEngine:
    """
    Runs one research task end to end.

    Usage:
        engine = ResearchEngine(ResearchConfig(query="...", breadth=3, depth=2))
        result = await engine.research()

    Only configuration errors escape :meth:`research`; any failure during
    exploration produces a degraded result instead.
    """

    def __init__(
        self,
        config: ResearchConfig,
        collaborators: Optional[ResearchCollaborators] = None,
        search_limiter: Optional[RateLimiter] = None,
        llm_limiter: Optional[RateLimiter] = None,
        **context_options,
    ):
        """
        Initialize the engine.

        Args:
            config: Run parameters
            collaborators: Search and LLM capabilities (built from settings when omitted)
            search_limiter: Pacing shared by every search call of the run
                (built from settings.search_min_interval when omitted)
            llm_limiter: Pacing shared by every LLM call of the run
                (built from settings.llm_min_interval when omitted)
            **context_options: Overrides for ExplorationContext (timeouts, retry policies)
        """
        validate_config(config)
        self.config = config = replace(
            config,
            strategy=StrategyKind(config.strategy),
            analysis=config.analysis or AnalysisOptions(),
        )

        self.progress = ResearchProgress(
            total_depth=config.depth,
            total_breadth=config.breadth,
            current_depth=config.depth,
            current_breadth=config.breadth,
            analysis=AnalysisProgress(),
        )
        self._collaborators = collaborators
        self._search_limiter = search_limiter or RateLimiter(settings.search_min_interval, name="search")
        self._llm_limiter = llm_limiter or RateLimiter(settings.llm_min_interval, name="llm")
        self._context_options = context_options

    @property
    def collaborators(self) -> ResearchCollaborators:
        if self._collaborators is None:
            from .processing import ResearchProviders
            self._collaborators = ResearchProviders.from_settings()
        return self._collaborators

    async def research(self) -> ResearchResult:
        """Run the configured strategy and return its result."""
        config = self.config
        logger.info(f"Starting {config.strategy.value} research: {config.query!r}")

        try:
            context = ExplorationContext(
                config=config,
                collaborators=self.collaborators,
                tracker=ProgressTracker(self.progress, config.on_progress),
                search_limiter=self._search_limiter,
                llm_limiter=self._llm_limiter,
                **self._context_options,
            )
            strategy = STRATEGIES[config.strategy](context)
            result = await strategy.research()
        except ConfigurationError:
            raise
        except Exception:
            logger.exception(f"Research failed for {config.query!r}")
            return ResearchResult(learnings=[f"Research attempted on: {config.query}"])

        if result.analysis is not None:
            result.synthesis = build_synthesis(result.analysis)

        logger.info(
            f"Research complete: {len(result.learnings)} learnings from {len(result.sources)} sources"
        )
        return result
