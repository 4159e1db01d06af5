"""
Shared plumbing for exploration strategies.

``ExplorationContext`` bundles what a strategy needs for one run: the
frozen config, the collaborators, the progress tracker, and the
rate-limit/retry/deadline policy for each kind of external call. Every
external call a strategy makes goes through one of its methods, so the
resilience policy is applied in one place.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from .progress import ProgressTracker
from ..config import settings
from ..connectors.base import SearchItem
from ..models import (
    AnalysisOptions,
    ExplorationNode,
    ProcessedContent,
    QueryHints,
    QuerySuggestion,
    ResearchConfig,
)
from ..processing.providers import fallback_queries
from ..rate_limiter import RateLimiter
from ..resilience import RetryPolicy, call_with_resilience

logger = logging.getLogger(__name__)

_QUERY_PREFIX = re.compile(r"^(what are |tell me about |explain |describe )", re.IGNORECASE)


class ResearchCollaborators(Protocol):
    """Capabilities a strategy consumes. ``ResearchProviders`` is the production implementation."""

    async def search(self, query: str) -> list[SearchItem]: ...

    async def generate_queries(
        self,
        query: str,
        count: int,
        prior_findings: Sequence[str] = (),
        hints: Optional[QueryHints] = None,
        model: Optional[str] = None,
    ) -> list[QuerySuggestion]: ...

    async def process_content(
        self,
        query: str,
        content: Sequence[str],
        model: Optional[str] = None,
        analysis: Optional[AnalysisOptions] = None,
        num_follow_up_questions: int = 3,
    ) -> ProcessedContent: ...

    async def score_relevance(self, candidate_query: str, root_query: str, content: str) -> float: ...


def clean_query(query: str) -> str:
    """Drop conversational prefixes and trailing question marks."""
    return _QUERY_PREFIX.sub("", query.strip()).rstrip("?").strip()


def trim_text(text: str, max_length: int) -> str:
    return text if len(text) <= max_length else text[:max_length]


def extract_text(items: Sequence[SearchItem], max_length: int) -> list[str]:
    """Non-empty item contents, each capped at ``max_length`` characters."""
    return [trim_text(item.content, max_length) for item in items if item.content]


def extract_sources(items: Sequence[SearchItem]) -> list[str]:
    return [item.source for item in items if item.source]


def halve(breadth: int) -> int:
    return math.ceil(breadth / 2)


@dataclass
class ExplorationContext:
    """Per-run dependencies and call policy for a strategy."""

    config: ResearchConfig
    collaborators: ResearchCollaborators
    tracker: ProgressTracker
    search_limiter: Optional[RateLimiter] = None
    llm_limiter: Optional[RateLimiter] = None
    search_policy: RetryPolicy = field(
        default_factory=lambda: RetryPolicy.from_settings(initial_delay=settings.search_rate_limit_delay)
    )
    llm_policy: RetryPolicy = field(default_factory=RetryPolicy.from_settings)
    search_timeout: Optional[float] = field(default_factory=lambda: settings.search_timeout)
    process_timeout: Optional[float] = field(default_factory=lambda: settings.process_timeout)
    score_timeout: Optional[float] = field(default_factory=lambda: settings.score_timeout)
    content_max_chars: int = field(default_factory=lambda: settings.content_max_chars)

    @property
    def analysis_options(self) -> AnalysisOptions:
        return self.config.analysis or AnalysisOptions()

    async def search(self, query: str) -> list[SearchItem]:
        """Rate-limited, retried, deadline-bound search."""
        return await call_with_resilience(
            lambda: self.collaborators.search(query),
            timeout=self.search_timeout,
            policy=self.search_policy,
            limiter=self.search_limiter,
            operation_name="Search operation",
        )

    async def process(
        self,
        query: str,
        content: Sequence[str],
        model: Optional[str],
        num_follow_up_questions: int,
    ) -> ProcessedContent:
        """Rate-limited, retried, deadline-bound content processing."""
        return await call_with_resilience(
            lambda: self.collaborators.process_content(
                query,
                content,
                model=model,
                analysis=self.analysis_options,
                num_follow_up_questions=num_follow_up_questions,
            ),
            timeout=self.process_timeout,
            policy=self.llm_policy,
            limiter=self.llm_limiter,
            operation_name="Content processing",
        )

    async def generate_queries(
        self,
        query: str,
        count: int,
        prior_findings: Sequence[str] = (),
        hints: Optional[QueryHints] = None,
        model: Optional[str] = None,
    ) -> list[QuerySuggestion]:
        """Generate up to ``count`` queries; any failure yields the synthetic fallback."""
        try:
            suggestions = await call_with_resilience(
                lambda: self.collaborators.generate_queries(
                    query, count, prior_findings, hints, model=model
                ),
                timeout=self.process_timeout,
                policy=self.llm_policy,
                limiter=self.llm_limiter,
                operation_name="Query generation",
            )
        except Exception as e:
            logger.warning(f"Query generation failed for {query!r}: {e}")
            suggestions = []

        suggestions = [s for s in suggestions if s.query and s.query.strip()][:count]
        return suggestions or fallback_queries(query)

    async def score_relevance(self, node: ExplorationNode, root_query: str) -> float:
        """Relevance of ``node`` to the root query; the default score on any failure."""
        text = node.content.text if node.content else ""
        try:
            score = await call_with_resilience(
                lambda: self.collaborators.score_relevance(node.query, root_query, text),
                timeout=self.score_timeout,
                policy=self.llm_policy,
                limiter=self.llm_limiter,
                operation_name="Relevance scoring",
            )
            score = float(score)
        except Exception as e:
            logger.warning(f"Relevance scoring failed for {node.query!r}: {e}")
            return settings.default_relevance

        if math.isnan(score):
            return settings.default_relevance
        return min(1.0, max(0.0, score))


def select_model(items: Sequence[SearchItem], default_model: str) -> str:
    """The multimodal model when any item is an image or PDF, else ``default_model``."""
    if any(item.is_multimodal for item in items):
        return settings.multimodal_model
    return default_model
