"""
Research collaborators backed by a search provider and an LLM.

``ResearchProviders`` implements the capabilities the exploration
strategies consume: search, query generation, content processing and
relevance scoring, plus the final narrative summary.

Call failures (``ExternalCallError``) propagate so the resilience layer can
retry them. Unusable model output is handled here: query generation and
content processing re-prompt once with stricter formatting, then fall
back to a synthetic query or empty findings.
"""

import logging
from typing import Optional, Sequence

from .parsing import extract_score, parse_processed_content, parse_queries
from .prompts import (
    STRICT_FORMAT_SUFFIX,
    build_processing_prompt,
    build_query_prompt,
    build_relevance_prompt,
    build_summary_prompt,
    system_prompt,
)
from ..config import settings
from ..connectors import SearchItem, SearchProvider, suggest_search_provider
from ..llm_client import LLMClient
from ..models import AnalysisOptions, ContentAnalysis, ProcessedContent, QueryHints, QuerySuggestion

logger = logging.getLogger(__name__)

DEFAULT_NUM_LEARNINGS = 3
SUMMARY_FALLBACK = "Failed to generate summary."


def fallback_queries(query: str) -> list[QuerySuggestion]:
    """The single synthetic query used when generation yields nothing."""
    return [QuerySuggestion(
        query=f"What are the key aspects of {query}?",
        research_goal=f"Research and analyze: {query}",
    )]


class ResearchProviders:
    """
    Search and LLM capabilities for the exploration strategies.

    Usage:
        providers = ResearchProviders.from_settings()
        items = await providers.search("solid state batteries")
        processed = await providers.process_content(query, [i.content for i in items])
    """

    def __init__(
        self,
        search_provider: SearchProvider,
        llm_client: LLMClient,
        num_learnings: int = DEFAULT_NUM_LEARNINGS,
        planning_model: Optional[str] = None,
    ):
        """
        Initialize providers.

        Args:
            search_provider: Web search backend
            llm_client: Completion client
            num_learnings: Maximum learnings kept per processing call
            planning_model: Model for query generation (defaults to the reasoning model)
        """
        self.search_provider = search_provider
        self.llm_client = llm_client
        self.num_learnings = num_learnings
        self.planning_model = planning_model or settings.reasoning_model

    @classmethod
    def from_settings(cls) -> "ResearchProviders":
        return cls(search_provider=suggest_search_provider(), llm_client=LLMClient())

    async def search(self, query: str) -> list[SearchItem]:
        return await self.search_provider.search(query)

    async def generate_queries(
        self,
        query: str,
        count: int,
        prior_findings: Sequence[str] = (),
        hints: Optional[QueryHints] = None,
        model: Optional[str] = None,
    ) -> list[QuerySuggestion]:
        """Generate up to ``count`` follow-up queries, falling back to a synthetic one."""
        prompt = build_query_prompt(query, count, prior_findings, hints)
        model = model or self.planning_model

        response = await self.llm_client.complete(system_prompt(), prompt, model=model)
        queries = parse_queries(response)
        if not queries:
            logger.debug(f"No queries parsed for {query!r}, re-prompting")
            response = await self.llm_client.complete(
                system_prompt(), prompt + STRICT_FORMAT_SUFFIX, model=model, temperature=0.5
            )
            queries = parse_queries(response)

        return queries[:count] or fallback_queries(query)

    async def process_content(
        self,
        query: str,
        content: Sequence[str],
        model: Optional[str] = None,
        analysis: Optional[AnalysisOptions] = None,
        num_follow_up_questions: int = 3,
    ) -> ProcessedContent:
        """Extract learnings, follow-up questions and analysis; empty when unparseable."""
        options = analysis or AnalysisOptions()
        prompt = build_processing_prompt(
            query, content, self.num_learnings, num_follow_up_questions, options
        )
        max_tokens = settings.llm_max_tokens * (2 if options.depth == "detailed" else 1)

        response = await self.llm_client.complete(
            system_prompt(), prompt, model=model, temperature=0.5, max_tokens=max_tokens
        )
        processed = parse_processed_content(response)
        if processed is None:
            logger.debug(f"No learnings parsed for {query!r}, re-prompting")
            response = await self.llm_client.complete(
                system_prompt(), prompt + STRICT_FORMAT_SUFFIX, model=model, temperature=0.5, max_tokens=max_tokens
            )
            processed = parse_processed_content(response)

        if processed is None:
            logger.warning(f"Could not extract findings for {query!r}")
            return ProcessedContent()

        processed.learnings = processed.learnings[:self.num_learnings]
        processed.follow_up_questions = processed.follow_up_questions[:num_follow_up_questions]
        return processed

    async def score_relevance(self, candidate_query: str, root_query: str, content: str) -> float:
        """Ask the reasoning model for a 0-1 relevance rating."""
        prompt = build_relevance_prompt(candidate_query, root_query)
        if content:
            prompt += f"\n\nContent retrieved for the candidate query:\n{content}"
        response = await self.llm_client.complete(
            system_prompt(), prompt, model=settings.reasoning_model, temperature=0.2
        )
        return extract_score(response, default=settings.default_relevance)

    async def generate_summary(
        self,
        query: str,
        learnings: Sequence[str],
        analysis: Optional[ContentAnalysis] = None,
    ) -> str:
        """Narrative summary of a finished run. Never raises."""
        prompt = build_summary_prompt(query, learnings, analysis)
        try:
            summary = await self.llm_client.complete(
                system_prompt(), prompt, model=settings.reasoning_model, max_tokens=settings.llm_max_tokens * 4
            )
        except Exception as e:
            logger.error(f"Summary generation failed: {e}")
            return SUMMARY_FALLBACK
        return summary.strip() or SUMMARY_FALLBACK
