"""Pytest configuration and fixtures."""

import os
import pytest
from pathlib import Path
from dotenv import load_dotenv

from deep_research.connectors.base import SearchItem
from deep_research.errors import ErrorKind, ExternalCallError
from deep_research.exploration import ExplorationContext, ProgressTracker
from deep_research.models import (
    Claim,
    ContentAnalysis,
    Pattern,
    ProcessedContent,
    QuerySuggestion,
    ResearchConfig,
    ResearchProgress,
)
from deep_research.resilience import RetryPolicy

# Load test environment
test_env = Path(__file__).parent / ".env"
if test_env.exists():
    load_dotenv(test_env)


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (require external services)")
    config.addinivalue_line("markers", "slow: Slow tests (real delays or LLM calls)")


SHARED_SOURCE = "https://example.com/overview"
SHARED_LEARNING = "Shared background fact that every result repeats"


class FakeCollaborators:
    """
    Deterministic in-memory search and LLM capabilities.

    Every query yields one unique and one shared source, one unique and one
    shared learning, and follow-up questions derived from the query text.
    """

    def __init__(self, default_score=0.5, scores=None, search_errors=None, item_type="web"):
        self.default_score = default_score
        self.scores = dict(scores or {})
        self.search_errors = dict(search_errors or {})
        self.item_type = item_type
        self.search_calls = []
        self.query_calls = []
        self.process_calls = []
        self.score_calls = []

    async def search(self, query):
        self.search_calls.append(query)
        if query in self.search_errors:
            raise self.search_errors[query]
        return [
            SearchItem(
                title=f"Result for {query}",
                content=f"Content about {query}",
                source=f"https://example.com/{len(self.search_calls)}",
                type=self.item_type,
            ),
            SearchItem(title="Overview", content="General overview", source=SHARED_SOURCE),
        ]

    async def generate_queries(self, query, count, prior_findings=(), hints=None, model=None):
        self.query_calls.append({"query": query, "count": count, "hints": hints, "model": model})
        return [
            QuerySuggestion(query=f"{query} > q{i}", research_goal=f"Goal {i}")
            for i in range(1, count + 1)
        ]

    async def process_content(self, query, content, model=None, analysis=None, num_follow_up_questions=3):
        self.process_calls.append({
            "query": query,
            "content": list(content),
            "model": model,
            "analysis": analysis,
            "num_follow_up_questions": num_follow_up_questions,
        })
        return ProcessedContent(
            learnings=[f"Learning about {query}", SHARED_LEARNING],
            follow_up_questions=[f"{query} > follow-up {i}" for i in range(1, num_follow_up_questions + 1)],
            analysis=ContentAnalysis(
                claims=[Claim(statement=f"Claim about {query}", confidence=0.9)],
                methodologies=["Systematic literature review"],
                patterns=[Pattern(type="consensus", description=f"Sources agree on {query}")],
            ),
        )

    async def score_relevance(self, candidate_query, root_query, content):
        self.score_calls.append(candidate_query)
        return self.scores.get(candidate_query, self.default_score)


def fatal_error(message="search backend rejected the request"):
    return ExternalCallError(ErrorKind.FATAL, message, provider="fake")


@pytest.fixture
def collaborators():
    """Fake collaborators with neutral relevance scores."""
    return FakeCollaborators()


@pytest.fixture
def no_delay_policy():
    """Retry policy without backoff waits."""
    return RetryPolicy(max_attempts=3, initial_delay=0.0)


@pytest.fixture
def context_options(no_delay_policy):
    """ExplorationContext overrides that keep tests fast."""
    return {
        "search_policy": no_delay_policy,
        "llm_policy": no_delay_policy,
        "search_timeout": 1.0,
        "process_timeout": 1.0,
        "score_timeout": 1.0,
    }


@pytest.fixture
def make_config():
    """Factory for run configs without inter-query or inter-node delays."""
    def _make(query="solid state batteries", breadth=2, depth=1, **kwargs):
        kwargs.setdefault("query_delay", 0.0)
        kwargs.setdefault("node_delay", 0.0)
        return ResearchConfig(query=query, breadth=breadth, depth=depth, **kwargs)
    return _make


@pytest.fixture
def make_context(context_options):
    """Factory for exploration contexts backed by the given collaborators."""
    def _make(config, collaborators, observer=None, **overrides):
        progress = ResearchProgress(total_depth=config.depth, total_breadth=config.breadth)
        options = {**context_options, **overrides}
        return ExplorationContext(
            config=config,
            collaborators=collaborators,
            tracker=ProgressTracker(progress, observer),
            **options,
        )
    return _make


@pytest.fixture
def brave_configured():
    """Check if Brave Search is configured."""
    return bool(os.getenv("DEEP_RESEARCH_BRAVE_API_KEY", ""))


@pytest.fixture
def llm_configured():
    """Check if the LLM API is configured."""
    return bool(os.getenv("DEEP_RESEARCH_LLM_API_KEY", ""))


@pytest.fixture
def test_client():
    """Create FastAPI test client."""
    from fastapi.testclient import TestClient
    from deep_research.main import app
    return TestClient(app)
