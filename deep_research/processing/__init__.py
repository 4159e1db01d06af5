"""Prompting and parsing collaborators for exploration strategies."""

from .parsing import extract_score, parse_processed_content, parse_queries
from .providers import ResearchProviders, fallback_queries

__all__ = [
    "ResearchProviders",
    "fallback_queries",
    "extract_score",
    "parse_processed_content",
    "parse_queries",
]
