"""Search connectors for web research."""

from .base import SearchItem, SearchProvider, retry_after_from_headers
from .brave import BraveSearchConnector
from .searxng import SearXNGConnector
from ..config import settings
from ..errors import ConfigurationError


def suggest_search_provider(name: str | None = None) -> SearchProvider:
    """Build the configured search provider."""
    name = (name or settings.search_provider).lower()
    if name == "brave":
        return BraveSearchConnector()
    if name == "searxng":
        return SearXNGConnector()
    raise ConfigurationError(f"Unknown search provider: {name}")


__all__ = [
    "SearchItem",
    "SearchProvider",
    "BraveSearchConnector",
    "SearXNGConnector",
    "retry_after_from_headers",
    "suggest_search_provider",
]
