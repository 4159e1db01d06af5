"""Brave Search connector for privacy-focused web search."""

import logging

import httpx

from .base import SearchItem, SearchProvider, classify_http_error, classify_transport_error
from ..config import settings
from ..errors import ConfigurationError
from ..rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class BraveSearchConnector(SearchProvider):
    """Brave Search API connector."""

    name = "brave"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        count: int | None = None,
        min_interval: float | None = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key if api_key is not None else settings.brave_api_key
        self.base_url = (base_url or settings.brave_base_url).rstrip("/")
        self.count = count or settings.search_results_count
        self.timeout = timeout
        self.rate_limiter = RateLimiter(
            min_interval if min_interval is not None else settings.brave_min_interval,
            name=self.name,
        )

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str) -> list[SearchItem]:
        """Execute Brave web search."""
        query = (query or "").strip()
        if not query:
            return []
        if not self.is_configured():
            raise ConfigurationError("DEEP_RESEARCH_BRAVE_API_KEY is required for Brave search")

        await self.rate_limiter.acquire()
        logger.debug(f"Brave search: {query!r}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}/web/search",
                    headers={
                        "Accept": "application/json",
                        "X-Subscription-Token": self.api_key,
                    },
                    params={
                        "q": query,
                        "count": self.count,
                        "offset": 0,
                        "search_lang": "en",
                        "country": "US",
                        "safesearch": "moderate",
                    },
                )
        except httpx.TransportError as e:
            raise classify_transport_error(e, self.name) from e

        if response.status_code >= 400:
            error = classify_http_error(response, self.name)
            logger.warning(f"Brave search error for {query!r}: {error}")
            raise error

        data = response.json()
        results = (data.get("web") or {}).get("results", [])

        return [
            SearchItem(
                title=result.get("title") or "Untitled",
                content=result.get("description") or "No description available",
                source=result.get("url", ""),
                type=self.type,
            )
            for result in results
        ]
