"""SearXNG connector for self-hosted meta-search."""

import logging

import httpx

from .base import SearchItem, SearchProvider, classify_http_error, classify_transport_error
from ..config import settings
from ..rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class SearXNGConnector(SearchProvider):
    """SearXNG meta-search connector."""

    name = "searxng"

    def __init__(
        self,
        host: str | None = None,
        engines: str | None = None,
        categories: str | None = None,
        language: str | None = None,
        count: int | None = None,
        min_interval: float = 0.0,
        timeout: float = 30.0,
    ):
        self.host = (host if host is not None else settings.searxng_host).rstrip("/")
        self.engines = engines or settings.searxng_engines
        self.categories = categories or settings.searxng_categories
        self.language = language or settings.searxng_language
        self.count = count or settings.search_results_count
        self.timeout = timeout
        self.rate_limiter = RateLimiter(min_interval, name=self.name)

    def is_configured(self) -> bool:
        return bool(self.host)

    async def search(self, query: str) -> list[SearchItem]:
        """Execute SearXNG search."""
        query = (query or "").strip()
        if not query or not self.is_configured():
            return []

        params = {
            "q": query,
            "format": "json",
            "language": self.language,
        }
        if self.engines:
            params["engines"] = self.engines
        if self.categories:
            params["categories"] = self.categories

        await self.rate_limiter.acquire()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.host}/search", params=params)
        except httpx.TransportError as e:
            raise classify_transport_error(e, self.name) from e

        if response.status_code >= 400:
            raise classify_http_error(response, self.name)

        results = response.json().get("results", [])[:self.count]

        items = []
        for result in results:
            url = result.get("url", "")
            # SearXNG tags file results by category or template
            item_type = "pdf" if url.lower().endswith(".pdf") else (
                "image" if result.get("category") == "images" else self.type
            )
            items.append(SearchItem(
                title=result.get("title") or "Untitled",
                content=result.get("content") or "",
                source=url,
                type=item_type,
            ))
        return items
