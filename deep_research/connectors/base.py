"""Base connector types and protocol."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from ..errors import ErrorKind, ExternalCallError

MULTIMODAL_TYPES = frozenset({"image", "pdf"})


@dataclass
class SearchItem:
    """A single search hit from any provider."""

    title: str
    content: str
    source: str
    type: str = "web"

    @property
    def is_multimodal(self) -> bool:
        return self.type in MULTIMODAL_TYPES


def retry_after_from_headers(headers: Mapping[str, str]) -> Optional[float]:
    """
    Seconds to wait before retrying, from rate-limit response headers.

    Prefers ``Retry-After``; falls back to ``X-RateLimit-Reset`` (seconds
    until the window resets) plus a small margin.
    """
    retry_after = headers.get("retry-after")
    if retry_after:
        try:
            return max(0.0, float(retry_after))
        except ValueError:
            pass

    reset = headers.get("x-ratelimit-reset")
    if reset:
        try:
            # Brave sends a comma-separated list (per-second, per-month)
            return max(0.0, float(reset.split(",")[0].strip())) + 0.1
        except ValueError:
            return None
    return None


def classify_http_error(response: httpx.Response, provider: str) -> ExternalCallError:
    """Map an unsuccessful HTTP response to a classified error."""
    status = response.status_code
    if status == 429:
        return ExternalCallError(
            ErrorKind.RATE_LIMITED,
            f"{provider} rate limit exceeded",
            retry_after=retry_after_from_headers(response.headers),
            provider=provider,
        )
    kind = ErrorKind.TRANSIENT if status >= 500 else ErrorKind.FATAL
    return ExternalCallError(kind, f"{provider} search failed with HTTP {status}", provider=provider)


def classify_transport_error(error: httpx.TransportError, provider: str) -> ExternalCallError:
    """Connection resets and transport-level timeouts are worth retrying."""
    return ExternalCallError(
        ErrorKind.TRANSIENT,
        f"{provider} search failed: {error.__class__.__name__}: {error}",
        provider=provider,
    )


class SearchProvider(ABC):
    """Base protocol for web search providers."""

    name: str = "base"
    type: str = "web"

    @abstractmethod
    async def search(self, query: str) -> list[SearchItem]:
        """Execute search and return results."""
        ...

    def is_configured(self) -> bool:
        """Check if provider is properly configured."""
        return True
