"""LLM client for OpenAI-compatible chat completion APIs.

SDK failures are translated into classified :class:`ExternalCallError`
instances here, at the boundary. The client never retries on its own;
retry policy belongs to the resilience layer.
"""

import logging
from typing import Optional

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    RateLimitError,
)

from .config import settings
from .connectors.base import retry_after_from_headers
from .errors import ConfigurationError, ErrorKind, ExternalCallError
from .llm_utils import get_llm_content

logger = logging.getLogger(__name__)


class LLMClient:
    """AsyncOpenAI wrapper returning plain completion text."""

    provider = "llm"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize LLM client.

        Args:
            api_key: API key (defaults to settings)
            base_url: API base URL (defaults to settings)
            model: Default model for completions (defaults to settings)
            client: Pre-built AsyncOpenAI client, mainly for tests
        """
        self.api_key = api_key or settings.llm_api_key
        self.base_url = base_url or settings.llm_api_base
        self.model = model or settings.llm_model

        if client is None:
            if not self.api_key:
                raise ConfigurationError(
                    "API key is required. Provide it in constructor or set DEEP_RESEARCH_LLM_API_KEY."
                )
            # SDK retries disabled: the resilience layer owns retries
            client = AsyncOpenAI(base_url=self.base_url, api_key=self.api_key, max_retries=0)
        self._client = client

        self.last_model_used: Optional[str] = None

    async def complete(
        self,
        system: str,
        prompt: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Create a chat completion and return its text.

        Raises:
            ExternalCallError: Classified API failure or empty response
        """
        current_model = model or self.model
        temperature = temperature if temperature is not None else settings.llm_temperature
        top_p = top_p if top_p is not None else settings.llm_top_p
        max_tokens = max_tokens if max_tokens is not None else settings.llm_max_tokens

        logger.debug(f"Completion request with model: {current_model}")
        try:
            response = await self._client.chat.completions.create(
                model=current_model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_tokens,
            )
        except RateLimitError as e:
            raise ExternalCallError(
                ErrorKind.RATE_LIMITED,
                f"Rate limited on {current_model}",
                retry_after=retry_after_from_headers(e.response.headers),
                provider=self.provider,
            ) from e
        except APITimeoutError as e:
            raise ExternalCallError(ErrorKind.TRANSIENT, f"Request timed out on {current_model}", provider=self.provider) from e
        except APIConnectionError as e:
            raise ExternalCallError(ErrorKind.TRANSIENT, f"Connection error: {e}", provider=self.provider) from e
        except APIStatusError as e:
            kind = ErrorKind.TRANSIENT if e.status_code >= 500 else ErrorKind.FATAL
            raise ExternalCallError(kind, f"LLM API error {e.status_code}: {e.message}", provider=self.provider) from e

        if not response.choices:
            raise ExternalCallError(ErrorKind.FATAL, "Invalid response format from LLM API", provider=self.provider)

        content = get_llm_content(response.choices[0].message)
        if not content:
            raise ExternalCallError(ErrorKind.FATAL, "Empty completion from LLM API", provider=self.provider)

        self.last_model_used = current_model
        return content
