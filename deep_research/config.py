"""Configuration for the deep research engine."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Search provider selection
    search_provider: str = Field(default="brave", description="Search provider: brave or searxng")

    # SearXNG Configuration
    searxng_host: str = Field(default="", description="SearXNG instance URL")
    searxng_engines: str = Field(default="google,bing,duckduckgo,brave", description="Comma-separated search engines")
    searxng_categories: str = Field(default="general", description="Search categories")
    searxng_language: str = Field(default="en", description="Search language")

    # Brave Search Configuration
    brave_api_key: str = Field(default="", description="Brave Search subscription token")
    brave_base_url: str = Field(default="https://api.search.brave.com/res/v1", description="Brave Search API base URL")
    brave_min_interval: float = Field(default=5.0, description="Minimum seconds between search calls (free plan)")
    search_results_count: int = Field(default=10, description="Results requested per search call")
    search_min_interval: float = Field(default=0.0, description="Minimum seconds between search calls across a run")

    # LLM Configuration (OpenAI-compatible API)
    llm_api_base: str = Field(default="https://api.venice.ai/api/v1", description="LLM API base URL")
    llm_api_key: str = Field(default="", description="LLM API key")
    llm_model: str = Field(default="llama-3.3-70b", description="General-purpose model")
    reasoning_model: str = Field(default="deepseek-r1-671b", description="Model for planning, scoring and deep analysis")
    multimodal_model: str = Field(default="qwen-2.5-vl", description="Model for image and PDF content")
    llm_temperature: float = Field(default=0.7, description="Generation temperature")
    llm_top_p: float = Field(default=0.95, description="Top-p sampling")
    llm_max_tokens: int = Field(default=1000, description="Max output tokens")
    llm_min_interval: float = Field(default=0.0, description="Minimum seconds between LLM calls")

    # Resilience
    retry_max_attempts: int = Field(default=3, description="Attempts per external call before giving up")
    retry_initial_delay: float = Field(default=1.0, description="Initial backoff delay in seconds")
    search_rate_limit_delay: float = Field(default=10.0, description="Backoff base for rate-limited searches")
    search_timeout: float = Field(default=120.0, description="Deadline for a search call in seconds")
    process_timeout: float = Field(default=300.0, description="Deadline for a content processing call in seconds")
    score_timeout: float = Field(default=120.0, description="Deadline for a relevance scoring call in seconds")

    # Exploration
    content_max_chars: int = Field(default=25_000, description="Cap applied to each retrieved text item")
    relevance_threshold: float = Field(default=0.6, description="Score a node must exceed to spawn children")
    default_relevance: float = Field(default=0.5, description="Score used when scoring fails")
    node_delay: float = Field(default=5.0, description="Pause between best-first nodes in seconds")
    query_delay: float = Field(default=5.0, description="Pause between sequential top-level chains in seconds")
    default_breadth: int = Field(default=3, description="Default research breadth")
    default_depth: int = Field(default=2, description="Default research depth")

    # Output
    report_dir: str = Field(default="research", description="Directory for Markdown reports")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    model_config = {"env_prefix": "DEEP_RESEARCH_"}


settings = Settings()
