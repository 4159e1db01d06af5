"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Literal


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    search_provider: str
    search_configured: bool
    llm_configured: bool


# =============================================================================
# Research Schemas
# =============================================================================


class AnalysisOptionsSchema(BaseModel):
    """Structured analysis requested for processed content."""

    depth: Literal["basic", "detailed"] = Field(default="basic", description="Analysis thoroughness")
    focus_areas: list[Literal["claims", "methodologies", "patterns", "relationships"]] = Field(
        default_factory=lambda: ["claims", "patterns"],
        description="Aspects of the content to analyse",
    )


class ResearchRequest(BaseModel):
    """Request for an iterative research run."""

    query: str = Field(..., min_length=1, description="Research query")
    breadth: int = Field(default=3, ge=1, le=10, description="Queries explored per level")
    depth: int = Field(default=2, ge=1, le=5, description="Levels of follow-up research")
    strategy: Literal["linear", "best_first"] = Field(
        default="linear",
        description="linear: one chain per query; best_first: relevance-ordered exploration"
    )
    concurrent_chains: bool = Field(default=False, description="Run linear chains concurrently")
    analysis: AnalysisOptionsSchema | None = Field(default=None, description="Content analysis options")
    include_summary: bool = Field(default=True, description="Generate a narrative summary")
    save_report: bool = Field(default=False, description="Write a Markdown report to the report directory")


class ClaimSchema(BaseModel):
    """Claim with evidence and confidence."""

    statement: str
    evidence: list[str]
    confidence: float


class PatternSchema(BaseModel):
    """Observed consensus, disagreement or trend."""

    type: str
    description: str


class RelationshipSchema(BaseModel):
    """Relationship between two concepts."""

    concept1: str
    concept2: str
    relationship: str


class ContentAnalysisSchema(BaseModel):
    """Analysis accumulated over the run."""

    claims: list[ClaimSchema] = []
    methodologies: list[str] = []
    patterns: list[PatternSchema] = []
    relationships: list[RelationshipSchema] = []


class SynthesisSchema(BaseModel):
    """Lookup tables folded from the analysis."""

    patterns: dict[str, list[str]] = {}
    consensus: dict[str, int] = {}
    methodologies: list[str] = []
    relationships: dict[str, list[str]] = {}
    confidence_levels: dict[str, float] = {}


class ProgressSchema(BaseModel):
    """Progress counters at the end of the run."""

    total_queries: int
    completed_queries: int
    percentage: int
    current_query: str | None = None


class ResearchResponse(BaseModel):
    """Response from research endpoint."""

    query: str
    strategy: str
    learnings: list[str]
    sources: list[str]
    analysis: ContentAnalysisSchema | None = None
    synthesis: SynthesisSchema | None = None
    models: dict[str, str] = {}
    progress: ProgressSchema
    summary: str | None = None
    report_path: str | None = None
