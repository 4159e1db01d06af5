"""FastAPI routes for deep research."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from .schemas import (
    ContentAnalysisSchema,
    HealthResponse,
    ProgressSchema,
    ResearchRequest,
    ResearchResponse,
    SynthesisSchema,
)
from ..config import settings
from ..engine import ResearchEngine
from ..errors import ConfigurationError
from ..exploration import progress_percentage
from ..models import AnalysisOptions, ResearchConfig, StrategyKind, Synthesis
from ..processing import ResearchProviders
from ..report import write_report

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_providers() -> ResearchProviders:
    """Build search and LLM collaborators from settings."""
    return ResearchProviders.from_settings()


def _synthesis_schema(synthesis: Synthesis) -> SynthesisSchema:
    return SynthesisSchema(
        patterns=synthesis.patterns,
        consensus=synthesis.consensus,
        methodologies=sorted(synthesis.methodologies),
        relationships={k: sorted(v) for k, v in synthesis.relationships.items()},
        confidence_levels=synthesis.confidence_levels,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Check service health and configuration."""
    provider = settings.search_provider.lower()
    if provider == "searxng":
        search_configured = bool(settings.searxng_host)
    else:
        search_configured = bool(settings.brave_api_key)

    return HealthResponse(
        status="healthy",
        search_provider=provider,
        search_configured=search_configured,
        llm_configured=bool(settings.llm_api_key),
    )


@router.post("/research", response_model=ResearchResponse)
async def research(request: ResearchRequest):
    """
    Run iterative deep research on a query.

    Explores follow-up queries breadth x depth, extracting learnings,
    sources and structured analysis, then optionally summarizes them.
    """
    try:
        providers = _get_providers()
        analysis = None
        if request.analysis is not None:
            analysis = AnalysisOptions(
                focus_areas=tuple(request.analysis.focus_areas),
                depth=request.analysis.depth,
            )
        config = ResearchConfig(
            query=request.query,
            breadth=request.breadth,
            depth=request.depth,
            analysis=analysis,
            strategy=StrategyKind(request.strategy),
            concurrent_chains=request.concurrent_chains,
        )
        engine = ResearchEngine(config, collaborators=providers)
        result = await engine.research()
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    summary = None
    if request.include_summary:
        summary = await providers.generate_summary(request.query, result.learnings, result.analysis)

    report_path = None
    if request.save_report:
        path = write_report(
            request.query, request.breadth, request.depth, result, summary or ""
        )
        report_path = str(path)

    progress = engine.progress
    return ResearchResponse(
        query=request.query,
        strategy=config.strategy.value,
        learnings=result.learnings,
        sources=result.sources,
        analysis=ContentAnalysisSchema(**asdict(result.analysis)) if result.analysis else None,
        synthesis=_synthesis_schema(result.synthesis) if result.synthesis else None,
        models=result.models,
        progress=ProgressSchema(
            total_queries=progress.total_queries,
            completed_queries=progress.completed_queries,
            percentage=progress_percentage(progress.completed_queries, progress.total_queries),
            current_query=progress.current_query,
        ),
        summary=summary,
        report_path=report_path,
    )
