"""FastAPI application entry point with MCP server support."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_mcp import FastApiMCP
from .api import router
from .config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Deep Research starting on {settings.host}:{settings.port}")
    logger.info(f"LLM API: {settings.llm_api_base}")
    logger.info(f"Search provider: {settings.search_provider}")
    logger.info(f"MCP Server: http://{settings.host}:{settings.port}/mcp")

    yield

    # Shutdown
    logger.info("Deep Research shutting down")


app = FastAPI(
    title="Deep Research",
    description="Iterative deep research over web search with LLM-guided exploration",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router, prefix="/api/v1", tags=["research"])

# MCP Server - exposes the research endpoint as an MCP tool
mcp = FastApiMCP(
    app,
    name="Deep Research MCP",
    description="Iterative breadth/depth research with structured analysis",
    include_operations=[
        "research_api_v1_research_post",
    ],
)
mcp.mount_http()  # Mounts at /mcp by default


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Deep Research",
        "version": "1.0.0",
        "docs": "/docs",
        "mcp": "/mcp",
        "endpoints": {
            "health": "/api/v1/health",
            "research": "/api/v1/research",
        },
    }


def run():
    """Run the application with uvicorn."""
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "deep_research.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    run()
