"""Stdio MCP server for deep research.

Exposes the research engine as a Model Context Protocol tool over stdio.

Usage:
    python -m deep_research.mcp_server

Claude Desktop config:
    {
        "mcpServers": {
            "deep-research": {
                "command": "python",
                "args": ["-m", "deep_research.mcp_server"],
                "cwd": "/path/to/deep/research"
            }
        }
    }
"""

import asyncio
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .config import settings
from .engine import ResearchEngine
from .errors import ConfigurationError
from .models import AnalysisOptions, ResearchConfig, StrategyKind
from .processing import ResearchProviders
from .report import render_report

logger = logging.getLogger(__name__)

# Initialize MCP server
server = Server("deep-research")


def _get_providers() -> ResearchProviders:
    """Build search and LLM collaborators from settings."""
    return ResearchProviders.from_settings()


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available research tools."""
    return [
        Tool(
            name="deep_research",
            description="""Iterative deep research on a topic. Generates search queries, reads the results, extracts learnings and follows up on them breadth x depth times, then writes a Markdown report with a narrative summary, key learnings and sources.

Use 'linear' to follow each initial query down a chain of follow-up questions. Use 'best_first' to let relevance scores decide which follow-up to explore next.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Research topic or question"},
                    "breadth": {
                        "type": "integer",
                        "minimum": 1,
                        "maximum": 10,
                        "default": settings.default_breadth,
                        "description": "Queries explored per level",
                    },
                    "depth": {
                        "type": "integer",
                        "minimum": 1,
                        "maximum": 5,
                        "default": settings.default_depth,
                        "description": "Levels of follow-up research",
                    },
                    "strategy": {
                        "type": "string",
                        "enum": [kind.value for kind in StrategyKind],
                        "default": StrategyKind.LINEAR.value,
                    },
                    "analysis_depth": {
                        "type": "string",
                        "enum": ["basic", "detailed"],
                        "default": "basic",
                    },
                },
                "required": ["query"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Execute a research tool."""
    if name == "deep_research":
        return await _tool_deep_research(arguments)
    return [TextContent(type="text", text=f"Unknown tool: {name}")]


async def _tool_deep_research(args: dict) -> list[TextContent]:
    """Run a research task and return its report."""
    query = args["query"]
    breadth = int(args.get("breadth", settings.default_breadth))
    depth = int(args.get("depth", settings.default_depth))

    try:
        providers = _get_providers()
        config = ResearchConfig(
            query=query,
            breadth=breadth,
            depth=depth,
            strategy=StrategyKind(args.get("strategy", StrategyKind.LINEAR.value)),
            analysis=AnalysisOptions(depth=args.get("analysis_depth", "basic")),
        )
        engine = ResearchEngine(config, collaborators=providers)
    except (ConfigurationError, ValueError) as e:
        return [TextContent(type="text", text=f"Invalid research request: {e}")]

    result = await engine.research()
    summary = await providers.generate_summary(query, result.learnings, result.analysis)

    return [TextContent(type="text", text=render_report(query, breadth, depth, result, summary))]


async def main():
    """Run the MCP server with stdio transport."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def run():
    """Console entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
