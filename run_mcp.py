#!/usr/bin/env python
"""Standalone MCP server runner."""
from deep_research.mcp_server import run

run()
