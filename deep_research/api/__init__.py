"""API routes and schemas."""

from .routes import router
from .schemas import (
    ResearchRequest,
    ResearchResponse,
    HealthResponse,
)

__all__ = [
    "router",
    "ResearchRequest",
    "ResearchResponse",
    "HealthResponse",
]
