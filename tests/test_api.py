"""Tests for FastAPI endpoints."""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

from conftest import FakeCollaborators
from deep_research.errors import ConfigurationError
from deep_research.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def fake_providers(monkeypatch):
    """Collaborators for the research endpoint, with delays disabled."""
    providers = FakeCollaborators(default_score=0.9)
    providers.generate_summary = AsyncMock(return_value="Narrative summary.")
    monkeypatch.setattr("deep_research.config.settings.query_delay", 0.0)
    monkeypatch.setattr("deep_research.config.settings.node_delay", 0.0)
    with patch("deep_research.api.routes._get_providers", return_value=providers):
        yield providers


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    @pytest.mark.unit
    def test_health_returns_200(self, client):
        """Health endpoint returns 200."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200

    @pytest.mark.unit
    def test_health_response_format(self, client):
        """Health response has correct format."""
        data = client.get("/api/v1/health").json()

        assert data["status"] == "healthy"
        assert "search_provider" in data
        assert "search_configured" in data
        assert "llm_configured" in data


class TestRootEndpoint:
    """Tests for root endpoint."""

    @pytest.mark.unit
    def test_root_response_format(self, client):
        """Root response has API info."""
        data = client.get("/").json()

        assert data["name"] == "Deep Research"
        assert data["endpoints"]["research"] == "/api/v1/research"


class TestResearchEndpoint:
    """Tests for research endpoint."""

    @pytest.mark.unit
    def test_research_requires_query(self, client):
        """Research requires query field."""
        response = client.post("/api/v1/research", json={})
        assert response.status_code == 422

    @pytest.mark.unit
    @pytest.mark.parametrize("payload", [
        {"query": "q", "breadth": 0},
        {"query": "q", "breadth": 11},
        {"query": "q", "depth": 6},
        {"query": "q", "strategy": "random"},
    ])
    def test_research_validates_bounds(self, client, payload):
        """Out-of-range parameters are rejected."""
        assert client.post("/api/v1/research", json=payload).status_code == 422

    @pytest.mark.unit
    def test_linear_research(self, client, fake_providers):
        """Linear research returns findings, progress and summary."""
        response = client.post("/api/v1/research", json={"query": "X", "breadth": 2, "depth": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["strategy"] == "linear"
        assert len(data["learnings"]) == 3
        assert data["progress"] == {
            "total_queries": 2,
            "completed_queries": 2,
            "percentage": 100,
            "current_query": "X > q2",
        }
        assert data["summary"] == "Narrative summary."
        assert data["synthesis"]["consensus"] == {"consensus": 2}
        assert data["analysis"]["claims"][0]["confidence"] == 0.9

    @pytest.mark.unit
    def test_best_first_research(self, client, fake_providers):
        """Best-first research reports models and skips summary on request."""
        response = client.post("/api/v1/research", json={
            "query": "X",
            "breadth": 2,
            "depth": 2,
            "strategy": "best_first",
            "include_summary": False,
            "analysis": {"depth": "detailed", "focus_areas": ["claims", "relationships"]},
        })

        assert response.status_code == 200
        data = response.json()
        assert data["summary"] is None
        assert data["models"]["multimodal"]
        assert data["progress"]["completed_queries"] == 4
        assert fake_providers.process_calls[0]["analysis"].depth == "detailed"
        fake_providers.generate_summary.assert_not_awaited()

    @pytest.mark.unit
    def test_configuration_error(self, client):
        """Missing credentials surface as 422."""
        with patch(
            "deep_research.api.routes._get_providers",
            side_effect=ConfigurationError("API key is required"),
        ):
            response = client.post("/api/v1/research", json={"query": "X"})

        assert response.status_code == 422
        assert "API key" in response.json()["detail"]

    @pytest.mark.unit
    def test_save_report(self, client, fake_providers, monkeypatch, tmp_path):
        """Reports are written when requested."""
        monkeypatch.setattr("deep_research.config.settings.report_dir", str(tmp_path))

        response = client.post("/api/v1/research", json={"query": "X", "breadth": 1, "depth": 1, "save_report": True})

        assert response.status_code == 200
        report_path = response.json()["report_path"]
        assert report_path.startswith(str(tmp_path))
