"""
Test suite for verifying project dependencies and requirements.

This module tests that all required dependencies are properly installed
and accessible for the Mentor Desk service.
"""

import sys

import pytest


class TestDependencies:
    """Test that all required dependencies are installed."""

    # Core Python dependencies
    def test_python_version(self):
        """Test Python version is 3.11+."""
        major, minor = sys.version_info[:2]
        assert major == 3 and minor >= 11, f"Python 3.11+ required, got {major}.{minor}"

    # FastAPI and web framework
    def test_fastapi_installed(self):
        """Test FastAPI is installed."""
        import fastapi
        assert fastapi.__version__ is not None

    def test_uvicorn_installed(self):
        """Test uvicorn is installed."""
        import uvicorn
        assert uvicorn.__version__ is not None

    # SQLAlchemy and database
    def test_sqlalchemy_installed(self):
        """Test SQLAlchemy is installed."""
        import sqlalchemy
        assert sqlalchemy.__version__ is not None

    def test_aiosqlite_installed(self):
        """Test the async SQLite driver is installed."""
        import aiosqlite
        assert aiosqlite is not None

    # LangChain and LangGraph
    def test_langchain_installed(self):
        """Test LangChain is installed."""
        from langchain_core import messages
        assert messages is not None

    def test_langchain_openai_installed(self):
        """Test the OpenAI-compatible chat model is installed."""
        from langchain_openai import ChatOpenAI
        assert ChatOpenAI is not None

    def test_langgraph_installed(self):
        """Test LangGraph is installed."""
        from langgraph.graph import StateGraph
        assert StateGraph is not None

    def test_langsmith_installed(self):
        """Test LangSmith is installed."""
        import langsmith
        assert langsmith is not None

    # Utilities
    def test_pydantic_installed(self):
        """Test Pydantic is installed."""
        import pydantic
        assert pydantic.__version__ is not None

    def test_pydantic_settings_installed(self):
        """Test pydantic-settings is installed."""
        import pydantic_settings
        assert pydantic_settings is not None

    def test_python_dotenv_installed(self):
        """Test python-dotenv is installed."""
        import dotenv
        assert dotenv is not None

    def test_httpx_installed(self):
        """Test httpx is installed."""
        import httpx
        assert httpx.__version__ is not None


class TestProjectStructure:
    """Test that required project directories and files exist."""

    def test_backend_structure(self):
        """Test backend package layout."""
        from pathlib import Path

        package_path = Path(__file__).parent.parent / "mentor_desk"
        required_dirs = [
            package_path / "agents",
            package_path / "agents" / "mentor" / "tools",
            package_path / "api",
            package_path / "core",
            package_path / "db",
            package_path / "memory",
            package_path / "messaging",
            package_path / "resources" / "data",
        ]

        for dir_path in required_dirs:
            assert dir_path.exists(), f"Required directory not found: {dir_path}"

    def test_catalog_files_exist(self):
        """Test the bundled catalogs ship with the package."""
        from pathlib import Path

        data_path = Path(__file__).parent.parent / "mentor_desk" / "resources" / "data"
        assert (data_path / "video_catalog.md").exists(), "Video catalog not found"
        assert (data_path / "research_topics.md").exists(), "Research topics not found"


class TestConfiguration:
    """Test application configuration."""

    def test_config_module_exists(self):
        """Test config module can be imported."""
        from mentor_desk.core import config
        assert config is not None

    def test_config_has_required_settings(self):
        """Test config has required settings."""
        from mentor_desk.core.config import settings

        required_attrs = [
            "DATABASE_URL",
            "LLM_BASE_URL",
            "LLM_MODEL",
            "AGENT_MAX_TOOL_ITERATIONS",
            "PHASE1_TARGET_DAYS",
            "PHASE2_TARGET_DAYS",
        ]

        for attr in required_attrs:
            assert hasattr(settings, attr), f"Config missing: {attr}"

    def test_settings_read_environment(self, monkeypatch):
        """Test settings are re-read on every call."""
        from mentor_desk.core.config import get_settings

        monkeypatch.setenv("AGENT_MAX_TOOL_ITERATIONS", "3")
        assert get_settings().AGENT_MAX_TOOL_ITERATIONS == 3

    @pytest.mark.parametrize(
        "origins,expected",
        [
            ("http://localhost:3000", ["http://localhost:3000"]),
            ("http://a.test, http://b.test", ["http://a.test", "http://b.test"]),
        ],
    )
    def test_cors_origins_list(self, monkeypatch, origins, expected):
        """Test comma-separated CORS origins are split."""
        from mentor_desk.core.config import get_settings

        monkeypatch.setenv("CORS_ORIGINS", origins)
        assert get_settings().cors_origins_list == expected


@pytest.mark.asyncio
class TestApplication:
    """Test application-level routes."""

    async def test_health(self, async_client):
        """Test the health check."""
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_root(self, async_client):
        """Test the root endpoint links to the docs."""
        response = await async_client.get("/")
        assert response.json()["docs"] == "/docs"
