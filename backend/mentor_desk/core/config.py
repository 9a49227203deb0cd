"""Configuration settings for Mentor Desk."""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "mentor_desk"
    APP_ENV: str = "development"
    DEBUG: bool = True

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./data/mentor_desk.db",
        description="Async SQLAlchemy URL for students, messages, memory and roadmaps",
    )

    # Database Pool Settings (ignored for SQLite)
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30

    # OpenAI-compatible LLM (LM Studio, Ollama proxy, cloud providers, etc.)
    LLM_BASE_URL: str = "http://127.0.0.1:1234/v1"
    LLM_API_KEY: str = Field(default="", description="API key for OpenAI-compatible LLM backend")
    LLM_MODEL: str = "gpt-4o"
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 4096
    ROADMAP_LLM_MAX_TOKENS: int = 16000
    FOLLOWUP_LLM_MAX_TOKENS: int = 500

    # Agent
    AGENT_MAX_TOOL_ITERATIONS: int = 5
    SHORT_TERM_MESSAGE_LIMIT: int = 20

    # Program timeline (days)
    PHASE1_TARGET_DAYS: int = 45
    PHASE2_TARGET_DAYS: int = 75
    PROGRAM_TOTAL_DAYS: int = 120

    # LangSmith tracing
    LANGSMITH_TRACING: bool = False
    LANGSMITH_API_KEY: str = Field(default="", description="LangSmith API key")
    LANGSMITH_ENDPOINT: str = "https://api.smith.langchain.com"
    LANGSMITH_PROJECT: str = "mentor-desk"
    LANGSMITH_WORKSPACE_ID: str = Field(default="", description="Optional LangSmith workspace ID")

    # CORS - Accept comma-separated string from .env
    CORS_ORIGINS: str = "http://localhost:3000"
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_HEADERS: str = "*"

    # Resources (video curriculum and research topic catalogs)
    RESOURCES_DIR: str = Field(
        default="",
        description="Directory holding video_catalog.md and research_topics.md; bundled files when empty",
    )

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert CORS_ORIGINS string to a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def cors_allow_headers_list(self) -> List[str]:
        """Convert CORS_ALLOW_HEADERS string to a list.

        Note: "*" is not valid for allow_headers when credentials are enabled.
        We return a list of common headers instead.
        """
        if self.CORS_ALLOW_HEADERS == "*":
            return [
                "accept",
                "accept-language",
                "content-language",
                "content-type",
                "authorization",
                "x-requested-with",
            ]
        return [header.strip() for header in self.CORS_ALLOW_HEADERS.split(",")]

    @property
    def is_sqlite(self) -> bool:
        """True when DATABASE_URL points at SQLite."""
        return self.DATABASE_URL.startswith("sqlite")


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()


# For convenience - create fresh instance each time to avoid caching issues
settings = get_settings()
