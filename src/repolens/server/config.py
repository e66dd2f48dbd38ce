"""Configuration for the analysis server."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    frontend_url: str = "http://localhost:3000"

    # LLM settings
    llm_provider: str = "openai"
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    llm_model: str = ""
    llm_api_url: str = ""

    # GitHub settings (anonymous access is used when empty)
    github_token: str = ""

    # Checkout / discovery limits
    workspace_dir: str = "temp"
    max_repo_size_mb: int = 100
    max_file_size_bytes: int = 2 * 1024 * 1024
    max_files: int = 200

    # Ask the reviewer model for extra suggestions on each GitHub issue
    issue_ai_suggestions: bool = False

    # Logging
    log_level: str = "INFO"

    @property
    def max_repo_size_bytes(self) -> int:
        """Repository size cap in bytes."""
        return self.max_repo_size_mb * 1024 * 1024

    def get_workspace_path(self) -> Path:
        """Get the directory that holds temporary checkouts."""
        return Path(self.workspace_dir).resolve()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
