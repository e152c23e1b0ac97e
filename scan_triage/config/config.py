"""
Application configuration with environment-based settings.
All configuration is explicit, validated, and logged at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path(__file__).parent.parent.parent / "data"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development but require
    explicit configuration in production environments.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    # Application
    app_name: str = Field(default="Scan Triage Dashboard", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, description="Server port")

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    # Seed data
    data_dir: Path = Field(default=DEFAULT_DATA_DIR, description="Directory holding seed JSON files")
    scans_file: str = Field(default="scans.json", description="Scan records seed file")
    priority_rules_file: str = Field(
        default="priority_rules.json",
        description="Keyword priority rules seed file"
    )
    ai_analysis_file: str = Field(
        default="ai_analysis.json",
        description="Per-scan AI findings lookup table"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format"
    )

    @property
    def scans_path(self) -> Path:
        return self.data_dir / self.scans_file

    @property
    def priority_rules_path(self) -> Path:
        return self.data_dir / self.priority_rules_file

    @property
    def ai_analysis_path(self) -> Path:
        return self.data_dir / self.ai_analysis_file

    def get_safe_config_dict(self) -> dict:
        """Return configuration dict suitable for logging."""
        config = self.model_dump()
        config["data_dir"] = str(self.data_dir)
        return config


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for the application lifetime.
    Use dependency injection in FastAPI routes for testability.
    """
    return Settings()
