"""
Configuration settings for the skills-wallet service.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

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

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///./skills_wallet.db",
        description="SQLAlchemy connection string (PostgreSQL in production)",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )
    log_rotation: str = Field(
        default="10 MB",
        description="Rotation policy for the log file sink",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8200,
        description="API server port",
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # ========================================
    # Skills
    # ========================================
    default_skill_icon: str = Field(
        default="📚",
        description="Icon assigned to new skills when none is given",
    )
    default_skill_color: str = Field(
        default="blue",
        description="Color assigned to new skills when none is given",
    )
    prune_orphans_on_catalog_edit: bool = Field(
        default=True,
        description="Prune ledger records of deleted content items after a catalog edit",
    )

    def get_cors_origins(self) -> list[str]:
        """Split the configured CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def get_skills_config(self) -> dict[str, object]:
        """Get skills configuration as a dictionary."""
        return {
            "default_icon": self.default_skill_icon,
            "default_color": self.default_skill_color,
            "prune_orphans_on_catalog_edit": self.prune_orphans_on_catalog_edit,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
