"""
Configuration management for the compound node service.

This module centralizes environment-driven configuration using Pydantic's
`BaseSettings`. The processor, the manager, the vault adapter and the API all
consume the shared `settings` instance so a build behaves the same whichever
surface starts it.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AnyUrl, Field, PositiveFloat, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    # General application settings
    APP_TITLE: str = "Compound Nodes"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = Field("development", pattern=r"^(development|staging|production)$")
    LOG_LEVEL: str = "INFO"

    # Note metadata
    PARENT_FIELD: str = "parent"
    MARKDOWN_SUFFIXES: str = ".md"
    VAULT_PATH: Optional[Path] = None

    # Classes applied to graph elements
    PARENT_NODE_CLASS: str = "parent-node"
    PLACEHOLDER_CLASS: str = "placeholder-node"
    STRUCTURAL_EDGE_CLASS: str = "structural-parent-edge"

    # Host readiness
    READINESS_TIMEOUT_SECONDS: PositiveFloat = 10.0
    READINESS_POLL_INTERVAL_SECONDS: PositiveFloat = 0.1

    # Incremental updates
    REBUILD_ON_CHANGE: bool = True

    # Monitoring / tracing
    ENABLE_TRACING: bool = False
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[AnyUrl] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @field_validator("LOG_LEVEL")
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'")
        return level

    @property
    def markdown_suffixes(self) -> List[str]:
        suffixes = [item.strip().lower() for item in self.MARKDOWN_SUFFIXES.split(",") if item.strip()]
        return [item if item.startswith(".") else f".{item}" for item in suffixes]

    def is_markdown(self, path: str) -> bool:
        return any(path.lower().endswith(suffix) for suffix in self.markdown_suffixes)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()


# Singleton-style settings instance for modules that prefer direct access.
settings = get_settings()
