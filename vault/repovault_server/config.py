"""
Configuration management for RepoVault.

All configuration is done via environment variables with the
``REPOVAULT_`` prefix. Record field bounds are fixed constants in
``registry.validate`` and are not configurable.

Invariants:
    - All settings have sensible defaults for local development
    - The administrative identity is fixed for the lifetime of a registry

How to change safely:
    - Add new settings with defaults that maintain backward compatibility
    - Never make the administrative identity mutable at runtime
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .registry.store import DEFAULT_ADMIN_IDENTITY

logger = logging.getLogger(__name__)


class RegistrySettings(BaseSettings):
    """Registry configuration loaded from environment."""

    admin_identity: str = Field(
        default=DEFAULT_ADMIN_IDENTITY,
        min_length=1,
        description="Identity that can never be the target of a grant",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: Literal["text", "json"] = Field(default="text", description="Log line format")

    model_config = {"env_prefix": "REPOVAULT_"}

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'")
        return level

    def log_config(self) -> None:
        """Log configuration."""
        logger.info(
            "Registry configuration loaded",
            extra={
                "admin_identity": self.admin_identity,
                "log_level": self.log_level,
                "log_format": self.log_format,
            },
        )
