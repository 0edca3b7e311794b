"""
RepoVault - process setup.

Builds a registry and its host service from environment configuration and
configures logging. Durable persistence is the host's concern; a registry
built here lives for the lifetime of the process.

Usage:
    from vault.repovault_server.main import bootstrap
    service = bootstrap()

Configuration is entirely via environment variables.
See config.py for all available settings.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import json_log_formatter

from .config import RegistrySettings
from .registry.store import RepositoryRegistry
from .service import RegistryService

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: RegistrySettings) -> None:
    """Configure root logging based on settings.

    Args:
        settings: Registry settings
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if settings.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]


def bootstrap(
    settings: Optional[RegistrySettings] = None,
    clock: Optional[Callable[[], int]] = None,
    configure_logging: bool = True,
) -> RegistryService:
    """Create a fresh registry wrapped in a RegistryService.

    Args:
        settings: Optional settings (loaded from env if not provided)
        clock: Optional logical clock (a LogicalClock by default)
        configure_logging: Whether to install the root log handler

    Returns:
        The host service
    """
    settings = settings or RegistrySettings()
    if configure_logging:
        setup_logging(settings)
    settings.log_config()

    registry = RepositoryRegistry(admin_identity=settings.admin_identity)
    logger.info("RepoVault registry initialized")
    return RegistryService(registry, clock=clock)
