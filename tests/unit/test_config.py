"""
Unit tests for configuration and process setup.
"""

import io
import json
import logging

import json_log_formatter
import pytest
from pydantic import ValidationError

from vault.repovault_server.config import RegistrySettings
from vault.repovault_server.errors import InvalidUser
from vault.repovault_server.main import bootstrap, setup_logging
from vault.repovault_server.registry.store import RepositoryRegistry
from vault.repovault_server.service import RegistryService


class TestRegistrySettings:
    """Tests for RegistrySettings."""

    def test_defaults(self, monkeypatch):
        """Defaults apply without environment."""
        monkeypatch.delenv("REPOVAULT_ADMIN_IDENTITY", raising=False)
        monkeypatch.delenv("REPOVAULT_LOG_LEVEL", raising=False)
        monkeypatch.delenv("REPOVAULT_LOG_FORMAT", raising=False)
        settings = RegistrySettings()
        assert settings.admin_identity == "system:admin"
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"

    def test_from_env(self, monkeypatch):
        """Environment variables with the prefix are read."""
        monkeypatch.setenv("REPOVAULT_ADMIN_IDENTITY", "system:root")
        monkeypatch.setenv("REPOVAULT_LOG_LEVEL", "debug")
        monkeypatch.setenv("REPOVAULT_LOG_FORMAT", "json")
        settings = RegistrySettings()
        assert settings.admin_identity == "system:root"
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"

    def test_unknown_log_level(self):
        """Unknown levels are rejected."""
        with pytest.raises(ValidationError):
            RegistrySettings(log_level="chatty")

    def test_empty_admin_identity(self):
        """The administrative identity cannot be empty."""
        with pytest.raises(ValidationError):
            RegistrySettings(admin_identity="")


class TestBootstrap:
    """Tests for bootstrap and logging setup."""

    def test_bootstrap_uses_admin_identity(self):
        """The configured identity is excluded from grants."""
        service = bootstrap(RegistrySettings(admin_identity="system:root"), configure_logging=False)
        registry = service.registry
        registry.create("api", 1, "d", ["user:a"], creator="user:a", created_at=1)
        with pytest.raises(InvalidUser):
            registry.grant(1, "system:root", 1, caller="user:a")
        registry.grant(1, "system:admin", 1, caller="user:a")

    def test_setup_logging(self):
        """Root logger gets one handler at the configured level."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging(RegistrySettings(log_level="WARNING", log_format="json"))
            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)

    def test_json_lines_carry_extra_fields(self):
        """JSON log lines parse and include structured fields."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        stream = io.StringIO()
        try:
            setup_logging(RegistrySettings(log_level="DEBUG", log_format="json"))
            root.handlers[0].setStream(stream)

            session = RegistryService(RepositoryRegistry()).session("user:alice")
            session.create_repository("api", 1, "d", ["user:alice"])
            session.get_repository('x"y')
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)

        records = [json.loads(line) for line in stream.getvalue().splitlines()]
        created = [r for r in records if r["message"] == "Repository created"]
        assert created and created[0]["repo_id"] == 1
        rejected = [r for r in records if r.get("error_code") == "INVALID_PROJECT_ID"]
        assert rejected and 'x"y' in rejected[0]["message"]
