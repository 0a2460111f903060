"""Tests for Settings path methods and logging setup."""

import logging
from pathlib import Path

from clinote.settings import Settings, settings
from clinote.utils.logging import get_logger, setup_logging


class TestSettingsWorkspacePaths:
    """Workspace root paths."""

    def test_workspace_root_local_dev(self):
        """local-dev environment returns the project-local workspace."""
        root = Settings(environment="local-dev").get_workspace_root()
        assert root.name == "clinote-workspace"
        assert root.parent == Settings.get_project_root()

    def test_workspace_root_production(self):
        """Other environments use /app."""
        assert Settings(environment="production").get_workspace_root() == Path("/app")

    def test_uploads_and_logs_roots(self):
        """uploads and logs live under the workspace root."""
        assert settings.get_uploads_root().name == "uploads"
        assert settings.get_uploads_root().parent == settings.get_workspace_root()
        assert settings.get_logs_root().parent == settings.get_workspace_root()

    def test_absolute_subdir(self, tmp_path):
        """Absolute subdirectories are used as-is."""
        custom = Settings(uploads_subdir=str(tmp_path))
        assert custom.get_uploads_root() == tmp_path

    def test_env_override(self, monkeypatch):
        """CLINOTE_ environment variables override defaults."""
        monkeypatch.setenv("CLINOTE_STORAGE_TYPE", "redis")
        monkeypatch.setenv("CLINOTE_MAX_CONCURRENT_IMPORTS", "2")

        custom = Settings()

        assert custom.storage_type == "redis"
        assert custom.max_concurrent_imports == 2


class TestLogging:
    """Logger namespace and file output."""

    def test_get_logger_namespaces(self):
        assert get_logger("tests.module").name == "clinote.tests.module"
        assert get_logger("clinote.store").name == "clinote.store"

    def test_setup_logging_writes_file(self, tmp_path):
        """setup_logging adds a rotating file handler under the given directory."""
        logger = setup_logging("unit-test", log_dir=tmp_path)
        logger.warning("written to file")

        root = logging.getLogger("clinote")
        for handler in root.handlers:
            handler.flush()
        assert "written to file" in (tmp_path / "unit-test.log").read_text()

        for handler in list(root.handlers):
            if getattr(handler, "baseFilename", None) == str(tmp_path / "unit-test.log"):
                root.removeHandler(handler)
                handler.close()
