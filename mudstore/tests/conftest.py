"""
Test configuration and fixtures for the mudstore test suite.

Every test runs with storage and logging environment variables cleared and
inside its own temporary working directory, so neither the developer's shell
nor a stray .env file can point a test at real data.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from mudstore.config import reset_config
from mudstore.config.models import StorageConfig
from mudstore.migration.orchestrator import MigrationOrchestrator
from mudstore.persistence.backend_kind import BackendKind
from mudstore.structured_logging.enhanced_logging_config import _logging_state
from mudstore.tests.fixtures.sample_documents import sample_files, write_sample_files

ENV_PREFIXES = ("STORAGE_", "LOGGING_")
ENV_NAMES = ("DATABASE_URL",)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Clear mudstore environment variables and run from an empty directory."""
    for name in list(os.environ):
        if name.upper().startswith(ENV_PREFIXES) or name.upper() in ENV_NAMES:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def reset_logging_handlers() -> Generator[None, None, None]:
    """Drop handlers bound to streams that a CliRunner closes after each invoke."""
    yield
    root_logger = logging.getLogger()
    for handler in _logging_state.handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _logging_state.handlers = []
    _logging_state.initialized = False
    _logging_state.signature = None


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """An empty JSON data directory."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def populated_data_dir(data_dir: Path) -> Path:
    """A data directory holding every sample collection file."""
    return write_sample_files(data_dir)


@pytest.fixture
def sample_payloads() -> dict[str, Any]:
    """The sample file payloads, keyed by file name."""
    return sample_files()


@pytest.fixture
def storage_settings(tmp_path: Path, data_dir: Path) -> StorageConfig:
    """Storage settings rooted in the temporary directory, with no database URL."""
    return StorageConfig(data_dir=data_dir, backup_dir=tmp_path / "backups")


@pytest.fixture
def networked_settings(tmp_path: Path, storage_settings: StorageConfig) -> StorageConfig:
    """
    Storage settings whose networked backend is a second SQLite file.

    The networked backend goes through the same relational store as
    PostgreSQL; only the URL differs.
    """
    return storage_settings.with_overrides(database_url=f"sqlite:///{tmp_path / 'networked.db'}")


@pytest.fixture
def make_orchestrator(storage_settings: StorageConfig):
    """Factory building an orchestrator for a given current backend."""

    def _make(current: BackendKind = BackendKind.DOCUMENTS, settings: StorageConfig | None = None):
        return MigrationOrchestrator(settings or storage_settings, current)

    return _make
