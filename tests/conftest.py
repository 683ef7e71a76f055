"""
Shared pytest configuration for the labnotes test suite.

This file centralizes reusable testing utilities so that:
    • CLI tests share one CliRunner setup
    • JSON fixtures load consistently
    • legacy and modern records are built the same way everywhere
    • no test ever reads the developer's real .env settings

All helpers here are deterministic.
"""

import json
from datetime import timezone
from pathlib import Path
from typing import Any, Dict

import pytest
from typer.testing import CliRunner

from labnotes.types import LegacyRecord, ModernRecord

# ============================================================================
# FIXTURE DIRECTORY
# ============================================================================
FIXTURES_DIR = Path(__file__).parent / "fixtures"

SETTINGS_ENV_VARS = (
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "LEGACY_DATABASE_URL",
    "LABNOTES_NOTEBOOK_TABLE",
    "LABNOTES_UPLOADS_DIR",
    "LABNOTES_AUTHOR_TABLE",
    "LABNOTES_TIMEZONE",
    "LABNOTES_API_BASE_URL",
)


# ============================================================================
# SHARED TEST INFRASTRUCTURE
# ============================================================================


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch):
    """
    Remove every labnotes setting from the environment.

    labnotes.config calls load_dotenv() at import, so a developer's .env
    would otherwise leak into the tests.
    """
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # UTC keeps expected display strings obvious in assertions.
    monkeypatch.setenv("LABNOTES_TIMEZONE", "UTC")


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provides a fresh Typer CliRunner instance for CLI tests."""
    return CliRunner()


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture
def load_json_fixture():
    """Load a JSON fixture from tests/fixtures/."""

    def _loader(name: str) -> Any:
        path = FIXTURES_DIR / name
        return json.loads(path.read_text(encoding="utf-8"))

    return _loader


# ============================================================================
# RECORD FACTORIES
# ============================================================================


@pytest.fixture
def make_legacy():
    """
    Build a LegacyRecord with sensible defaults; keyword arguments override.
    """

    def _factory(**overrides: Any) -> LegacyRecord:
        record: Dict[str, Any] = {
            "kind": "legacy",
            "specimen_number": "2024010001",
            "notes": "Legacy note",
            "created_at": "2023-01-05T09:00:00+00:00",
            "last_modified_at": "2023-01-05T09:30:00+00:00",
            "author_id": "222",
        }
        record.update(overrides)
        return record  # type: ignore[return-value]

    return _factory


@pytest.fixture
def make_modern():
    """
    Build a ModernRecord with sensible defaults; keyword arguments override.
    """

    def _factory(**overrides: Any) -> ModernRecord:
        record: Dict[str, Any] = {
            "kind": "modern",
            "specimen_number": "2024010001",
            "notes": "Recheck",
            "created_at": "2024-03-01T10:00:00+00:00",
            "modified_at": "2024-03-01T10:00:00+00:00",
            "author_name": "jdoe",
            "attachment_path": None,
        }
        record.update(overrides)
        return record  # type: ignore[return-value]

    return _factory
