"""Shared fixtures."""

import shutil
from pathlib import Path

import pytest

SAMPLE_SITES = Path(__file__).parent.parent / "data" / "sites.yaml"

ENV_VARS = (
    "GUARD_SITES_FILE",
    "GUARD_TEMPLATES_FILE",
    "GUARD_API_MODE",
    "GUARD_API_BASE_URL",
    "GUARD_API_TIMEOUT",
    "GUARD_LOG_LEVEL",
    "SECRET_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without GUARD_* settings and undo anything load_dotenv sets."""
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def sample_file(tmp_path):
    """Writable copy of the bundled sample sites file."""
    path = tmp_path / "sites.yaml"
    shutil.copy(SAMPLE_SITES, path)
    return path
