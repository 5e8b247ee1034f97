"""Shared fixtures for the msgcatalog test suite."""

import pytest
import structlog

from msgcatalog.configuration import get_settings

# Environment variables read by the settings classes
SETTINGS_ENV_VARS = (
    "ENVIRONMENT",
    "LOG_LEVEL",
    "CATALOG_DIR",
    "CATALOG_DEFAULT_DOMAIN",
    "CATALOG_USE_FUZZY",
    "CATALOG_TRACK_MISSES",
    "CATALOG_OBSOLETE_RETENTION_MERGES",
    "CATALOG_FUZZY_MATCHING",
    "CATALOG_FUZZY_CUTOFF",
    "CATALOG_PLURAL_FORMS",
    "SCANNER_EXTENSIONS",
    "SCANNER_EXCLUDE_DIRS",
    "SCANNER_COMMENT_TAGS",
    "SCANNER_MAX_FILE_BYTES",
    "SCANNER_FILE_TIMEOUT_SECONDS",
    "SCANNER_MAX_WORKERS",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test with default settings and no .env file."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_log_context():
    """Ensure no logging context leaks between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
