"""Unit tests for msgcatalog configuration settings."""

import pytest
from pydantic import ValidationError

from msgcatalog.configuration import (
    CatalogSettings,
    ScannerSettings,
    Settings,
    get_settings,
)


@pytest.mark.unit
class TestCatalogSettings:
    """Test CatalogSettings configuration."""

    def test_default_values(self):
        """Test CatalogSettings with default values."""
        settings = CatalogSettings()

        assert settings.catalog_dir == "locales"
        assert settings.default_domain == "messages"
        assert settings.use_fuzzy is True
        assert settings.track_misses is True
        assert settings.obsolete_retention_merges is None
        assert settings.fuzzy_matching is False
        assert settings.fuzzy_cutoff == 0.8
        assert settings.plural_forms == {}

    def test_environment_overrides(self, monkeypatch):
        """Test CatalogSettings read from environment variables."""
        monkeypatch.setenv("CATALOG_DIR", "/srv/locales")
        monkeypatch.setenv("CATALOG_DEFAULT_DOMAIN", "web")
        monkeypatch.setenv("CATALOG_USE_FUZZY", "false")
        monkeypatch.setenv("CATALOG_OBSOLETE_RETENTION_MERGES", "3")

        settings = CatalogSettings()

        assert settings.catalog_dir == "/srv/locales"
        assert settings.default_domain == "web"
        assert settings.use_fuzzy is False
        assert settings.obsolete_retention_merges == 3

    def test_plural_forms_from_json(self, monkeypatch):
        """CATALOG_PLURAL_FORMS is parsed from JSON."""
        monkeypatch.setenv(
            "CATALOG_PLURAL_FORMS", '{"fr": "nplurals=2; plural=(n > 1);"}'
        )

        settings = CatalogSettings()

        assert settings.plural_forms == {"fr": "nplurals=2; plural=(n > 1);"}

    def test_plural_forms_invalid_json(self):
        """Invalid JSON for CATALOG_PLURAL_FORMS is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            CatalogSettings(CATALOG_PLURAL_FORMS="{not json")
        assert "Invalid CATALOG_PLURAL_FORMS JSON" in str(exc_info.value)

    def test_plural_forms_empty_string(self):
        """An empty CATALOG_PLURAL_FORMS means no overrides."""
        assert CatalogSettings(CATALOG_PLURAL_FORMS="  ").plural_forms == {}

    @pytest.mark.parametrize(
        "name,value",
        [
            ("CATALOG_OBSOLETE_RETENTION_MERGES", 0),
            ("CATALOG_FUZZY_CUTOFF", 1.5),
        ],
    )
    def test_out_of_range_values(self, name, value):
        """Bounded numeric settings are validated."""
        with pytest.raises(ValidationError):
            CatalogSettings(**{name: value})


@pytest.mark.unit
class TestScannerSettings:
    """Test ScannerSettings configuration."""

    def test_default_values(self):
        """Test ScannerSettings with default values."""
        settings = ScannerSettings()

        assert settings.extensions == [".py"]
        assert "node_modules" in settings.exclude_dirs
        assert settings.comment_tags == ["TRANSLATORS:"]
        assert settings.max_file_bytes == 1024 * 1024
        assert settings.file_timeout_seconds == 10.0
        assert settings.max_workers == 4

    def test_list_values_from_json(self, monkeypatch):
        """List settings are read as JSON arrays."""
        monkeypatch.setenv("SCANNER_EXTENSIONS", '[".py", ".pyi"]')
        monkeypatch.setenv("SCANNER_MAX_WORKERS", "8")

        settings = ScannerSettings()

        assert settings.extensions == [".py", ".pyi"]
        assert settings.max_workers == 8

    def test_zero_workers_rejected(self):
        """At least one worker is required."""
        with pytest.raises(ValidationError):
            ScannerSettings(SCANNER_MAX_WORKERS=0)


@pytest.mark.unit
class TestSettings:
    """Test the Settings aggregator."""

    def test_subsettings_are_created(self):
        """Missing sections are instantiated automatically."""
        settings = Settings()

        assert isinstance(settings.catalog, CatalogSettings)
        assert isinstance(settings.scanner, ScannerSettings)
        assert settings.ENVIRONMENT == "development"
        assert settings.LOG_LEVEL == "INFO"

    def test_explicit_section_is_kept(self):
        """A section passed in is used as given."""
        catalog = CatalogSettings(CATALOG_DIR="custom")
        assert Settings(catalog=catalog).catalog is catalog

    @pytest.mark.parametrize(
        "environment,expected",
        [("production", True), ("PRODUCTION", True), ("development", False)],
    )
    def test_is_production(self, monkeypatch, environment, expected):
        """is_production follows ENVIRONMENT, case-insensitively."""
        monkeypatch.setenv("ENVIRONMENT", environment)
        assert Settings().is_production is expected

    def test_dotenv_file_is_read(self, tmp_path):
        """Values from a .env file in the working directory are loaded."""
        (tmp_path / ".env").write_text("CATALOG_DEFAULT_DOMAIN=web\n", encoding="utf-8")
        assert Settings().catalog.default_domain == "web"


@pytest.mark.unit
class TestGetSettings:
    """Test the cached settings accessor."""

    def test_returns_same_instance(self):
        """get_settings is a process-wide singleton."""
        assert get_settings() is get_settings()

    def test_cache_clear_rereads_environment(self, monkeypatch):
        """Clearing the cache picks up environment changes."""
        first = get_settings()
        monkeypatch.setenv("CATALOG_DIR", "elsewhere")
        get_settings.cache_clear()

        second = get_settings()

        assert second is not first
        assert second.catalog.catalog_dir == "elsewhere"
