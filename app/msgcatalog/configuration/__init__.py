"""Configuration module - public API.

Centralized configuration for msgcatalog using Pydantic BaseSettings with
component-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)
    CatalogSettings: Catalog lifecycle and lookup settings
    ScannerSettings: Source scanning settings
    get_settings: Process-wide cached Settings instance

Example:
    ```python
    from msgcatalog.configuration import get_settings

    settings = get_settings()
    catalog_dir = settings.catalog.catalog_dir
    ```
"""

from functools import lru_cache

from msgcatalog.configuration.catalog import CatalogSettings
from msgcatalog.configuration.scanner import ScannerSettings
from msgcatalog.configuration.settings import Settings


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings singleton.

    The @lru_cache decorator ensures only ONE instance is created per process.
    Tests that change the environment call `get_settings.cache_clear()`.

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


__all__ = ["Settings", "CatalogSettings", "ScannerSettings", "get_settings"]
