"""msgcatalog configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from msgcatalog.configuration.catalog import CatalogSettings
from msgcatalog.configuration.scanner import ScannerSettings


class Settings(BaseSettings):
    """msgcatalog configuration settings - main aggregator.

    Aggregates the component settings into a single configuration object:

    - **catalog**: catalog files, merge policy and runtime lookups
    - **scanner**: source tree scanning

    Environment Variables:
        ENVIRONMENT: Deployment environment ("production" enables JSON logs)
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        ```python
        from msgcatalog.configuration import get_settings

        settings = get_settings()

        catalog_dir = settings.catalog.catalog_dir
        workers = settings.scanner.max_workers

        if settings.is_production:
            # Production-specific logic...
        ```
    """

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    catalog: CatalogSettings
    scanner: ScannerSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if ENVIRONMENT is "production", False otherwise.
        """
        return self.ENVIRONMENT.lower() == "production"

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            "catalog": CatalogSettings,
            "scanner": ScannerSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )
