"""Factory functions for creating i18n components.

Provides convenience functions for building scanners, mergers and
translators from the application settings.
"""

from pathlib import Path
from typing import Optional, Union

from msgcatalog.configuration import Settings, get_settings
from msgcatalog.i18n.loader import POCatalogLoader
from msgcatalog.i18n.merger import LocaleMerger
from msgcatalog.i18n.scanner import SourceScanner
from msgcatalog.i18n.store import CatalogStore
from msgcatalog.i18n.translator import Translator
from msgcatalog.logging import get_module_logger

logger = get_module_logger()


def create_scanner(settings: Optional[Settings] = None) -> SourceScanner:
    """Create a SourceScanner configured from settings."""
    scanner_settings = (settings or get_settings()).scanner
    return SourceScanner(
        extensions=scanner_settings.extensions,
        exclude_dirs=scanner_settings.exclude_dirs,
        comment_tags=scanner_settings.comment_tags,
        max_file_bytes=scanner_settings.max_file_bytes,
        file_timeout=scanner_settings.file_timeout_seconds,
        max_workers=scanner_settings.max_workers,
    )


def create_merger(settings: Optional[Settings] = None) -> LocaleMerger:
    """Create a LocaleMerger configured from settings."""
    catalog_settings = (settings or get_settings()).catalog
    return LocaleMerger(
        fuzzy_matching=catalog_settings.fuzzy_matching,
        fuzzy_cutoff=catalog_settings.fuzzy_cutoff,
    )


def create_translator(
    catalog_dir: Optional[Union[str, Path]] = None,
    settings: Optional[Settings] = None,
    preload: bool = True,
) -> Translator:
    """Create and configure a Translator instance.

    Args:
        catalog_dir: Directory of catalog files (default: settings.catalog.catalog_dir)
        settings: Optional Settings instance (default: get_settings())
        preload: Whether to load every catalog immediately (default: True)

    Returns:
        Translator: Configured translator instance

    Usage:
        # Use configured catalog directory, preload all
        translator = create_translator()

        # Custom directory, load later
        translator = create_translator(catalog_dir="/srv/locales", preload=False)
        translator.reload()
    """
    catalog_settings = (settings or get_settings()).catalog
    catalog_dir = Path(catalog_dir or catalog_settings.catalog_dir)

    loader = POCatalogLoader(
        catalog_dir=catalog_dir,
        use_fuzzy=catalog_settings.use_fuzzy,
        plural_overrides=catalog_settings.plural_forms,
    )
    translator = Translator(
        store=CatalogStore(loader),
        track_misses=catalog_settings.track_misses,
    )

    if preload:
        translator.reload()
        logger.info(
            "translator_created_with_preload",
            catalog_dir=str(catalog_dir),
            catalog_count=len(translator.available()),
        )
    else:
        logger.info("translator_created_lazy", catalog_dir=str(catalog_dir))

    return translator
