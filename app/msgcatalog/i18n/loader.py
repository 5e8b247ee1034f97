"""Catalog loading interface and implementations.

Defines the contract for turning catalog files into store snapshots and
provides the loader for `<domain>.<locale>.po` files.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Union

from msgcatalog.i18n.errors import CatalogError, CatalogFormatError, RuleSyntaxError
from msgcatalog.i18n.models import Catalog
from msgcatalog.i18n.plurals import get_plural_rule, parse_plural_forms
from msgcatalog.i18n.po import LOCALE_SUFFIX, read_catalog, split_catalog_filename
from msgcatalog.i18n.store import CatalogId, CatalogSnapshot, LoadedCatalog
from msgcatalog.logging import get_module_logger

logger = get_module_logger()


class CatalogLoader(ABC):
    """Abstract base for catalog loaders."""

    @abstractmethod
    def discover(self) -> List[Path]:
        """List every locale catalog file available to this loader."""
        pass

    @abstractmethod
    def load(
        self,
        paths: Sequence[Union[str, Path]],
        base: Optional[CatalogSnapshot] = None,
    ) -> CatalogSnapshot:
        """Build a snapshot from catalog files.

        Args:
            paths: Locale catalog files to load.
            base: Snapshot whose other catalogs are carried over unchanged.

        Returns:
            New CatalogSnapshot. Files that fail to load are absent from it
            and listed in its errors.
        """
        pass


class POCatalogLoader(CatalogLoader):
    """Loader for `<domain>.<locale>.po` files in one directory.

    Attributes:
        catalog_dir: Directory containing the catalog files.
        use_fuzzy: Whether fuzzy translations are served.
        plural_overrides: Locale -> Plural-Forms used when a file has none.
    """

    def __init__(
        self,
        catalog_dir: Union[str, Path],
        use_fuzzy: bool = True,
        plural_overrides: Optional[Mapping[str, str]] = None,
    ):
        self.catalog_dir = Path(catalog_dir)
        self.use_fuzzy = use_fuzzy
        self.plural_overrides = dict(plural_overrides or {})

    def discover(self) -> List[Path]:
        if not self.catalog_dir.is_dir():
            logger.warning("catalog_dir_not_found", catalog_dir=str(self.catalog_dir))
            return []
        return sorted(self.catalog_dir.glob(f"*{LOCALE_SUFFIX}"))

    def load(
        self,
        paths: Sequence[Union[str, Path]],
        base: Optional[CatalogSnapshot] = None,
    ) -> CatalogSnapshot:
        catalogs: Dict[CatalogId, LoadedCatalog] = dict(base.catalogs) if base else {}
        errors: List[CatalogError] = []

        for path in sorted(Path(p) for p in paths):
            try:
                domain, locale = split_catalog_filename(path.name)
            except ValueError:
                logger.warning("skipped_unknown_catalog_file", path=str(path))
                continue
            if locale is None:
                continue

            try:
                loaded = self._load_file(path, domain, locale)
            except (CatalogFormatError, RuleSyntaxError) as e:
                catalogs.pop((domain, locale), None)
                errors.append(e)
                logger.error(
                    "catalog_load_failed",
                    path=str(path),
                    domain=domain,
                    locale=locale,
                    error=str(e),
                )
                continue
            catalogs[(domain, locale)] = loaded

        logger.info(
            "catalogs_loaded",
            file_count=len(paths),
            catalog_count=len(catalogs),
            error_count=len(errors),
        )
        return CatalogSnapshot(catalogs=MappingProxyType(catalogs), errors=tuple(errors))

    def _load_file(self, path: Path, domain: str, locale: str) -> LoadedCatalog:
        try:
            catalog = read_catalog(path, domain=domain, locale=locale)
        except OSError as e:
            raise CatalogFormatError(f"unreadable: {e.strerror or e}", str(path), 0) from e

        if catalog.plural_forms:
            rule = parse_plural_forms(catalog.plural_forms, locale)
        else:
            rule = get_plural_rule(locale, self.plural_overrides)

        return LoadedCatalog(
            domain=domain,
            locale=locale,
            rule=rule,
            messages=MappingProxyType(self._messages(catalog)),
            path=str(path),
        )

    def _messages(self, catalog: Catalog) -> Dict[str, tuple]:
        messages: Dict[str, tuple] = {}
        for entry in catalog:
            if entry.is_obsolete or entry.is_untranslated:
                continue
            if entry.is_fuzzy and not self.use_fuzzy:
                continue
            messages[entry.key] = tuple(entry.msgstr)
        return messages
