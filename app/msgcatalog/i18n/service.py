"""Translation service for dependency injection.

Provides a class-based interface to the catalog engine for easier DI and
testing.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from msgcatalog.configuration import Settings, get_settings
from msgcatalog.i18n.factory import create_translator
from msgcatalog.i18n.pipeline import PipelineReport, scan_and_merge
from msgcatalog.i18n.store import CatalogSnapshot
from msgcatalog.i18n.translator import Translator


class TranslationService:
    """Class-based translation service.

    Thin facade over a Translator for runtime lookups and over the batch
    pipeline for catalog maintenance. Lookups default to the configured
    text domain.

    Usage:
        service = TranslationService()
        service.translate("fr", "Welcome")
        service.translate_plural("fr", "%{n} Visitor", "%{n} Visitors", 2,
                                 variables={"n": 2})

        report = service.scan_and_merge(["fr", "de"], source_root="src")
    """

    def __init__(
        self,
        translator: Optional[Translator] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize translation service.

        Args:
            translator: Optional pre-configured Translator instance.
                If not provided, creates default via factory.
            settings: Optional Settings instance (default: get_settings()).
        """
        self._settings = settings or get_settings()
        self._translator = translator or create_translator(settings=self._settings)

    @property
    def default_domain(self) -> str:
        return self._settings.catalog.default_domain

    def translate(
        self,
        locale: str,
        msgid: str,
        context: Optional[str] = None,
        variables: Optional[Mapping[str, Any]] = None,
        domain: Optional[str] = None,
    ) -> str:
        """Translate a singular message; falls back to msgid."""
        return self._translator.translate(
            domain or self.default_domain, locale, msgid, context, variables
        )

    def translate_plural(
        self,
        locale: str,
        msgid: str,
        msgid_plural: str,
        count: int,
        context: Optional[str] = None,
        variables: Optional[Mapping[str, Any]] = None,
        domain: Optional[str] = None,
    ) -> str:
        """Translate a plural message; falls back to the source text."""
        return self._translator.translate_plural(
            domain or self.default_domain,
            locale,
            msgid,
            msgid_plural,
            count,
            context,
            variables,
        )

    def reload(
        self, paths: Optional[Sequence[Union[str, Path]]] = None
    ) -> CatalogSnapshot:
        """Reload catalogs and publish a new snapshot."""
        return self._translator.reload(paths)

    def misses(self) -> Dict[Tuple[str, str], int]:
        return self._translator.misses()

    def scan_and_merge(
        self,
        locales: Sequence[str],
        source_root: Union[str, Path],
        domains: Optional[Sequence[str]] = None,
        reload: bool = True,
    ) -> PipelineReport:
        """Run the batch pipeline against the configured catalog directory.

        Args:
            locales: Locales to merge.
            source_root: Source tree to scan.
            domains: Domains to build (default: every domain found).
            reload: Whether to reload the translator afterwards.

        Returns:
            PipelineReport of the run.
        """
        report = scan_and_merge(
            domains,
            locales,
            source_root,
            catalog_dir=self._settings.catalog.catalog_dir,
            settings=self._settings,
        )
        if reload:
            self.reload()
        return report

    @property
    def translator(self) -> Translator:
        """Access underlying Translator instance."""
        return self._translator
