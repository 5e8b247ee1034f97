"""Batch pipeline: scan sources, rebuild templates, merge every locale.

Build-time errors are collected into the report instead of aborting the
run. Only structural failures (an unreadable source root, a catalog
directory that cannot be written) propagate.
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from msgcatalog.configuration import Settings, get_settings
from msgcatalog.i18n.errors import (
    AmbiguousPluralDefinition,
    CatalogError,
    CatalogFormatError,
    RuleSyntaxError,
)
from msgcatalog.i18n.factory import create_merger, create_scanner
from msgcatalog.i18n.merger import MergeReport, prune
from msgcatalog.i18n.models import Catalog
from msgcatalog.i18n.plurals import get_plural_rule
from msgcatalog.i18n.po import catalog_filename, read_catalog, write_catalog
from msgcatalog.i18n.template import TemplateBuilder
from msgcatalog.logging import bind_run_context, get_module_logger, get_run_id

logger = get_module_logger()


@dataclass
class PipelineError:
    """One build-time error collected during a pipeline run."""

    kind: str
    message: str
    domain: Optional[str] = None
    locale: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def from_exception(
        cls,
        error: CatalogError,
        domain: Optional[str] = None,
        locale: Optional[str] = None,
    ) -> "PipelineError":
        return cls(
            kind=type(error).__name__,
            message=str(error),
            domain=domain,
            locale=locale,
            path=getattr(error, "path", None),
        )


@dataclass
class PipelineReport:
    """Outcome of one scan_and_merge run.

    Attributes:
        merges: One MergeReport per (domain, locale) merged and written.
        errors: Every build-time error of the run.
        templates: Domain -> number of template entries written.
        files_scanned: Source files visited by the scanner.
        run_id: Logging correlation id of the run.
    """

    merges: List[MergeReport] = field(default_factory=list)
    errors: List[PipelineError] = field(default_factory=list)
    templates: Dict[str, int] = field(default_factory=dict)
    files_scanned: int = 0
    run_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def merge_for(self, domain: str, locale: str) -> Optional[MergeReport]:
        for merge in self.merges:
            if merge.domain == domain and merge.locale == locale:
                return merge
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the report to a dictionary."""
        return {
            "ok": self.ok,
            "run_id": self.run_id,
            "files_scanned": self.files_scanned,
            "templates": dict(self.templates),
            "merges": [merge.to_dict() for merge in self.merges],
            "errors": [asdict(error) for error in self.errors],
        }


def scan_and_merge(
    domains: Optional[Sequence[str]],
    locales: Sequence[str],
    source_root: Union[str, Path],
    catalog_dir: Optional[Union[str, Path]] = None,
    settings: Optional[Settings] = None,
) -> PipelineReport:
    """Scan a source tree and bring every domain's catalogs up to date.

    Steps: scan sources, build one template per domain, write
    `<domain>.pot`, then for each locale read `<domain>.<locale>.po`,
    merge, optionally prune, and write it back.

    Args:
        domains: Domains to build; None builds every domain found.
        locales: Locales to merge for each domain.
        source_root: Root of the source tree to scan.
        catalog_dir: Catalog directory (default: settings.catalog.catalog_dir).
        settings: Optional Settings instance (default: get_settings()).

    Returns:
        PipelineReport with per-locale merge reports and collected errors.
        When templates cannot be built (ambiguous plural definitions),
        nothing is written.

    Raises:
        ScanError: If the source root is missing or unreadable.
        OSError: If catalog files cannot be read or written.
    """
    settings = settings or get_settings()
    catalog_dir = Path(catalog_dir or settings.catalog.catalog_dir)

    with bind_run_context():
        report = PipelineReport(run_id=get_run_id())
        logger.info(
            "pipeline_started",
            source_root=str(source_root),
            catalog_dir=str(catalog_dir),
            domains=list(domains) if domains is not None else None,
            locales=list(locales),
        )

        run = create_scanner(settings).scan(source_root)
        occurrences = list(run)
        report.files_scanned = run.files_scanned
        report.errors.extend(PipelineError.from_exception(e) for e in run.errors)

        builder = TemplateBuilder(settings.catalog.default_domain)
        try:
            templates = builder.build(occurrences, domains)
        except AmbiguousPluralDefinition as e:
            for conflict in e.conflicts:
                report.errors.append(
                    PipelineError(
                        kind=type(e).__name__,
                        message=str(conflict),
                        domain=conflict.domain,
                        path=conflict.second[0],
                    )
                )
            logger.error("pipeline_aborted", conflict_count=len(e.conflicts))
            return report

        for domain, template in templates.items():
            write_catalog(template, catalog_dir / catalog_filename(domain))
            report.templates[domain] = len(template)
            for locale in locales:
                with bind_run_context(domain=domain, locale=locale):
                    merge = _merge_locale(template, locale, catalog_dir, settings, report)
                if merge is not None:
                    report.merges.append(merge)

        logger.info(
            "pipeline_completed",
            files_scanned=report.files_scanned,
            template_count=len(report.templates),
            merge_count=len(report.merges),
            error_count=len(report.errors),
        )
        return report


def _merge_locale(
    template: Catalog,
    locale: str,
    catalog_dir: Path,
    settings: Settings,
    report: PipelineReport,
) -> Optional[MergeReport]:
    """Merge one locale; errors are recorded and the file left untouched."""
    domain = template.domain
    path = catalog_dir / catalog_filename(domain, locale)

    existing = None
    if path.exists():
        try:
            existing = read_catalog(path, domain=domain, locale=locale)
        except CatalogFormatError as e:
            report.errors.append(PipelineError.from_exception(e, domain, locale))
            logger.error("locale_skipped", path=str(path), error=str(e))
            return None

    try:
        rule = get_plural_rule(locale, settings.catalog.plural_forms)
    except RuleSyntaxError as e:
        report.errors.append(PipelineError.from_exception(e, domain, locale))
        logger.error("locale_skipped", path=str(path), error=str(e))
        return None

    merged, merge_report = create_merger(settings).merge(template, existing, rule, locale)

    retention = settings.catalog.obsolete_retention_merges
    if retention is not None:
        merge_report.pruned = prune(merged, retention)

    write_catalog(merged, path)
    return merge_report
