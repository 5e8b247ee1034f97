"""Catalog engine - message extraction, catalog maintenance and lookups.

Main components:
- models: Occurrence, Entry, Catalog
- plurals: Plural-Forms parsing and evaluation
- po: catalog file reading and writing
- scanner: SourceScanner extracting literal translation calls
- template: TemplateBuilder folding occurrences into templates
- merger: LocaleMerger reconciling locale catalogs with templates
- store / loader: immutable snapshots and the loaders that build them
- translator: Translator runtime lookups with source-text fallback
- pipeline: scan_and_merge batch operation
"""

from msgcatalog.i18n.errors import (
    AmbiguousPluralDefinition,
    CatalogError,
    CatalogFormatError,
    LookupMiss,
    PluralConflict,
    RuleSyntaxError,
    ScanError,
)
from msgcatalog.i18n.factory import create_merger, create_scanner, create_translator
from msgcatalog.i18n.loader import CatalogLoader, POCatalogLoader
from msgcatalog.i18n.merger import LocaleMerger, MergeReport, prune
from msgcatalog.i18n.models import CallForm, Catalog, Entry, Occurrence, make_key
from msgcatalog.i18n.pipeline import PipelineError, PipelineReport, scan_and_merge
from msgcatalog.i18n.plurals import PluralRule, get_plural_rule, parse_plural_forms
from msgcatalog.i18n.po import format_catalog, parse_catalog, read_catalog, write_catalog
from msgcatalog.i18n.scanner import ScanRun, SourceScanner
from msgcatalog.i18n.service import TranslationService
from msgcatalog.i18n.store import CatalogSnapshot, CatalogStore, LoadedCatalog
from msgcatalog.i18n.template import TemplateBuilder
from msgcatalog.i18n.translator import Translator

__all__ = [
    "AmbiguousPluralDefinition",
    "CatalogError",
    "CatalogFormatError",
    "LookupMiss",
    "PluralConflict",
    "RuleSyntaxError",
    "ScanError",
    "CallForm",
    "Catalog",
    "Entry",
    "Occurrence",
    "make_key",
    "PluralRule",
    "get_plural_rule",
    "parse_plural_forms",
    "format_catalog",
    "parse_catalog",
    "read_catalog",
    "write_catalog",
    "SourceScanner",
    "ScanRun",
    "TemplateBuilder",
    "LocaleMerger",
    "MergeReport",
    "prune",
    "CatalogLoader",
    "POCatalogLoader",
    "CatalogSnapshot",
    "CatalogStore",
    "LoadedCatalog",
    "Translator",
    "PipelineError",
    "PipelineReport",
    "scan_and_merge",
    "create_merger",
    "create_scanner",
    "create_translator",
    "TranslationService",
]
