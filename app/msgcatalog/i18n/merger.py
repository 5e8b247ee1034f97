"""Locale merger: reconciles a locale catalog with a fresh template.

The merge only adds, resizes or flags. A non-empty translation kept from the
existing catalog is never replaced with an empty one, and anything a
translator must re-check is marked fuzzy with a reason in the report.
"""

import copy
import difflib
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from msgcatalog.i18n.errors import RuleSyntaxError
from msgcatalog.i18n.models import FUZZY, OBSOLETE, Catalog, Entry
from msgcatalog.i18n.plurals import PluralRule, parse_plural_forms
from msgcatalog.logging import get_module_logger

logger = get_module_logger()

PLURAL_TRANSITION = "plural_transition"
PLURAL_FORMS_CHANGED = "plural_forms_changed"
PLURAL_TEXT_CHANGED = "plural_text_changed"
NEAR_MATCH = "near_match"

# Header fields that describe the template, not the translation
_TEMPLATE_ONLY_HEADERS = ("X-Domain",)


@dataclass
class MergeReport:
    """What one merge changed in one (domain, locale) catalog.

    Attributes:
        domain: Text domain.
        locale: Locale merged.
        new: Keys added by this merge.
        obsolete: Keys that became obsolete in this merge.
        revived: Obsolete keys that came back into the template.
        fuzzy: (key, reason) for every entry this merge flagged fuzzy.
        untranslated: Active entries with every msgstr slot empty.
        translated: Active entries with every msgstr slot filled.
        total: Active entries.
        pruned: Keys removed by a prune after this merge.
    """

    domain: str
    locale: str
    new: List[str] = field(default_factory=list)
    obsolete: List[str] = field(default_factory=list)
    revived: List[str] = field(default_factory=list)
    fuzzy: List[Tuple[str, str]] = field(default_factory=list)
    untranslated: int = 0
    translated: int = 0
    total: int = 0
    pruned: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        """True when the merge added, obsoleted and flagged nothing."""
        return not (self.new or self.obsolete or self.revived or self.fuzzy)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the report to a dictionary.

        Returns:
            Dictionary with fuzzy entries as {"key", "reason"} objects.
        """
        data = asdict(self)
        data["fuzzy"] = [{"key": key, "reason": reason} for key, reason in self.fuzzy]
        data["is_clean"] = self.is_clean
        return data


def _resize(msgstr: List[str], arity: int) -> List[str]:
    """Pad with empty slots or truncate to `arity` slots."""
    return (list(msgstr) + [""] * arity)[:arity]


def _header_nplurals(catalog: Optional[Catalog]) -> Optional[int]:
    """nplurals declared by a catalog header, None when absent or unparsable."""
    if catalog is None or not catalog.plural_forms:
        return None
    try:
        return parse_plural_forms(catalog.plural_forms, catalog.locale).nplurals
    except RuleSyntaxError:
        return None


class LocaleMerger:
    """Merges template catalogs into locale catalogs.

    Attributes:
        fuzzy_matching: Seed new entries from similar, newly obsolete ones.
        fuzzy_cutoff: Minimum difflib similarity ratio for a near match.
    """

    def __init__(self, fuzzy_matching: bool = False, fuzzy_cutoff: float = 0.8):
        self.fuzzy_matching = fuzzy_matching
        self.fuzzy_cutoff = fuzzy_cutoff

    def merge(
        self,
        template: Catalog,
        existing: Optional[Catalog],
        rule: PluralRule,
        locale: str,
        now: Optional[datetime] = None,
    ) -> Tuple[Catalog, MergeReport]:
        """Merge a template into a locale catalog.

        Neither input is modified.

        Args:
            template: Freshly built template of the domain.
            existing: Current locale catalog, or None for a new locale.
            rule: Plural rule of the locale.
            locale: Locale identifier.
            now: Revision timestamp (defaults to the current UTC time).

        Returns:
            Tuple of (merged catalog, report).
        """
        report = MergeReport(domain=template.domain, locale=locale)
        previous = existing.entries if existing is not None else {}
        forms_changed = _header_nplurals(existing) not in (None, rule.nplurals)

        merged = Catalog(domain=template.domain, locale=locale)
        merged.header_comments = list(existing.header_comments) if existing else []

        unmatched: List[Entry] = []
        for source in template:
            current = previous.get(source.key)
            if current is None:
                unmatched.append(source)
                merged.entries[source.key] = None  # placeholder keeps template order
                continue
            merged.entries[source.key] = self._update(
                source, copy.deepcopy(current), rule, forms_changed, report
            )

        leaving = [
            entry
            for key, entry in previous.items()
            if key not in template and not entry.is_obsolete
        ]
        for source in unmatched:
            merged.entries[source.key] = self._create(source, rule, leaving, report)

        for key, entry in previous.items():
            if key in template:
                continue
            retired = copy.deepcopy(entry)
            if retired.is_obsolete:
                retired.obsolete_merges += 1
            else:
                retired.add_flag(OBSOLETE)
                retired.obsolete_merges = 1
                report.obsolete.append(key)
            merged.entries[key] = retired

        merged.headers = self._headers(template, existing, rule, locale, report, now)

        stats = merged.stats()
        report.total = stats["total"]
        report.translated = stats["translated"]
        report.untranslated = stats["untranslated"]

        logger.info(
            "locale_merged",
            domain=template.domain,
            locale=locale,
            new=len(report.new),
            obsolete=len(report.obsolete),
            revived=len(report.revived),
            fuzzy=len(report.fuzzy),
            untranslated=report.untranslated,
        )
        return merged, report

    def _update(
        self,
        source: Entry,
        entry: Entry,
        rule: PluralRule,
        forms_changed: bool,
        report: MergeReport,
    ) -> Entry:
        """Carry an existing entry forward against its template entry."""
        if entry.is_obsolete:
            entry.remove_flag(OBSOLETE)
            entry.obsolete_merges = 0
            report.revived.append(entry.key)

        entry.locations = list(source.locations)
        entry.comments = list(source.comments)

        if entry.is_plural != source.is_plural:
            arity = rule.nplurals if source.is_plural else 1
            entry.msgid_plural = source.msgid_plural
            entry.msgstr = _resize(entry.msgstr, arity)
            self._flag(entry, PLURAL_TRANSITION, report)
            return entry

        if not entry.is_plural:
            if len(entry.msgstr) != 1:
                entry.msgstr = _resize(entry.msgstr, 1)
                self._flag(entry, PLURAL_FORMS_CHANGED, report)
            return entry

        if forms_changed or len(entry.msgstr) != rule.nplurals:
            entry.msgstr = _resize(entry.msgstr, rule.nplurals)
            self._flag(entry, PLURAL_FORMS_CHANGED, report)
        if entry.msgid_plural != source.msgid_plural:
            entry.msgid_plural = source.msgid_plural
            if not entry.is_untranslated:
                self._flag(entry, PLURAL_TEXT_CHANGED, report)
        return entry

    def _create(
        self,
        source: Entry,
        rule: PluralRule,
        leaving: List[Entry],
        report: MergeReport,
    ) -> Entry:
        """Create the locale entry for a message new to this catalog."""
        arity = rule.nplurals if source.is_plural else 1
        entry = Entry(
            msgid=source.msgid,
            msgid_plural=source.msgid_plural,
            msgctxt=source.msgctxt,
            msgstr=[""] * arity,
            locations=list(source.locations),
            comments=list(source.comments),
        )
        report.new.append(entry.key)

        match = self._near_match(source, leaving) if self.fuzzy_matching else None
        if match is not None:
            entry.msgstr = _resize(match.msgstr, arity)
            entry.previous_msgid = match.msgid
            entry.translator_comments = list(match.translator_comments)
            self._flag(entry, NEAR_MATCH, report)
            logger.debug(
                "near_match_found",
                key=entry.key,
                previous_msgid=match.msgid,
            )
        return entry

    def _near_match(self, source: Entry, candidates: List[Entry]) -> Optional[Entry]:
        usable = [
            c for c in candidates if c.msgctxt == source.msgctxt and not c.is_untranslated
        ]
        by_msgid = {c.msgid: c for c in usable}
        matches = difflib.get_close_matches(
            source.msgid, list(by_msgid), n=1, cutoff=self.fuzzy_cutoff
        )
        return by_msgid[matches[0]] if matches else None

    def _flag(self, entry: Entry, reason: str, report: MergeReport) -> None:
        entry.add_flag(FUZZY)
        report.fuzzy.append((entry.key, reason))

    def _headers(
        self,
        template: Catalog,
        existing: Optional[Catalog],
        rule: PluralRule,
        locale: str,
        report: MergeReport,
        now: Optional[datetime],
    ) -> Dict[str, str]:
        if existing is not None and existing.headers:
            headers = dict(existing.headers)
        else:
            headers = {
                k: v
                for k, v in template.headers.items()
                if k not in _TEMPLATE_ONLY_HEADERS
            }
        if "POT-Creation-Date" in template.headers:
            headers["POT-Creation-Date"] = template.headers["POT-Creation-Date"]
        headers["Language"] = locale
        headers["Plural-Forms"] = rule.header
        if not report.is_clean or "PO-Revision-Date" not in headers:
            now = now or datetime.now(timezone.utc)
            headers["PO-Revision-Date"] = now.strftime("%Y-%m-%d %H:%M%z")
        return headers


def prune(catalog: Catalog, retention_merges: int) -> List[str]:
    """Remove entries that have been obsolete for `retention_merges` merges.

    Args:
        catalog: Locale catalog, modified in place.
        retention_merges: Consecutive obsolete merges before removal.

    Returns:
        Keys of the removed entries.

    Raises:
        ValueError: If retention_merges is less than 1.
    """
    if retention_merges < 1:
        raise ValueError(f"retention_merges must be at least 1, got {retention_merges}")
    removed: List[str] = []
    for entry in catalog:
        if entry.is_obsolete and entry.obsolete_merges >= retention_merges:
            catalog.remove(entry.key)
            removed.append(entry.key)
            logger.info(
                "obsolete_entry_pruned",
                domain=catalog.domain,
                locale=catalog.locale,
                key=entry.key,
                obsolete_merges=entry.obsolete_merges,
            )
    return removed
