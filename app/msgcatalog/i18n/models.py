"""Catalog models for the i18n system.

Defines the core data structures shared by the scanner, template builder,
locale merger and catalog store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

FUZZY = "fuzzy"
OBSOLETE = "obsolete"

CONTEXT_SEPARATOR = "\x04"

Location = Tuple[str, int]


def make_key(msgid: str, msgctxt: Optional[str] = None) -> str:
    """Build the catalog key for a message.

    Args:
        msgid: Source (singular) text.
        msgctxt: Optional disambiguating context.

    Returns:
        `msgid` itself, or `msgctxt + "\\x04" + msgid` when a context is given.
    """
    if msgctxt is None:
        return msgid
    return f"{msgctxt}{CONTEXT_SEPARATOR}{msgid}"


class CallForm(str, Enum):
    """Shape of a translation call site."""

    SINGULAR = "singular"
    PLURAL = "plural"
    CONTEXTUAL = "contextual"
    CONTEXTUAL_PLURAL = "contextual_plural"

    @property
    def is_plural(self) -> bool:
        return self in (CallForm.PLURAL, CallForm.CONTEXTUAL_PLURAL)


@dataclass(frozen=True)
class Occurrence:
    """One literal translation call found in source code.

    Attributes:
        msgid: Literal singular text.
        path: Source file, relative to the scanned root.
        line: 1-based line of the call.
        form: Call form (singular, plural, contextual).
        msgid_plural: Literal plural text for plural forms.
        msgctxt: Literal context for contextual forms.
        domain: Explicit text domain, or None for the default domain.
        comments: Developer comments attached to the call site.
    """

    msgid: str
    path: str
    line: int
    form: CallForm = CallForm.SINGULAR
    msgid_plural: Optional[str] = None
    msgctxt: Optional[str] = None
    domain: Optional[str] = None
    comments: Tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return make_key(self.msgid, self.msgctxt)

    @property
    def location(self) -> Location:
        return (self.path, self.line)


@dataclass
class Entry:
    """One translatable unit.

    Attributes:
        msgid: Canonical source-language singular text.
        msgid_plural: Plural source text; set iff the entry is pluralizable.
        msgctxt: Optional context; part of the catalog key.
        msgstr: Ordered translated forms (1 slot, or nplurals slots).
        locations: Ordered, duplicate-free (file, line) occurrences.
        comments: Developer comments, rebuilt by every scan.
        translator_comments: Translator annotations, preserved across merges.
        flags: Ordered, duplicate-free tags such as "fuzzy" and "obsolete".
        previous_msgid: Source text a fuzzy translation was carried over from.
        obsolete_merges: Consecutive merges this entry has been obsolete.
    """

    msgid: str
    msgid_plural: Optional[str] = None
    msgctxt: Optional[str] = None
    msgstr: List[str] = field(default_factory=list)
    locations: List[Location] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    translator_comments: List[str] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)
    previous_msgid: Optional[str] = None
    obsolete_merges: int = 0

    def __post_init__(self):
        if not self.msgstr:
            self.msgstr = [""] * (2 if self.msgid_plural is not None else 1)

    @property
    def key(self) -> str:
        return make_key(self.msgid, self.msgctxt)

    @property
    def is_plural(self) -> bool:
        return self.msgid_plural is not None

    @property
    def is_fuzzy(self) -> bool:
        return FUZZY in self.flags

    @property
    def is_obsolete(self) -> bool:
        return OBSOLETE in self.flags

    @property
    def is_translated(self) -> bool:
        """True when every msgstr slot is non-empty."""
        return all(self.msgstr)

    @property
    def is_untranslated(self) -> bool:
        """True when every msgstr slot is empty."""
        return not any(self.msgstr)

    def add_flag(self, flag: str) -> None:
        if flag not in self.flags:
            self.flags.append(flag)

    def remove_flag(self, flag: str) -> None:
        if flag in self.flags:
            self.flags.remove(flag)

    def add_location(self, location: Location) -> None:
        if location not in self.locations:
            self.locations.append(location)


@dataclass
class Catalog:
    """Ordered mapping from key to Entry, scoped by (domain, locale).

    A catalog with `locale=None` is the template catalog of its domain.

    Attributes:
        domain: Text domain.
        locale: Locale identifier, or None for a template.
        headers: Ordered header fields (e.g., "Plural-Forms").
        header_comments: Translator comments above the header block.
        entries: Ordered entries keyed by `Entry.key`.
    """

    domain: str
    locale: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    header_comments: List[str] = field(default_factory=list)
    entries: Dict[str, Entry] = field(default_factory=dict)

    @property
    def is_template(self) -> bool:
        return self.locale is None

    @property
    def plural_forms(self) -> Optional[str]:
        """Raw Plural-Forms header value, if any."""
        return self.headers.get("Plural-Forms")

    def add(self, entry: Entry) -> None:
        """Add an entry.

        Raises:
            ValueError: If an entry with the same key already exists.
        """
        if entry.key in self.entries:
            raise ValueError(f"Duplicate entry {entry.key!r} in domain {self.domain}")
        self.entries[entry.key] = entry

    def get(self, key: str) -> Optional[Entry]:
        return self.entries.get(key)

    def remove(self, key: str) -> Optional[Entry]:
        return self.entries.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __iter__(self) -> Iterator[Entry]:
        return iter(list(self.entries.values()))

    def __len__(self) -> int:
        return len(self.entries)

    def active_entries(self) -> List[Entry]:
        return [e for e in self.entries.values() if not e.is_obsolete]

    def obsolete_entries(self) -> List[Entry]:
        return [e for e in self.entries.values() if e.is_obsolete]

    def stats(self) -> Dict[str, int]:
        """Translation progress counters for active entries.

        Returns:
            Dict with total, translated, fuzzy, untranslated and obsolete counts.
        """
        active = self.active_entries()
        return {
            "total": len(active),
            "translated": sum(1 for e in active if e.is_translated),
            "fuzzy": sum(1 for e in active if e.is_fuzzy),
            "untranslated": sum(1 for e in active if e.is_untranslated),
            "obsolete": len(self.entries) - len(active),
        }
