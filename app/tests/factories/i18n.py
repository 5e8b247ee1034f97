"""Test data factories for catalog engine testing.

Provides deterministic test data builders for:
- Occurrence
- Entry
- Catalog (templates and locale catalogs)
- Catalog files and source trees on disk
"""

from pathlib import Path
from typing import Dict, Iterable, Optional

from msgcatalog.i18n.models import CallForm, Catalog, Entry, Occurrence

FR_PLURAL_FORMS = "nplurals=2; plural=(n > 1);"
PL_PLURAL_FORMS = (
    "nplurals=3; plural=(n==1 ? 0 : n%10>=2 && n%10<=4 && "
    "(n%100<10 || n%100>=20) ? 1 : 2);"
)


def make_occurrence(
    msgid: str = "Welcome",
    path: str = "app/views.py",
    line: int = 1,
    msgid_plural: Optional[str] = None,
    msgctxt: Optional[str] = None,
    domain: Optional[str] = None,
    comments: Iterable[str] = (),
) -> Occurrence:
    """Create an Occurrence instance.

    The call form is derived from the plural text and context given.

    Args:
        msgid: Singular source text.
        path: Source file path.
        line: 1-based line number.
        msgid_plural: Plural source text.
        msgctxt: Message context.
        domain: Explicit text domain.
        comments: Developer comments.

    Returns:
        Occurrence instance.
    """
    if msgctxt is not None:
        form = CallForm.CONTEXTUAL_PLURAL if msgid_plural else CallForm.CONTEXTUAL
    else:
        form = CallForm.PLURAL if msgid_plural else CallForm.SINGULAR
    return Occurrence(
        msgid=msgid,
        path=path,
        line=line,
        form=form,
        msgid_plural=msgid_plural,
        msgctxt=msgctxt,
        domain=domain,
        comments=tuple(comments),
    )


def make_entry(
    msgid: str = "Welcome",
    msgstr: Optional[list] = None,
    msgid_plural: Optional[str] = None,
    msgctxt: Optional[str] = None,
    flags: Optional[list] = None,
    locations: Optional[list] = None,
    **kwargs,
) -> Entry:
    """Create an Entry instance.

    Args:
        msgid: Singular source text.
        msgstr: Translated forms (default: empty slots).
        msgid_plural: Plural source text.
        msgctxt: Message context.
        flags: Flags such as "fuzzy" or "obsolete".
        locations: (path, line) references.
        **kwargs: Any other Entry field.

    Returns:
        Entry instance.
    """
    return Entry(
        msgid=msgid,
        msgid_plural=msgid_plural,
        msgctxt=msgctxt,
        msgstr=list(msgstr) if msgstr is not None else [],
        flags=list(flags or []),
        locations=list(locations if locations is not None else [("app/views.py", 1)]),
        **kwargs,
    )


def make_catalog(
    entries: Iterable[Entry] = (),
    domain: str = "messages",
    locale: Optional[str] = None,
    plural_forms: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Catalog:
    """Create a Catalog instance.

    Args:
        entries: Entries in catalog order.
        domain: Text domain.
        locale: Locale, or None for a template.
        plural_forms: Plural-Forms header value.
        headers: Additional header fields.

    Returns:
        Catalog instance.
    """
    catalog = Catalog(domain=domain, locale=locale, headers=dict(headers or {}))
    if plural_forms is not None:
        catalog.headers["Plural-Forms"] = plural_forms
    for entry in entries:
        catalog.add(entry)
    return catalog


def make_template(*msgids: str, domain: str = "messages") -> Catalog:
    """Create a template with one singular entry per msgid."""
    entries = [
        make_entry(msgid, locations=[("app/views.py", line)])
        for line, msgid in enumerate(msgids, start=1)
    ]
    return make_catalog(entries, domain=domain)


def make_fr_catalog(entries: Iterable[Entry] = (), domain: str = "messages") -> Catalog:
    """Create a French locale catalog with its Plural-Forms header."""
    return make_catalog(
        entries, domain=domain, locale="fr", plural_forms=FR_PLURAL_FORMS
    )


def write_source(root: Path, relative: str, content: str) -> Path:
    """Write a source file under root, creating parent directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_text_catalog(directory: Path, name: str, content: str) -> Path:
    """Write raw catalog text to directory/name."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path
