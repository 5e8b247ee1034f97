"""Catalog file reading and writing.

Line-oriented, UTF-8 text format compatible with gettext PO/POT files:

    # translator comment
    #. developer comment
    #: path/to/file.py:12 other.py:40
    #, fuzzy
    #| msgid "previous source text"
    msgid "%{n} Visitor"
    msgid_plural "%{n} Visitors"
    msgstr[0] "%{n} Visiteur"
    msgstr[1] "%{n} Visiteurs"

Obsolete entries carry a `#~ ` prefix on their keyword lines and a
`#% obsolete-merges: N` metadata line. Files are named `<domain>.pot`
(template) and `<domain>.<locale>.po` (locale catalog).

The reader is a hand-written state machine with a character-level scanner
for quoted strings, so escaping and adjacent-segment concatenation are
handled exactly.
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from msgcatalog.i18n.errors import CatalogFormatError
from msgcatalog.i18n.models import OBSOLETE, Catalog, Entry, Location

TEMPLATE_SUFFIX = ".pot"
LOCALE_SUFFIX = ".po"

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}
_UNESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}

_KEYWORDS = ("msgctxt", "msgid", "msgid_plural", "msgstr")

# Unicode isolates around file names that contain whitespace, as GNU gettext writes them
_ISOLATE_START = "\u2068"
_ISOLATE_END = "\u2069"

PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# File naming
# ---------------------------------------------------------------------------


def catalog_filename(domain: str, locale: Optional[str] = None) -> str:
    """Return the file name for a template or locale catalog."""
    if locale is None:
        return f"{domain}{TEMPLATE_SUFFIX}"
    return f"{domain}.{locale}{LOCALE_SUFFIX}"


def split_catalog_filename(name: str) -> Tuple[str, Optional[str]]:
    """Split a catalog file name into (domain, locale).

    Raises:
        ValueError: If the name does not follow the naming scheme.
    """
    if name.endswith(TEMPLATE_SUFFIX):
        return name[: -len(TEMPLATE_SUFFIX)], None
    if name.endswith(LOCALE_SUFFIX):
        domain, sep, locale = name[: -len(LOCALE_SUFFIX)].rpartition(".")
        if sep and domain and locale:
            return domain, locale
    raise ValueError(f"Not a catalog file name: {name}")


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def _parse_quoted(text: str, path: str, lineno: int) -> str:
    """Parse one double-quoted segment, resolving escapes."""
    text = text.strip()
    if not text.startswith('"'):
        raise CatalogFormatError("expected a quoted string", path, lineno)
    chars: List[str] = []
    i = 1
    length = len(text)
    while i < length:
        ch = text[i]
        if ch == "\\":
            if i + 1 >= length:
                break
            escaped = _ESCAPES.get(text[i + 1])
            if escaped is None:
                raise CatalogFormatError(
                    f"unknown escape sequence \\{text[i + 1]}", path, lineno
                )
            chars.append(escaped)
            i += 2
            continue
        if ch == '"':
            if text[i + 1 :].strip():
                raise CatalogFormatError(
                    "unexpected characters after closing quote", path, lineno
                )
            return "".join(chars)
        chars.append(ch)
        i += 1
    raise CatalogFormatError("unterminated string", path, lineno)


def _location_tokens(text: str) -> List[str]:
    """Split a `#:` line into references; isolated file names may hold spaces."""
    tokens: List[str] = []
    i = 0
    length = len(text)
    while i < length:
        if text[i].isspace():
            i += 1
            continue
        start = i
        if text[i] == _ISOLATE_START:
            end = text.find(_ISOLATE_END, i + 1)
            i = length if end < 0 else end + 1
        while i < length and not text[i].isspace():
            i += 1
        tokens.append(text[start:i])
    return tokens


def _parse_locations(text: str) -> List[Location]:
    locations: List[Location] = []
    for token in _location_tokens(text):
        file_part, sep, line_part = token.rpartition(":")
        file_part = file_part.strip(_ISOLATE_START + _ISOLATE_END)
        if sep and file_part and line_part.isdigit():
            locations.append((file_part, int(line_part)))
            continue
        token = token.strip(_ISOLATE_START + _ISOLATE_END)
        locations.append((token, 0))
    return locations


def _strip_marker(line: str, marker: str) -> str:
    """Drop a comment marker and a single following space."""
    rest = line[len(marker) :]
    return rest[1:] if rest.startswith(" ") else rest


def _split_keyword(line: str) -> Tuple[str, str]:
    """Split `keyword "value"` on the first run of whitespace."""
    parts = line.split(None, 1)
    return parts[0], parts[1] if len(parts) > 1 else ""


def _parse_headers(value: str) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    for raw in value.split("\n"):
        name, sep, content = raw.partition(":")
        if sep and name.strip():
            headers[name.strip()] = content.strip()
    return headers


class _Block:
    """Accumulates the lines of one entry while reading."""

    def __init__(self, start_line: int):
        self.start_line = start_line
        self.translator_comments: List[str] = []
        self.comments: List[str] = []
        self.locations: List[Location] = []
        self.flags: List[str] = []
        self.previous_msgid: Optional[str] = None
        self.obsolete_merges = 0
        self.obsolete = False
        self.msgctxt: Optional[str] = None
        self.msgid: Optional[str] = None
        self.msgid_plural: Optional[str] = None
        self.msgstr: Optional[str] = None
        self.msgstr_plural: List[str] = []
        # (field name, plural index) that a continuation line appends to
        self.current: Optional[Tuple[str, int]] = None
        self.previous_current = False

    @property
    def has_keywords(self) -> bool:
        return self.msgctxt is not None or self.msgid is not None

    @property
    def is_empty(self) -> bool:
        return not self.has_keywords and not (
            self.translator_comments
            or self.comments
            or self.locations
            or self.flags
            or self.previous_msgid is not None
            or self.obsolete_merges
        )

    def append(self, value: str) -> None:
        name, index = self.current
        if name == "msgstr_plural":
            self.msgstr_plural[index] += value
        else:
            setattr(self, name, getattr(self, name) + value)


class _Reader:
    """State machine turning catalog text into a Catalog."""

    def __init__(self, text: str, catalog: Catalog, path: str):
        # Only \n ends a line; other Unicode line breaks are string content
        self.lines = [line.removesuffix("\r") for line in text.split("\n")]
        if self.lines and not self.lines[-1]:
            self.lines.pop()
        self.catalog = catalog
        self.path = path
        self.block = _Block(1)
        self.seen_header = False

    def read(self) -> Catalog:
        for lineno, raw in enumerate(self.lines, start=1):
            line = raw.strip()
            if lineno == 1 and line.startswith("\ufeff"):
                line = line[1:]
            if not line:
                self._finish(lineno)
                continue
            if self.block.is_empty:
                self.block.start_line = lineno
            if line.startswith("#~"):
                rest = _strip_marker(line, "#~").strip()
                if not rest:
                    continue
                if rest.startswith("|"):
                    self._previous(_strip_marker(rest, "|"), lineno)
                    continue
                self._keyword_or_continuation(rest, lineno, obsolete=True)
                continue
            if line.startswith("#"):
                self._comment(line, lineno)
                continue
            self._keyword_or_continuation(line, lineno, obsolete=False)
        self._finish(len(self.lines) + 1)
        return self.catalog

    def _error(self, message: str, lineno: int) -> CatalogFormatError:
        return CatalogFormatError(message, self.path, lineno)

    def _comment(self, line: str, lineno: int) -> None:
        if self.block.has_keywords:
            self._finish(lineno)
        block = self.block
        block.current = None
        if line.startswith("#:"):
            block.locations.extend(_parse_locations(line[2:]))
        elif line.startswith("#,"):
            for flag in line[2:].split(","):
                flag = flag.strip()
                if flag and flag not in block.flags:
                    block.flags.append(flag)
        elif line.startswith("#."):
            block.comments.append(_strip_marker(line, "#."))
        elif line.startswith("#|"):
            self._previous(_strip_marker(line, "#|"), lineno)
        elif line.startswith("#%"):
            name, sep, value = _strip_marker(line, "#%").partition(":")
            if sep and name.strip() == "obsolete-merges":
                value = value.strip()
                if not value.isdigit():
                    raise self._error("obsolete-merges must be an integer", lineno)
                block.obsolete_merges = int(value)
        else:
            block.translator_comments.append(_strip_marker(line, "#"))

    def _previous(self, rest: str, lineno: int) -> None:
        block = self.block
        if rest.startswith('"'):
            if block.previous_current and block.previous_msgid is not None:
                block.previous_msgid += _parse_quoted(rest, self.path, lineno)
            return
        keyword, value = _split_keyword(rest)
        block.previous_current = keyword == "msgid"
        if keyword == "msgid":
            block.previous_msgid = _parse_quoted(value, self.path, lineno)

    def _keyword_or_continuation(self, line: str, lineno: int, obsolete: bool) -> None:
        if line.startswith('"'):
            if self.block.current is None:
                raise self._error("string continuation without a keyword", lineno)
            self.block.append(_parse_quoted(line, self.path, lineno))
            return

        keyword, value = _split_keyword(line)
        index = -1
        if keyword.startswith("msgstr[") and keyword.endswith("]"):
            digits = keyword[len("msgstr[") : -1]
            if not digits.isdigit():
                raise self._error(f"invalid plural index {digits!r}", lineno)
            index = int(digits)
            keyword = "msgstr"
        elif keyword not in _KEYWORDS:
            raise self._error(f"unexpected content {keyword!r}", lineno)

        if keyword in ("msgctxt", "msgid") and self.block.msgid is not None:
            self._finish(lineno)
        block = self.block
        block.obsolete = block.obsolete or obsolete
        text = _parse_quoted(value, self.path, lineno)

        if keyword == "msgctxt":
            if block.msgctxt is not None:
                raise self._error("duplicate msgctxt", lineno)
            block.msgctxt = text
            block.current = ("msgctxt", 0)
        elif keyword == "msgid":
            block.msgid = text
            block.current = ("msgid", 0)
        elif keyword == "msgid_plural":
            if block.msgid is None or block.msgstr is not None or block.msgstr_plural:
                raise self._error("msgid_plural must follow msgid", lineno)
            if block.msgid_plural is not None:
                raise self._error("duplicate msgid_plural", lineno)
            block.msgid_plural = text
            block.current = ("msgid_plural", 0)
        elif index < 0:
            if block.msgid is None:
                raise self._error("msgstr without msgid", lineno)
            if block.msgid_plural is not None:
                raise self._error("plural entry requires indexed msgstr[N]", lineno)
            if block.msgstr is not None:
                raise self._error("duplicate msgstr", lineno)
            block.msgstr = text
            block.current = ("msgstr", 0)
        else:
            if block.msgid is None:
                raise self._error("msgstr without msgid", lineno)
            if block.msgid_plural is None:
                raise self._error("indexed msgstr on a singular entry", lineno)
            if index != len(block.msgstr_plural):
                raise self._error(
                    f"expected msgstr[{len(block.msgstr_plural)}], got msgstr[{index}]",
                    lineno,
                )
            block.msgstr_plural.append(text)
            block.current = ("msgstr_plural", index)

    def _finish(self, lineno: int) -> None:
        block = self.block
        self.block = _Block(lineno)
        if block.msgid is None:
            if block.msgctxt is not None:
                raise self._error("msgctxt without msgid", block.start_line)
            return

        if block.msgid == "" and block.msgctxt is None and not block.obsolete:
            if self.seen_header:
                raise self._error("duplicate header entry", block.start_line)
            self.seen_header = True
            self.catalog.headers = _parse_headers(block.msgstr or "")
            self.catalog.header_comments = block.translator_comments
            return

        if block.msgid_plural is not None:
            msgstr = block.msgstr_plural or ["", ""]
        else:
            msgstr = [block.msgstr or ""]

        flags = list(block.flags)
        if block.obsolete and OBSOLETE not in flags:
            flags.append(OBSOLETE)
        entry = Entry(
            msgid=block.msgid,
            msgid_plural=block.msgid_plural,
            msgctxt=block.msgctxt,
            msgstr=msgstr,
            locations=block.locations,
            comments=block.comments,
            translator_comments=block.translator_comments,
            flags=flags,
            previous_msgid=block.previous_msgid,
            obsolete_merges=max(block.obsolete_merges, 1) if OBSOLETE in flags else 0,
        )
        if entry.key in self.catalog.entries:
            raise self._error(f"duplicate entry {block.msgid!r}", block.start_line)
        self.catalog.entries[entry.key] = entry


def parse_catalog(
    text: str,
    domain: str,
    locale: Optional[str] = None,
    path: str = "<string>",
) -> Catalog:
    """Parse catalog text.

    Args:
        text: File content.
        domain: Text domain of the catalog.
        locale: Locale, or None for a template.
        path: Source name used in error messages.

    Returns:
        Parsed Catalog.

    Raises:
        CatalogFormatError: If the text is malformed (with line number).
    """
    return _Reader(text, Catalog(domain=domain, locale=locale), path).read()


def read_catalog(
    path: PathLike,
    domain: Optional[str] = None,
    locale: Optional[str] = None,
) -> Catalog:
    """Read a catalog file.

    Domain and locale default to the values encoded in the file name.

    Raises:
        CatalogFormatError: If the file is malformed or not valid UTF-8.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    if domain is None:
        domain, name_locale = split_catalog_filename(path.name)
        locale = locale if locale is not None else name_locale
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise CatalogFormatError(f"invalid UTF-8: {e.reason}", str(path), 0) from e
    return parse_catalog(text, domain, locale, path=str(path))


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def _escape(value: str) -> str:
    return "".join(_UNESCAPES.get(ch, ch) for ch in value)


def _format_string(keyword: str, value: str, prefix: str = "") -> List[str]:
    """Format a keyword line, splitting multi-line values after each newline."""
    segments = value.split("\n")
    if len(segments) <= 2 and not segments[-1] or len(segments) == 1:
        return [f'{prefix}{keyword} "{_escape(value)}"']
    lines = [f'{prefix}{keyword} ""']
    for i, segment in enumerate(segments):
        text = segment + ("\n" if i < len(segments) - 1 else "")
        if text:
            lines.append(f'{prefix}"{_escape(text)}"')
    return lines


def _format_locations(locations: List[Location], width: int = 78) -> List[str]:
    lines: List[str] = []
    current = "#:"
    for file_name, line in locations:
        if any(ch.isspace() for ch in file_name):
            file_name = f"{_ISOLATE_START}{file_name}{_ISOLATE_END}"
        reference = f"{file_name}:{line}" if line else file_name
        if current != "#:" and len(current) + 1 + len(reference) > width:
            lines.append(current)
            current = "#:"
        current += f" {reference}"
    if current != "#:":
        lines.append(current)
    return lines


def _format_entry(entry: Entry) -> List[str]:
    lines: List[str] = []
    for comment in entry.translator_comments:
        lines.append(f"# {comment}" if comment else "#")
    for comment in entry.comments:
        lines.append(f"#. {comment}")
    lines.extend(_format_locations(entry.locations))
    flags = [flag for flag in entry.flags if flag != OBSOLETE]
    if flags:
        lines.append("#, " + ", ".join(flags))
    prefix = ""
    if entry.is_obsolete:
        lines.append(f"#% obsolete-merges: {entry.obsolete_merges}")
        prefix = "#~ "
    if entry.previous_msgid is not None:
        marker = "#~| " if entry.is_obsolete else "#| "
        lines.extend(_format_string("msgid", entry.previous_msgid, marker))
    if entry.msgctxt is not None:
        lines.extend(_format_string("msgctxt", entry.msgctxt, prefix))
    lines.extend(_format_string("msgid", entry.msgid, prefix))
    if entry.is_plural:
        lines.extend(_format_string("msgid_plural", entry.msgid_plural, prefix))
        for index, value in enumerate(entry.msgstr):
            lines.extend(_format_string(f"msgstr[{index}]", value, prefix))
    else:
        lines.extend(_format_string("msgstr", entry.msgstr[0], prefix))
    return lines


def format_catalog(catalog: Catalog) -> str:
    """Render a catalog to its file format."""
    blocks: List[List[str]] = []
    header: List[str] = []
    for comment in catalog.header_comments:
        header.append(f"# {comment}" if comment else "#")
    header.append('msgid ""')
    header.extend(
        _format_string(
            "msgstr", "".join(f"{k}: {v}\n" for k, v in catalog.headers.items())
        )
    )
    blocks.append(header)
    for entry in catalog.entries.values():
        blocks.append(_format_entry(entry))
    return "\n\n".join("\n".join(block) for block in blocks) + "\n"


def write_catalog(catalog: Catalog, path: PathLike) -> Path:
    """Write a catalog atomically (temp file + rename).

    Returns:
        The written path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(format_catalog(catalog))
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return path
