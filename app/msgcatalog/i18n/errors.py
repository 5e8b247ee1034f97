"""Exceptions for the catalog engine.

Build-time errors (scan, template, merge) are collected and reported in
aggregate by the pipeline. Runtime lookups never raise; a miss is recorded
as a `LookupMiss` value, not an exception.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

Location = Tuple[str, int]


class CatalogError(Exception):
    """Base exception for all catalog engine errors.

    Example:
        try:
            scan_and_merge(["messages"], ["fr"], source_root)
        except CatalogError as e:
            logger.error("catalog_error", error=str(e))
    """

    pass


class ScanError(CatalogError):
    """A source file could not be scanned.

    Per-file and recoverable: the file's occurrences are dropped and the
    scan continues. Raised directly only for structural failures such as an
    unreadable root directory.

    Attributes:
        path: File or directory that failed.
        reason: Short description of the failure.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class PluralConflict:
    """One key used both as a singular-only and as a plural message."""

    domain: str
    key: str
    first: Location
    second: Location
    detail: str = ""

    def __str__(self) -> str:
        where = f"{self.first[0]}:{self.first[1]} and {self.second[0]}:{self.second[1]}"
        text = f"[{self.domain}] {self.key!r} defined inconsistently at {where}"
        return f"{text} ({self.detail})" if self.detail else text


class AmbiguousPluralDefinition(CatalogError):
    """Pluralizability of a msgid is not globally consistent.

    Fatal for the template build; requires a source fix.

    Attributes:
        conflicts: Every conflict found during the build.
    """

    def __init__(self, conflicts: List[PluralConflict]):
        self.conflicts = list(conflicts)
        lines = "; ".join(str(c) for c in self.conflicts)
        super().__init__(f"Ambiguous plural definition: {lines}")


class RuleSyntaxError(CatalogError):
    """A plural rule expression could not be parsed.

    Fatal for the locale it belongs to; other locales proceed.

    Attributes:
        locale: Locale whose rule is malformed (None when unknown).
        token: Offending token text ("" at end of input).
        position: Character offset of the token in the expression.
    """

    def __init__(
        self,
        message: str,
        locale: Optional[str] = None,
        token: str = "",
        position: int = -1,
    ):
        self.locale = locale
        self.token = token
        self.position = position
        self.detail = message
        where = f" at position {position}" if position >= 0 else ""
        shown = repr(token) if token else "end of input"
        super().__init__(
            f"Invalid plural rule for locale {locale or '<unknown>'}: "
            f"{message} (token {shown}{where})"
        )


class CatalogFormatError(CatalogError):
    """A catalog file is malformed.

    Fatal for that file only; the locale degrades to source-text fallback.

    Attributes:
        path: Catalog file path (or "<string>").
        line: 1-based line number where the problem was detected.
    """

    def __init__(self, message: str, path: str = "<string>", line: int = 0):
        self.path = path
        self.line = line
        self.detail = message
        super().__init__(f"{path}:{line}: {message}")


@dataclass(frozen=True)
class LookupMiss:
    """A runtime lookup that fell back to source text. Not an error."""

    domain: str
    locale: str
    key: str
