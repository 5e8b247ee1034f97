"""Marker scanner: extracts translatable call sites from source files.

Walks a source tree, parses each Python file with `ast` and collects every
call to a translation keyword whose message arguments are string literals.
Developer comments come from `tokenize`: a block of comment lines directly
above a call is attached when it starts with one of the configured tags.
"""

import ast
import io
import os
import tokenize
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from msgcatalog.i18n.errors import ScanError
from msgcatalog.i18n.models import CallForm, Occurrence
from msgcatalog.logging import get_module_logger

logger = get_module_logger()


@dataclass(frozen=True)
class KeywordSpec:
    """Argument positions of a translation keyword.

    Attributes:
        form: Call form produced by the keyword.
        msgid: Position of the singular text.
        msgid_plural: Position of the plural text, if any.
        msgctxt: Position of the context, if any.
        domain: Position of the explicit domain, if any.
    """

    form: CallForm
    msgid: int
    msgid_plural: Optional[int] = None
    msgctxt: Optional[int] = None
    domain: Optional[int] = None

    @property
    def required(self) -> int:
        """Number of positional arguments the call must provide."""
        positions = [self.msgid, self.msgid_plural, self.msgctxt, self.domain]
        return max(p for p in positions if p is not None) + 1


_SINGULAR = KeywordSpec(CallForm.SINGULAR, msgid=0)
_PLURAL = KeywordSpec(CallForm.PLURAL, msgid=0, msgid_plural=1)
_CONTEXTUAL = KeywordSpec(CallForm.CONTEXTUAL, msgid=1, msgctxt=0)
_CONTEXTUAL_PLURAL = KeywordSpec(
    CallForm.CONTEXTUAL_PLURAL, msgid=1, msgid_plural=2, msgctxt=0
)
_DOMAIN_SINGULAR = KeywordSpec(CallForm.SINGULAR, msgid=1, domain=0)
_DOMAIN_PLURAL = KeywordSpec(CallForm.PLURAL, msgid=1, msgid_plural=2, domain=0)

DEFAULT_KEYWORDS: Dict[str, KeywordSpec] = {
    "_": _SINGULAR,
    "gettext": _SINGULAR,
    "N_": _SINGULAR,
    "ngettext": _PLURAL,
    "n_": _PLURAL,
    "pgettext": _CONTEXTUAL,
    "p_": _CONTEXTUAL,
    "npgettext": _CONTEXTUAL_PLURAL,
    "np_": _CONTEXTUAL_PLURAL,
    "dgettext": _DOMAIN_SINGULAR,
    "d_": _DOMAIN_SINGULAR,
    "dngettext": _DOMAIN_PLURAL,
    "dn_": _DOMAIN_PLURAL,
}


def _call_name(node: ast.Call) -> Optional[str]:
    if isinstance(node.func, ast.Name):
        return node.func.id
    if isinstance(node.func, ast.Attribute):
        return node.func.attr
    return None


def _literal(node: ast.expr) -> Optional[str]:
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value
    return None


def _collect_comments(source: str) -> Dict[int, str]:
    """Map line number -> text of comment-only lines."""
    comments: Dict[int, str] = {}
    tokens = tokenize.generate_tokens(io.StringIO(source).readline)
    for token in tokens:
        if token.type == tokenize.COMMENT and token.line.strip().startswith("#"):
            comments[token.start[0]] = token.string.lstrip("#").strip()
    return comments


def _comments_above(
    line: int, comments: Dict[int, str], tags: Sequence[str]
) -> Tuple[str, ...]:
    """Return the tagged comment block that ends on the line above `line`."""
    block: List[str] = []
    current = line - 1
    while current in comments:
        block.insert(0, comments[current])
        current -= 1
    for index, text in enumerate(block):
        if any(text.startswith(tag) for tag in tags):
            return tuple(block[index:])
    return ()


class ScanRun:
    """Lazy, restartable scan of one source tree.

    Iterating walks the tree again and yields occurrences in sorted path
    order, then line order within a file. Per-file failures are collected in
    `errors` (reset on every iteration) and the file's occurrences dropped.

    Attributes:
        root: Scanned root directory.
        errors: ScanErrors from the most recent iteration.
        files_scanned: Files visited by the most recent iteration.
    """

    def __init__(self, scanner: "SourceScanner", root: Path):
        self.scanner = scanner
        self.root = root
        self.errors: List[ScanError] = []
        self.files_scanned = 0

    def __iter__(self) -> Iterator[Occurrence]:
        self.errors = []
        self.files_scanned = 0
        paths = self.scanner.discover(self.root)
        if not paths:
            return
        executor = ThreadPoolExecutor(
            max_workers=self.scanner.max_workers, thread_name_prefix="scanner"
        )
        try:
            futures: List[Tuple[Path, Future]] = [
                (path, executor.submit(self.scanner.scan_file, path, self.root))
                for path in paths
            ]
            for path, future in futures:
                self.files_scanned += 1
                relative = path.relative_to(self.root).as_posix()
                try:
                    occurrences = future.result(timeout=self.scanner.file_timeout)
                except FutureTimeoutError:
                    future.cancel()
                    self._record(
                        ScanError(
                            relative,
                            f"timed out after {self.scanner.file_timeout}s",
                        )
                    )
                    continue
                except ScanError as e:
                    self._record(e)
                    continue
                yield from occurrences
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _record(self, error: ScanError) -> None:
        self.errors.append(error)
        logger.warning("scan_file_failed", path=error.path, reason=error.reason)


class SourceScanner:
    """Finds literal translation calls in a source tree.

    Attributes:
        keywords: Keyword name -> argument positions.
        extensions: File suffixes to scan.
        exclude_dirs: Directory names never descended into.
        comment_tags: Comment prefixes that mark developer comments.
        max_file_bytes: Files larger than this are reported and skipped.
        file_timeout: Seconds to wait for a single file's results.
        max_workers: Size of the worker pool.
    """

    def __init__(
        self,
        keywords: Optional[Dict[str, KeywordSpec]] = None,
        extensions: Sequence[str] = (".py",),
        exclude_dirs: Sequence[str] = (),
        comment_tags: Sequence[str] = ("TRANSLATORS:",),
        max_file_bytes: int = 1024 * 1024,
        file_timeout: float = 10.0,
        max_workers: int = 4,
    ):
        self.keywords = dict(keywords if keywords is not None else DEFAULT_KEYWORDS)
        self.extensions = tuple(extensions)
        self.exclude_dirs = frozenset(exclude_dirs)
        self.comment_tags = tuple(comment_tags)
        self.max_file_bytes = max_file_bytes
        self.file_timeout = file_timeout
        self.max_workers = max_workers

    def scan(self, root: Union[str, Path]) -> ScanRun:
        """Scan a source tree.

        Args:
            root: Directory to scan.

        Returns:
            ScanRun that performs the scan when iterated.

        Raises:
            ScanError: If the root is missing or unreadable.
        """
        root = Path(root)
        if not root.is_dir():
            raise ScanError(str(root), "source root is not a directory")
        try:
            os.listdir(root)
        except OSError as e:
            raise ScanError(str(root), f"source root is unreadable: {e}") from e
        return ScanRun(self, root)

    def discover(self, root: Path) -> List[Path]:
        """List files to scan under root, sorted by relative path."""
        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.exclude_dirs)
            for name in filenames:
                if name.endswith(self.extensions):
                    found.append(Path(dirpath) / name)
        return sorted(found, key=lambda p: p.relative_to(root).as_posix())

    def scan_file(self, path: Path, root: Path) -> List[Occurrence]:
        """Extract occurrences from one file.

        Raises:
            ScanError: If the file is too large, unreadable, undecodable or
                not valid Python.
        """
        relative = path.relative_to(root).as_posix()
        try:
            size = path.stat().st_size
            if size > self.max_file_bytes:
                raise ScanError(
                    relative, f"file size {size} exceeds {self.max_file_bytes} bytes"
                )
            data = path.read_bytes()
        except OSError as e:
            raise ScanError(relative, f"unreadable: {e.strerror or e}") from e

        try:
            encoding, _ = tokenize.detect_encoding(io.BytesIO(data).readline)
            source = data.decode(encoding)
        except (SyntaxError, UnicodeDecodeError, LookupError) as e:
            raise ScanError(relative, f"cannot decode: {e}") from e

        try:
            tree = ast.parse(source, filename=relative)
            comments = _collect_comments(source) if self.comment_tags else {}
        except (SyntaxError, ValueError, tokenize.TokenError) as e:
            raise ScanError(relative, f"invalid syntax: {e}") from e

        return self.extract(tree, relative, comments)

    def extract(
        self, tree: ast.AST, relative: str, comments: Dict[int, str]
    ) -> List[Occurrence]:
        """Collect occurrences from a parsed module, in source order."""
        calls = [
            node
            for node in ast.walk(tree)
            if isinstance(node, ast.Call) and _call_name(node) in self.keywords
        ]
        calls.sort(key=lambda node: (node.lineno, node.col_offset))

        occurrences: List[Occurrence] = []
        for node in calls:
            spec = self.keywords[_call_name(node)]
            occurrence = self._occurrence(node, spec, relative, comments)
            if occurrence is not None:
                occurrences.append(occurrence)
        return occurrences

    def _occurrence(
        self,
        node: ast.Call,
        spec: KeywordSpec,
        relative: str,
        comments: Dict[int, str],
    ) -> Optional[Occurrence]:
        if len(node.args) < spec.required or any(
            isinstance(arg, ast.Starred) for arg in node.args[: spec.required]
        ):
            logger.debug("skipped_call_site", path=relative, line=node.lineno)
            return None

        values: Dict[str, Optional[str]] = {}
        for name in ("msgid", "msgid_plural", "msgctxt", "domain"):
            position = getattr(spec, name)
            if position is None:
                values[name] = None
                continue
            value = _literal(node.args[position])
            if value is None:
                logger.debug(
                    "skipped_non_literal_call",
                    path=relative,
                    line=node.lineno,
                    argument=name,
                )
                return None
            values[name] = value

        if values["msgid"] == "" and values["msgctxt"] is None:
            # An empty msgid would collide with the catalog header
            logger.debug("skipped_empty_msgid", path=relative, line=node.lineno)
            return None

        return Occurrence(
            msgid=values["msgid"],
            path=relative,
            line=node.lineno,
            form=spec.form,
            msgid_plural=values["msgid_plural"],
            msgctxt=values["msgctxt"],
            domain=values["domain"],
            comments=_comments_above(node.lineno, comments, self.comment_tags),
        )
