"""In-memory catalog store with atomic snapshot replacement.

Readers take one reference to the current snapshot per lookup and never
lock. Reload builds a complete snapshot off to the side and swaps the
reference; a failure before the swap leaves the old snapshot in place.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional, Sequence, Tuple, Union

from msgcatalog.i18n.errors import CatalogError
from msgcatalog.i18n.plurals import PluralRule
from msgcatalog.logging import get_module_logger

if TYPE_CHECKING:
    from msgcatalog.i18n.loader import CatalogLoader

logger = get_module_logger()

CatalogId = Tuple[str, str]


@dataclass(frozen=True)
class LoadedCatalog:
    """Lookup-ready view of one locale catalog.

    Attributes:
        domain: Text domain.
        locale: Locale identifier.
        rule: Plural rule used to select msgstr forms.
        messages: Read-only mapping of catalog key -> msgstr forms.
        path: File the catalog was loaded from.
    """

    domain: str
    locale: str
    rule: PluralRule
    messages: Mapping[str, Tuple[str, ...]]
    path: Optional[str] = None

    def forms(self, key: str) -> Optional[Tuple[str, ...]]:
        return self.messages.get(key)


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable set of loaded catalogs.

    Attributes:
        catalogs: Read-only mapping of (domain, locale) -> LoadedCatalog.
        errors: Per-file load failures; those catalogs are absent.
        created_at: When the snapshot was built.
    """

    catalogs: Mapping[CatalogId, LoadedCatalog] = field(
        default_factory=lambda: MappingProxyType({})
    )
    errors: Tuple[CatalogError, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def get(self, domain: str, locale: str) -> Optional[LoadedCatalog]:
        return self.catalogs.get((domain, locale))

    def __contains__(self, item: object) -> bool:
        return item in self.catalogs

    def __len__(self) -> int:
        return len(self.catalogs)


class CatalogStore:
    """Holds the current snapshot and replaces it atomically.

    Attributes:
        loader: Builds snapshots from catalog files.
    """

    def __init__(
        self,
        loader: "CatalogLoader",
        snapshot: Optional[CatalogSnapshot] = None,
    ):
        self.loader = loader
        self._snapshot = snapshot or CatalogSnapshot()
        self._write_lock = threading.Lock()

    @property
    def snapshot(self) -> CatalogSnapshot:
        """The current snapshot. Safe to read without locking."""
        return self._snapshot

    def publish(self, snapshot: CatalogSnapshot) -> None:
        """Replace the current snapshot."""
        with self._write_lock:
            self._swap(snapshot)

    def reload(
        self, paths: Optional[Sequence[Union[str, Path]]] = None
    ) -> CatalogSnapshot:
        """Load catalogs and publish a new snapshot.

        Args:
            paths: Catalog files to (re)load on top of the current snapshot.
                When None, every catalog file is rediscovered and the
                snapshot is rebuilt from scratch.

        Returns:
            The published snapshot.
        """
        with self._write_lock:
            if paths is None:
                snapshot = self.loader.load(self.loader.discover())
            else:
                snapshot = self.loader.load(paths, base=self._snapshot)
            self._swap(snapshot)
        return snapshot

    def _swap(self, snapshot: CatalogSnapshot) -> None:
        self._snapshot = snapshot
        logger.info(
            "catalog_snapshot_published",
            catalog_count=len(snapshot),
            error_count=len(snapshot.errors),
        )
