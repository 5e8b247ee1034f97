"""Runtime translation lookups.

Every lookup names its (domain, locale) explicitly; there is no ambient
"current locale". Lookups never raise for missing data: an unknown domain,
locale or key falls back to the source text.
"""

import re
import threading
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from msgcatalog.i18n.errors import LookupMiss
from msgcatalog.i18n.models import make_key
from msgcatalog.i18n.store import CatalogSnapshot, CatalogStore
from msgcatalog.logging import get_module_logger

logger = get_module_logger()

_PLACEHOLDER = re.compile(r"%\{(\w+)\}")

# Counter key shared by every (domain, locale) pair with no loaded catalog
UNKNOWN_CATALOG: Tuple[str, str] = ("*", "*")


def interpolate(text: str, variables: Optional[Mapping[str, Any]]) -> str:
    """Substitute `%{name}` placeholders.

    Placeholders without a matching variable are left intact.
    """
    if not variables:
        return text

    def replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        return str(variables[name]) if name in variables else match.group(0)

    return _PLACEHOLDER.sub(replace, text)


class Translator:
    """Service for looking up translated messages in a CatalogStore.

    Attributes:
        store: CatalogStore holding the current snapshot.
        track_misses: Whether fallbacks are counted per (domain, locale).
    """

    def __init__(self, store: CatalogStore, track_misses: bool = True):
        self.store = store
        self.track_misses = track_misses
        self._misses: Counter = Counter()
        self._misses_lock = threading.Lock()

    def translate(
        self,
        domain: str,
        locale: str,
        msgid: str,
        context: Optional[str] = None,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Translate a singular message.

        Args:
            domain: Text domain.
            locale: Target locale.
            msgid: Source text.
            context: Optional message context.
            variables: Optional values for `%{name}` placeholders.

        Returns:
            msgstr[0] when present and non-empty, otherwise msgid.
        """
        loaded = self.store.snapshot.get(domain, locale)
        key = make_key(msgid, context)
        forms = loaded.forms(key) if loaded is not None else None
        if forms and forms[0]:
            return interpolate(forms[0], variables)
        self._record_miss(LookupMiss(domain, locale, key), known=loaded is not None)
        return interpolate(msgid, variables)

    def translate_plural(
        self,
        domain: str,
        locale: str,
        msgid: str,
        msgid_plural: str,
        count: int,
        context: Optional[str] = None,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Translate a plural message for a count.

        The form index comes from the locale's plural rule applied to
        abs(count). When that form is missing or empty the source text is
        returned: msgid when the count is 1, msgid_plural otherwise.

        Args:
            domain: Text domain.
            locale: Target locale.
            msgid: Singular source text.
            msgid_plural: Plural source text.
            count: Cardinal selecting the plural form.
            context: Optional message context.
            variables: Optional values for `%{name}` placeholders.

        Returns:
            Selected translated form, or the source text.
        """
        n = abs(int(count))
        loaded = self.store.snapshot.get(domain, locale)
        key = make_key(msgid, context)
        forms = loaded.forms(key) if loaded is not None else None
        if forms:
            index = loaded.rule(n)
            if index < len(forms) and forms[index]:
                return interpolate(forms[index], variables)
        self._record_miss(LookupMiss(domain, locale, key), known=loaded is not None)
        return interpolate(msgid if n == 1 else msgid_plural, variables)

    def misses(self) -> Dict[Tuple[str, str], int]:
        """Fallback counts per loaded (domain, locale) since startup.

        Fallbacks for pairs with no loaded catalog are counted together
        under UNKNOWN_CATALOG so the counter stays bounded.
        """
        with self._misses_lock:
            return dict(self._misses)

    def reset_misses(self) -> None:
        with self._misses_lock:
            self._misses.clear()

    def reload(
        self, paths: Optional[Sequence[Union[str, Path]]] = None
    ) -> CatalogSnapshot:
        """Reload catalogs; rediscovers every file when no paths are given."""
        snapshot = self.store.reload(paths)
        logger.info(
            "translator_reloaded",
            catalog_count=len(snapshot),
            error_count=len(snapshot.errors),
        )
        return snapshot

    def available(self) -> list[Tuple[str, str]]:
        """(domain, locale) pairs in the current snapshot."""
        return sorted(self.store.snapshot.catalogs)

    def _record_miss(self, miss: LookupMiss, known: bool) -> None:
        if not self.track_misses:
            return
        bucket = (miss.domain, miss.locale) if known else UNKNOWN_CATALOG
        with self._misses_lock:
            self._misses[bucket] += 1
        logger.debug(
            "translation_missing",
            domain=miss.domain,
            locale=miss.locale,
            key=miss.key,
        )
