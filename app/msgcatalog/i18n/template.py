"""Template builder: folds scanned occurrences into per-domain templates."""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from msgcatalog.i18n.errors import AmbiguousPluralDefinition, PluralConflict
from msgcatalog.i18n.models import Catalog, Entry, Occurrence
from msgcatalog.logging import get_module_logger

logger = get_module_logger()

PROJECT_ID = "msgcatalog"


def template_headers(domain: str, now: Optional[datetime] = None) -> Dict[str, str]:
    """Return the header fields written at the top of a template."""
    now = now or datetime.now(timezone.utc)
    return {
        "Project-Id-Version": PROJECT_ID,
        "POT-Creation-Date": now.strftime("%Y-%m-%d %H:%M%z"),
        "MIME-Version": "1.0",
        "Content-Type": "text/plain; charset=UTF-8",
        "Content-Transfer-Encoding": "8bit",
        "X-Domain": domain,
    }


class TemplateBuilder:
    """Builds one template catalog per text domain.

    Templates are regenerated from scratch on every build; they hold no
    translations. Occurrences are processed in (path, line) order so entry
    order follows the first location of each message.

    Attributes:
        default_domain: Domain for occurrences that do not name one.
    """

    def __init__(self, default_domain: str = "messages"):
        self.default_domain = default_domain

    def build(
        self,
        occurrences: Iterable[Occurrence],
        domains: Optional[Sequence[str]] = None,
    ) -> Dict[str, Catalog]:
        """Build templates from occurrences.

        Args:
            occurrences: Scanner output, in any order.
            domains: Domains to build. Occurrences in other domains are
                ignored and every listed domain gets a template, possibly
                empty. When None, every domain seen gets a template.

        Returns:
            Dict mapping domain -> template Catalog.

        Raises:
            AmbiguousPluralDefinition: If any key is used both as singular
                and plural, or with two different plural texts. All
                conflicts of the build are reported together.
        """
        templates: Dict[str, Catalog] = {}
        if domains is not None:
            for domain in domains:
                templates[domain] = self._new_template(domain)

        conflicts: List[PluralConflict] = []
        ordered = sorted(occurrences, key=lambda o: (o.path, o.line))
        for occurrence in ordered:
            domain = occurrence.domain or self.default_domain
            if domain not in templates:
                if domains is not None:
                    continue
                templates[domain] = self._new_template(domain)
            conflict = self._add(templates[domain], occurrence)
            if conflict is not None:
                conflicts.append(conflict)

        if conflicts:
            for conflict in conflicts:
                logger.error(
                    "ambiguous_plural_definition",
                    domain=conflict.domain,
                    key=conflict.key,
                    first=f"{conflict.first[0]}:{conflict.first[1]}",
                    second=f"{conflict.second[0]}:{conflict.second[1]}",
                )
            raise AmbiguousPluralDefinition(conflicts)

        for domain, template in templates.items():
            logger.info(
                "template_built",
                domain=domain,
                entry_count=len(template),
            )
        return templates

    def _new_template(self, domain: str) -> Catalog:
        return Catalog(domain=domain, headers=template_headers(domain))

    def _add(self, template: Catalog, occurrence: Occurrence) -> Optional[PluralConflict]:
        if occurrence.msgid == "" and occurrence.msgctxt is None:
            return None
        entry = template.get(occurrence.key)
        if entry is None:
            template.add(
                Entry(
                    msgid=occurrence.msgid,
                    msgid_plural=occurrence.msgid_plural,
                    msgctxt=occurrence.msgctxt,
                    locations=[occurrence.location],
                    comments=list(occurrence.comments),
                )
            )
            return None

        if entry.msgid_plural != occurrence.msgid_plural:
            if entry.is_plural and occurrence.msgid_plural is not None:
                detail = (
                    f"plural text {entry.msgid_plural!r} "
                    f"vs {occurrence.msgid_plural!r}"
                )
            else:
                detail = "used as both singular and plural"
            return PluralConflict(
                domain=template.domain,
                key=occurrence.key,
                first=entry.locations[0],
                second=occurrence.location,
                detail=detail,
            )

        entry.add_location(occurrence.location)
        for comment in occurrence.comments:
            if comment not in entry.comments:
                entry.comments.append(comment)
        return None
