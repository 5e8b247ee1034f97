"""Catalog lifecycle and runtime lookup settings."""

import json
from typing import Any, Optional

from pydantic import Field, field_validator

from msgcatalog.configuration.base import ComponentSettings


class CatalogSettings(ComponentSettings):
    """Configuration for catalog files, merging and runtime lookups.

    Environment Variables:
        CATALOG_DIR: Directory holding `<domain>.pot` and `<domain>.<locale>.po`
        CATALOG_DEFAULT_DOMAIN: Domain for call sites that do not name one
        CATALOG_USE_FUZZY: Serve fuzzy translations at lookup time (default: True)
        CATALOG_TRACK_MISSES: Count lookups that fell back to source text
        CATALOG_OBSOLETE_RETENTION_MERGES: Prune obsolete entries after this many
            consecutive merges (unset: keep indefinitely)
        CATALOG_FUZZY_MATCHING: Seed new entries from similar obsolete ones
        CATALOG_FUZZY_CUTOFF: Similarity ratio required for a near match
        CATALOG_PLURAL_FORMS: JSON mapping locale -> Plural-Forms header

    Plural Forms Configuration (CATALOG_PLURAL_FORMS):
        Overrides the built-in table for specific locales:
            {
                "fr": "nplurals=2; plural=(n > 1);",
                "pl": "nplurals=3; plural=(n==1 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2);"
            }

    Example:
        ```python
        from msgcatalog.configuration import get_settings

        settings = get_settings()
        if settings.catalog.obsolete_retention_merges is not None:
            # Prune after merging...
        ```
    """

    catalog_dir: str = Field(
        default="locales",
        alias="CATALOG_DIR",
        description="Directory containing catalog files",
    )
    default_domain: str = Field(
        default="messages",
        alias="CATALOG_DEFAULT_DOMAIN",
        description="Text domain for call sites without an explicit domain",
    )
    use_fuzzy: bool = Field(
        default=True,
        alias="CATALOG_USE_FUZZY",
        description="Serve translations flagged fuzzy",
    )
    track_misses: bool = Field(
        default=True,
        alias="CATALOG_TRACK_MISSES",
        description="Count lookups that fell back to source text",
    )
    obsolete_retention_merges: Optional[int] = Field(
        default=None,
        alias="CATALOG_OBSOLETE_RETENTION_MERGES",
        ge=1,
        description="Consecutive obsolete merges before an entry is pruned",
    )
    fuzzy_matching: bool = Field(
        default=False,
        alias="CATALOG_FUZZY_MATCHING",
        description="Seed new entries from similar, newly obsolete entries",
    )
    fuzzy_cutoff: float = Field(
        default=0.8,
        alias="CATALOG_FUZZY_CUTOFF",
        ge=0.0,
        le=1.0,
        description="Minimum similarity ratio for a near match",
    )
    plural_forms: dict[str, str] = Field(
        default_factory=dict,
        alias="CATALOG_PLURAL_FORMS",
        description="Per-locale Plural-Forms overrides",
    )

    @field_validator("plural_forms", mode="before")
    @classmethod
    def _parse_plural_forms(cls, v: Optional[Any]) -> Any:
        """Parse CATALOG_PLURAL_FORMS from JSON string or dict."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return v
        if isinstance(v, str):
            s = v.strip()
            try:
                return json.loads(s) if s else {}
            except (json.JSONDecodeError, ValueError) as e:
                raise ValueError(
                    f"Invalid CATALOG_PLURAL_FORMS JSON: {e} (value: {s[:80]}...)"
                ) from e
        raise ValueError("CATALOG_PLURAL_FORMS must be a JSON string or a mapping")
