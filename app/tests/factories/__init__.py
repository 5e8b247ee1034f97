"""Test data factories for deterministic test data generation."""

from tests.factories.i18n import (
    make_catalog,
    make_entry,
    make_fr_catalog,
    make_occurrence,
    make_template,
    write_source,
    write_text_catalog,
)

__all__ = [
    "make_catalog",
    "make_entry",
    "make_fr_catalog",
    "make_occurrence",
    "make_template",
    "write_source",
    "write_text_catalog",
]
