"""msgcatalog - gettext-style translation catalogs for Python services."""

__version__ = "1.0.0"
