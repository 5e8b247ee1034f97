"""Feature-level fixtures for catalog engine tests.

Provides sample source trees, catalog directories and settings pointing at
them.
"""

import pytest

from msgcatalog.configuration import CatalogSettings, ScannerSettings, Settings
from tests.factories.i18n import write_source, write_text_catalog

SAMPLE_VIEWS = '''from app.i18n import _, dgettext, dngettext, ngettext, npgettext, pgettext


def landing(request, count, name):
    # TRANSLATORS: greeting on the landing page
    title = _("Welcome")
    # unrelated note
    logout = _("Log out")
    visitors = ngettext("%{n} Visitor", "%{n} Visitors", count)
    menu = pgettext("menu", "Open")
    files = npgettext("toolbar", "%{n} file", "%{n} files", count)
    admin = dgettext("admin", "Dashboard")
    admins = dngettext("admin", "%{n} admin", "%{n} admins", count)
    dynamic = _(name)
    formatted = _(f"Hello {name}")
    profile = request.translator.gettext("Profile")
    joined = _("Multi " "part")
    return title, logout, visitors, menu, files, admin, admins, dynamic, formatted
'''

FR_MESSAGES = r'''msgid ""
msgstr ""
"Language: fr\n"
"Plural-Forms: nplurals=2; plural=(n > 1);\n"

msgid "Welcome"
msgstr "Bienvenue"

msgid "%{n} Visitor"
msgid_plural "%{n} Visitors"
msgstr[0] "%{n} Visiteur"
msgstr[1] "%{n} Visiteurs"

msgctxt "menu"
msgid "Open"
msgstr "Ouvrir"

#, fuzzy
msgid "Log out"
msgstr "Déconnexion"

msgid "Settings"
msgstr ""

#~ msgid "Old text"
#~ msgstr "Ancien texte"
'''


@pytest.fixture
def source_tree(tmp_path):
    """Create a small source tree.

    Returns a directory structure like:
    - app/views.py      (every call form)
    - app/models.py     (one plain call)
    - node_modules/x.py (excluded directory)
    """
    root = tmp_path / "src"
    write_source(root, "app/views.py", SAMPLE_VIEWS)
    write_source(root, "app/models.py", 'from app.i18n import _\n\nLABEL = _("Welcome")\n')
    write_source(root, "node_modules/x.py", '_("Vendored")\n')
    return root


@pytest.fixture
def catalog_dir(tmp_path):
    """Create a catalog directory with a French messages catalog."""
    directory = tmp_path / "locales"
    write_text_catalog(directory, "messages.fr.po", FR_MESSAGES)
    return directory


@pytest.fixture
def make_settings(tmp_path):
    """Build Settings pointing at a catalog directory."""

    def _make(catalog_dir=None, **catalog_overrides):
        catalog = CatalogSettings(
            CATALOG_DIR=str(catalog_dir or tmp_path / "locales"),
            **catalog_overrides,
        )
        scanner = ScannerSettings(SCANNER_MAX_WORKERS=2)
        return Settings(catalog=catalog, scanner=scanner)

    return _make
