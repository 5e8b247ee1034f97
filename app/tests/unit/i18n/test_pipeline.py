"""Tests for msgcatalog.i18n.pipeline module."""

import pytest

from msgcatalog.i18n.errors import ScanError
from msgcatalog.i18n.merger import PLURAL_TRANSITION
from msgcatalog.i18n.pipeline import PipelineError, scan_and_merge
from msgcatalog.i18n.po import read_catalog
from tests.factories.i18n import write_source, write_text_catalog


@pytest.mark.unit
class TestScanAndMerge:
    """Tests for the scan, build and merge pipeline."""

    def test_writes_templates_and_locale_catalogs(self, source_tree, catalog_dir, make_settings):
        """Every domain gets a template and every locale a merged catalog."""
        report = scan_and_merge(None, ["fr"], source_tree, settings=make_settings(catalog_dir))

        assert report.ok
        assert report.files_scanned == 2
        assert report.templates == {"messages": 7, "admin": 2}
        assert (catalog_dir / "messages.pot").exists()
        assert (catalog_dir / "admin.pot").exists()
        assert (catalog_dir / "admin.fr.po").exists()
        assert report.run_id is not None

    def test_existing_translations_survive(self, source_tree, catalog_dir, make_settings):
        """Translations present before the merge are kept."""
        scan_and_merge(["messages"], ["fr"], source_tree, settings=make_settings(catalog_dir))

        merged = read_catalog(catalog_dir / "messages.fr.po")
        welcome = merged.get("Welcome")
        assert welcome.msgstr == ["Bienvenue"]
        assert welcome.locations == [("app/models.py", 3), ("app/views.py", 6)]
        assert merged.get("%{n} Visitor").msgstr == ["%{n} Visiteur", "%{n} Visiteurs"]
        assert merged.get("Log out").is_fuzzy
        assert merged.headers["Language"] == "fr"

    def test_merge_report_contents(self, source_tree, catalog_dir, make_settings):
        """New, obsolete and untranslated entries are reported."""
        report = scan_and_merge(
            ["messages"], ["fr"], source_tree, settings=make_settings(catalog_dir)
        )

        merge = report.merge_for("messages", "fr")
        assert sorted(merge.new) == sorted(
            ["\x04".join(["toolbar", "%{n} file"]), "Profile", "Multi part"]
        )
        assert merge.obsolete == ["Settings"]
        assert merge.translated == 4
        assert merge.total == 7
        assert report.merge_for("messages", "de") is None

    def test_new_locale_is_created(self, source_tree, catalog_dir, make_settings):
        """A locale without a catalog starts from the template."""
        report = scan_and_merge(
            ["messages"], ["pl"], source_tree, settings=make_settings(catalog_dir)
        )

        created = read_catalog(catalog_dir / "messages.pl.po")
        assert created.get("%{n} Visitor").msgstr == ["", "", ""]
        assert created.headers["Plural-Forms"].startswith("nplurals=3;")
        assert report.merge_for("messages", "pl").untranslated == 7

    def test_plural_transition_is_flagged(self, tmp_path, make_settings):
        """A message that becomes plural keeps its text and is marked fuzzy."""
        source = tmp_path / "src"
        write_source(source, "a.py", "ngettext('Item', 'Items', n)\n")
        catalogs = tmp_path / "locales"
        write_text_catalog(catalogs, "messages.fr.po", 'msgid "Item"\nmsgstr "Article"\n')

        report = scan_and_merge(["messages"], ["fr"], source, settings=make_settings(catalogs))

        entry = read_catalog(catalogs / "messages.fr.po").get("Item")
        assert entry.msgstr == ["Article", ""]
        assert entry.is_fuzzy
        assert report.merge_for("messages", "fr").fuzzy == [("Item", PLURAL_TRANSITION)]

    def test_ambiguous_definitions_write_nothing(self, tmp_path, make_settings):
        """Conflicting plural definitions abort before any file is written."""
        source = tmp_path / "src"
        write_source(source, "a.py", "_('File')\n")
        write_source(source, "b.py", "ngettext('File', 'Files', n)\n")
        catalogs = tmp_path / "locales"

        report = scan_and_merge(None, ["fr"], source, settings=make_settings(catalogs))

        assert not report.ok
        assert report.merges == []
        (error,) = report.errors
        assert error.kind == "AmbiguousPluralDefinition"
        assert error.path == "b.py"
        assert not catalogs.exists()

    def test_malformed_locale_is_skipped(self, source_tree, catalog_dir, make_settings):
        """A broken locale file is reported and left untouched."""
        broken = 'msgid "Welcome\n'
        write_text_catalog(catalog_dir, "messages.de.po", broken)

        report = scan_and_merge(
            ["messages"], ["de", "fr"], source_tree, settings=make_settings(catalog_dir)
        )

        assert (catalog_dir / "messages.de.po").read_text(encoding="utf-8") == broken
        (error,) = report.errors
        assert error.kind == "CatalogFormatError"
        assert error.locale == "de"
        assert report.merge_for("messages", "fr") is not None

    def test_invalid_plural_override_is_skipped(self, source_tree, catalog_dir, make_settings):
        """A locale whose configured rule does not parse is reported."""
        settings = make_settings(
            catalog_dir, CATALOG_PLURAL_FORMS={"xx": "nplurals=2; plural=(n >;"}
        )

        report = scan_and_merge(["messages"], ["xx", "fr"], source_tree, settings=settings)

        assert [e.kind for e in report.errors] == ["RuleSyntaxError"]
        assert not (catalog_dir / "messages.xx.po").exists()
        assert report.merge_for("messages", "fr") is not None

    def test_scan_errors_are_collected(self, source_tree, catalog_dir, make_settings):
        """Files that fail to scan are reported and the run continues."""
        write_source(source_tree, "app/broken.py", "def broken(:\n")

        report = scan_and_merge(
            ["messages"], ["fr"], source_tree, settings=make_settings(catalog_dir)
        )

        assert [e.path for e in report.errors] == ["app/broken.py"]
        assert report.errors[0].kind == "ScanError"
        assert report.merge_for("messages", "fr") is not None

    def test_missing_source_root_raises(self, tmp_path, make_settings):
        """A missing source root is a structural failure."""
        with pytest.raises(ScanError):
            scan_and_merge(None, ["fr"], tmp_path / "missing", settings=make_settings())

    def test_prune_after_retention(self, source_tree, catalog_dir, make_settings):
        """Entries obsolete for the retention window are removed."""
        settings = make_settings(catalog_dir, CATALOG_OBSOLETE_RETENTION_MERGES=2)

        report = scan_and_merge(["messages"], ["fr"], source_tree, settings=settings)

        assert report.merge_for("messages", "fr").pruned == ["Old text"]
        merged = read_catalog(catalog_dir / "messages.fr.po")
        assert "Old text" not in merged
        assert merged.get("Settings").obsolete_merges == 1

    def test_second_run_is_clean(self, source_tree, catalog_dir, make_settings):
        """Re-running on unchanged sources changes no translations."""
        settings = make_settings(catalog_dir)
        scan_and_merge(["messages"], ["fr"], source_tree, settings=settings)
        first = read_catalog(catalog_dir / "messages.fr.po")

        report = scan_and_merge(["messages"], ["fr"], source_tree, settings=settings)
        second = read_catalog(catalog_dir / "messages.fr.po")

        assert report.merge_for("messages", "fr").is_clean
        assert [(e.key, e.msgstr, e.flags) for e in first.active_entries()] == [
            (e.key, e.msgstr, e.flags) for e in second.active_entries()
        ]
        assert second.headers["PO-Revision-Date"] == first.headers["PO-Revision-Date"]

    def test_empty_msgid_does_not_break_reruns(self, tmp_path, make_settings):
        """_('') in the sources never produces a second header entry."""
        source = tmp_path / "src"
        write_source(source, "a.py", "_('')\n_('Welcome')\n")
        catalogs = tmp_path / "locales"
        settings = make_settings(catalogs)

        scan_and_merge(["messages"], ["fr"], source, settings=settings)
        report = scan_and_merge(["messages"], ["fr"], source, settings=settings)

        assert report.ok
        assert report.merge_for("messages", "fr") is not None
        merged = read_catalog(catalogs / "messages.fr.po")
        assert [e.msgid for e in merged.active_entries()] == ["Welcome"]

    def test_uses_configured_catalog_dir(self, source_tree, tmp_path, make_settings):
        """Without an explicit directory the configured one is used."""
        scan_and_merge(["messages"], ["fr"], source_tree, settings=make_settings())
        assert (tmp_path / "locales" / "messages.fr.po").exists()


class TestPipelineReport:
    """Tests for PipelineReport serialization."""

    def test_to_dict(self, source_tree, catalog_dir, make_settings):
        """The report serializes to plain data."""
        report = scan_and_merge(
            ["messages"], ["fr"], source_tree, settings=make_settings(catalog_dir)
        )
        report.errors.append(PipelineError(kind="ScanError", message="x", path="a.py"))

        data = report.to_dict()

        assert data["ok"] is False
        assert data["templates"] == {"messages": 7}
        assert data["merges"][0]["locale"] == "fr"
        assert data["merges"][0]["is_clean"] is False
        assert data["errors"] == [
            {"kind": "ScanError", "message": "x", "domain": None, "locale": None, "path": "a.py"}
        ]
