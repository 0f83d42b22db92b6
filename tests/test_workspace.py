"""Tests for Workspace import/export."""
import json
import shutil
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def workspace(store):
    from lingodesk.services.workspace import Workspace
    app = store.create_app("Demo", "en", ["fr", "de"])
    return Workspace.open(store, app.id)


@pytest.fixture
def loaded(workspace):
    workspace.import_file(FIXTURES / "en.json", "en")
    workspace.import_file(FIXTURES / "fr.json", "fr")
    return workspace


class TestImport:
    def test_import_source(self, workspace):
        result = workspace.import_file(FIXTURES / "en.json", "en")
        assert len(result.added_keys) == 5
        assert workspace.table.keys()[0] == "app.title"

    def test_import_is_persisted(self, loaded, store):
        from lingodesk.services.workspace import Workspace
        again = Workspace.open(store, loaded.app.id)
        assert again.table.keys() == loaded.table.keys()
        assert again.table.value("menu.quit", "fr") == "Quitter"

    def test_language_mismatch_rejected(self, workspace):
        from lingodesk.services.workspace import LanguageMismatchError
        with pytest.raises(LanguageMismatchError) as exc:
            workspace.import_file(FIXTURES / "fr.json", "de")
        assert "does not match expected language code" in str(exc.value)
        assert exc.value.detected == "fr"
        assert len(workspace.table) == 0

    def test_language_mismatch_not_strict(self, workspace):
        result = workspace.import_file(FIXTURES / "fr.json", "de", strict_language=False)
        assert result.language == "de"
        assert workspace.table.value("menu.quit", "de") == "Quitter"

    def test_strict_from_settings(self, workspace):
        from lingodesk.services.settings import Settings
        Settings.get()["strict_language_check"] = False
        workspace.import_file(FIXTURES / "fr.json", "de")
        assert workspace.table.value("menu.file.open", "de") == "Ouvrir"

    def test_undetectable_name_trusted(self, workspace, tmp_path):
        path = tmp_path / "strings.json"
        shutil.copy(FIXTURES / "fr.json", path)
        workspace.import_file(path, "fr")
        assert workspace.table.value("menu.quit", "fr") == "Quitter"

    def test_foreign_language_rejected(self, workspace):
        with pytest.raises(ValueError):
            workspace.import_file(FIXTURES / "fr.json", "it")

    def test_dotted_filename_detection(self, loaded):
        result = loaded.import_file(FIXTURES / "messages.de.json", "de")
        assert result.added_keys == ["menu.extra"]
        assert loaded.table.value("menu.extra", "de") == "Nur auf Deutsch"

    def test_broken_file(self, workspace):
        from lingodesk.parsers.json_parser import TranslationFileError
        with pytest.raises(TranslationFileError):
            workspace.import_file(FIXTURES / "broken.json", "en")

    def test_preview(self, loaded):
        preview = loaded.preview_file(FIXTURES / "messages.de.json", "de")
        assert preview.matches
        assert preview.new_keys == 1
        assert preview.data.total_count == 3

    def test_preview_mismatch(self, loaded):
        preview = loaded.preview_file(FIXTURES / "fr.json", "de")
        assert not preview.matches
        assert preview.detected == "fr"


class TestProgress:
    def test_progress(self, loaded):
        assert [(p.language, p.percent) for p in loaded.progress()] == [
            ("en", 100.0), ("fr", 60.0), ("de", 0.0),
        ]


class TestAppUpdates:
    def test_removed_languages_with_values(self, loaded):
        assert loaded.removed_languages_with_values("en", ["de"]) == ["fr"]
        assert loaded.removed_languages_with_values("en", ["fr"]) == []

    def test_update_drops_language_values(self, loaded, store):
        from lingodesk.services.workspace import Workspace
        loaded.update_app(target_languages=["de"])
        assert loaded.table.languages() == ["en", "de"]
        again = Workspace.open(store, loaded.app.id)
        assert again.app.target_languages == ["de"]
        assert again.table.languages() == ["en", "de"]

    def test_rename(self, loaded):
        assert loaded.update_app(name="Renamed").name == "Renamed"


class TestExport:
    def test_export_file(self, loaded, tmp_out):
        out = loaded.export_file("fr", tmp_out / "fr.json")
        data = json.loads(out.read_text("utf-8"))
        assert data == {
            "app": {"title": "LingoDesk", "greeting": ""},
            "menu": {"file": {"open": "Ouvrir", "save": ""}, "quit": "Quitter"},
        }

    def test_export_source_matches_original(self, loaded, tmp_out):
        out = loaded.export_file("en", tmp_out / "en.json")
        assert json.loads(out.read_text("utf-8")) == json.loads(
            (FIXTURES / "en.json").read_text("utf-8"))

    def test_export_without_empty(self, loaded, tmp_out):
        out = loaded.export_file("fr", tmp_out / "fr.json", include_empty=False)
        data = json.loads(out.read_text("utf-8"))
        assert data == {
            "app": {"title": "LingoDesk"},
            "menu": {"file": {"open": "Ouvrir"}, "quit": "Quitter"},
        }

    def test_export_uses_settings(self, loaded, tmp_out):
        from lingodesk.services.settings import Settings
        s = Settings.get()
        s["export_indent"] = 4
        s["export_sort_keys"] = True
        s["export_include_empty"] = False
        text = loaded.export_file("fr", tmp_out / "fr.json").read_text("utf-8")
        assert text.startswith('{\n    "app"')
        assert '"greeting"' not in text
        assert text.index('"menu"') > text.index('"app"')

    def test_export_all(self, loaded, tmp_out):
        written = loaded.export_all(tmp_out / "locales")
        assert [p.name for p in written] == ["en.json", "fr.json", "de.json"]
        de = json.loads((tmp_out / "locales" / "de.json").read_text("utf-8"))
        assert de["menu"]["file"]["open"] == ""

    def test_export_unknown_language(self, loaded, tmp_out):
        with pytest.raises(ValueError):
            loaded.export_file("ja", tmp_out / "ja.json")
