"""Tests for the JSON parser and language code helpers."""
import json
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


# ── Flatten / unflatten ──────────────────────────────────────────

class TestFlatten:
    def test_nested_keys(self):
        from lingodesk.parsers.json_parser import flatten
        flat = flatten({"a": {"b": {"c": "x"}, "d": "y"}, "e": "z"})
        assert flat == {"a.b.c": "x", "a.d": "y", "e": "z"}

    def test_order_preserved(self):
        from lingodesk.parsers.json_parser import flatten
        flat = flatten({"z": "1", "a": {"y": "2", "b": "3"}})
        assert list(flat) == ["z", "a.y", "a.b"]

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (3, "3"),
        (2.5, "2.5"),
        ("", ""),
    ])
    def test_scalar_coercion(self, value, expected):
        from lingodesk.parsers.json_parser import flatten
        assert flatten({"k": value}) == {"k": expected}

    def test_array_rejected(self):
        from lingodesk.parsers.json_parser import flatten, TranslationFileError
        with pytest.raises(TranslationFileError, match="days"):
            flatten({"days": ["Mon", "Tue"]})

    def test_root_must_be_object(self):
        from lingodesk.parsers.json_parser import flatten, TranslationFileError
        with pytest.raises(TranslationFileError):
            flatten(["a"])

    def test_empty_objects_dropped(self):
        from lingodesk.parsers.json_parser import flatten
        assert flatten({"a": {}, "b": "x"}) == {"b": "x"}

    def test_dotted_key_collision(self):
        from lingodesk.parsers.json_parser import flatten, KeyConflictError
        with pytest.raises(KeyConflictError):
            flatten({"a.b": "x", "a": {"b": "y"}})

    def test_leaf_and_group_conflict(self):
        from lingodesk.parsers.json_parser import flatten, KeyConflictError
        with pytest.raises(KeyConflictError):
            flatten({"a": "x", "a.b": "y"})

    def test_empty_segment_rejected(self):
        from lingodesk.parsers.json_parser import flatten, TranslationFileError
        with pytest.raises(TranslationFileError):
            flatten({"a": {"": "x"}})
        with pytest.raises(TranslationFileError):
            flatten({"a.": "x"})


class TestUnflatten:
    def test_rebuilds_nesting(self):
        from lingodesk.parsers.json_parser import unflatten
        nested = unflatten({"a.b.c": "x", "a.d": "y", "e": "z"})
        assert nested == {"a": {"b": {"c": "x"}, "d": "y"}, "e": "z"}

    def test_first_seen_order(self):
        from lingodesk.parsers.json_parser import unflatten
        nested = unflatten({"b.x": "1", "a": "2", "b.y": "3"})
        assert list(nested) == ["b", "a"]
        assert list(nested["b"]) == ["x", "y"]

    def test_value_then_group_conflict(self):
        from lingodesk.parsers.json_parser import unflatten, KeyConflictError
        with pytest.raises(KeyConflictError):
            unflatten({"a": "x", "a.b": "y"})

    def test_group_then_value_conflict(self):
        from lingodesk.parsers.json_parser import unflatten, KeyConflictError
        with pytest.raises(KeyConflictError):
            unflatten({"a.b": "y", "a": "x"})

    def test_inverse_of_flatten(self):
        from lingodesk.parsers.json_parser import flatten, unflatten
        doc = json.loads((FIXTURES / "en.json").read_text("utf-8"))
        assert unflatten(flatten(doc)) == doc


class TestCheckNesting:
    def test_ok(self):
        from lingodesk.parsers.json_parser import check_nesting
        check_nesting(["a.b", "a.c", "ab.c"])

    def test_prefix_conflict(self):
        from lingodesk.parsers.json_parser import check_nesting, KeyConflictError
        with pytest.raises(KeyConflictError, match="'a.b'"):
            check_nesting(["a.b.c", "a.b"])


# ── Files ────────────────────────────────────────────────────────

class TestJSONFiles:
    def test_parse(self):
        from lingodesk.parsers.json_parser import parse_json
        data = parse_json(FIXTURES / "en.json")
        assert data.total_count == 5
        assert data.language == "en"
        assert data.entries[0].key == "app.title"
        assert data.as_dict()["menu.file.save"] == "Save"

    def test_counts(self):
        from lingodesk.parsers.json_parser import parse_json
        data = parse_json(FIXTURES / "fr.json")
        assert data.total_count == 4
        assert data.translated_count == 3
        assert data.untranslated_count == 1
        assert data.percent_translated == 75.0

    def test_explicit_language_wins(self):
        from lingodesk.parsers.json_parser import parse_json
        data = parse_json(FIXTURES / "fr.json", language="fr-CA")
        assert data.language == "fr-CA"

    def test_invalid_json(self):
        from lingodesk.parsers.json_parser import parse_json, TranslationFileError
        with pytest.raises(TranslationFileError, match="broken.json"):
            parse_json(FIXTURES / "broken.json")

    def test_arrays_in_file(self):
        from lingodesk.parsers.json_parser import parse_json, TranslationFileError
        with pytest.raises(TranslationFileError):
            parse_json(FIXTURES / "list_values.json")

    def test_missing_file(self, tmp_path):
        from lingodesk.parsers.json_parser import parse_json, TranslationFileError
        with pytest.raises(TranslationFileError):
            parse_json(tmp_path / "nope.json")

    def test_bom_tolerated(self, tmp_path):
        from lingodesk.parsers.json_parser import parse_json
        path = tmp_path / "sv.json"
        path.write_bytes('\ufeff{"hej": "Hej"}'.encode("utf-8"))
        assert parse_json(path).as_dict() == {"hej": "Hej"}

    def test_empty_file_has_full_percent(self, tmp_path):
        from lingodesk.parsers.json_parser import parse_json
        path = tmp_path / "it.json"
        path.write_text("{}", "utf-8")
        assert parse_json(path).percent_translated == 100.0

    def test_roundtrip(self, tmp_out):
        from lingodesk.parsers.json_parser import parse_json, save_json
        data = parse_json(FIXTURES / "en.json")
        out = save_json(data, tmp_out / "en.json")
        assert json.loads(out.read_text("utf-8")) == json.loads(
            (FIXTURES / "en.json").read_text("utf-8"))

    def test_modify_and_save(self, tmp_out):
        from lingodesk.parsers.json_parser import parse_json, save_json
        data = parse_json(FIXTURES / "fr.json")
        for e in data.entries:
            if e.key == "app.greeting":
                e.value = "Bonjour, {name} !"
        out = tmp_out / "fr.json"
        save_json(data, out)
        data2 = parse_json(out)
        assert data2.as_dict()["app.greeting"] == "Bonjour, {name} !"

    def test_dumps_options(self):
        from lingodesk.parsers.json_parser import dumps_json
        text = dumps_json({"b": "ü", "a.x": "1"}, indent=4, sort_keys=True, ensure_ascii=True)
        assert text.endswith("\n")
        assert text.index('"a"') < text.index('"b"')
        assert "\\u00fc" in text
        assert '\n    "a"' in text

    def test_save_mapping_needs_path(self):
        from lingodesk.parsers.json_parser import save_json
        with pytest.raises(ValueError):
            save_json({"a": "b"})


# ── Language codes ───────────────────────────────────────────────

class TestLanguageCodes:
    @pytest.mark.parametrize("raw,expected", [
        ("fr", "fr"),
        ("FR", "fr"),
        ("pt_br", "pt-BR"),
        ("en-us", "en-US"),
        ("zh_hans_cn", "zh-Hans-CN"),
        ("es-419", "es-419"),
    ])
    def test_normalize(self, raw, expected):
        from lingodesk.parsers import normalize_language
        assert normalize_language(raw) == expected

    @pytest.mark.parametrize("raw", ["", "english", "f", "fr-FRA-x"])
    def test_normalize_invalid(self, raw):
        from lingodesk.parsers import normalize_language
        with pytest.raises(ValueError):
            normalize_language(raw)

    @pytest.mark.parametrize("name,expected", [
        ("fr.json", "fr"),
        ("fr-FR.json", "fr-FR"),
        ("pt_BR.json", "pt-BR"),
        ("messages.de.json", "de"),
        ("messages_es.json", "es"),
        ("locales/it/common.json", "it"),
        ("translations.json", None),
        ("strings/app.json", None),
    ])
    def test_detect(self, name, expected):
        from lingodesk.parsers import detect_language
        assert detect_language(Path(name)) == expected

    @pytest.mark.parametrize("expected,detected,ok", [
        ("fr", "fr", True),
        ("fr", "fr-CA", True),
        ("fr-CA", "fr", True),
        ("fr-CA", "fr-FR", False),
        ("fr", "de", False),
        ("fr", None, False),
    ])
    def test_languages_match(self, expected, detected, ok):
        from lingodesk.parsers import languages_match
        assert languages_match(expected, detected) is ok
