"""Translation table — in-memory key × language values with completion tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from PySide6.QtCore import QObject, Signal

from lingodesk.parsers.json_parser import (
    KeyConflictError, check_nesting, unflatten, SEPARATOR,
)

log = logging.getLogger("lingodesk.translations")


@dataclass
class LanguageProgress:
    """Completion figures for one language."""
    language: str
    filled: int
    total: int

    @property
    def missing(self) -> int:
        return self.total - self.filled

    @property
    def percent(self) -> float:
        return round(self.filled / self.total * 100, 1) if self.total else 100.0


@dataclass
class ImportResult:
    """What an import changed in the table."""
    language: str
    added_keys: List[str] = field(default_factory=list)
    updated_values: int = 0
    unchanged: int = 0
    cleared_values: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added_keys or self.updated_values or self.cleared_values)


def _validate_key(key: str) -> str:
    if not key or any(not part for part in key.split(SEPARATOR)):
        raise ValueError(f"Invalid key '{key}'")
    return key


class TranslationTable(QObject):
    """Ordered table of translation keys with one value per language.

    A value counts as filled when it is non-empty after stripping
    whitespace. Key order is the order in which keys were first seen.
    """

    value_changed = Signal(str, str)  # key, language
    keys_changed = Signal()
    language_imported = Signal(str)  # language
    languages_changed = Signal()

    def __init__(self, languages: Optional[Iterable[str]] = None):
        super().__init__()
        self._keys: list[str] = []
        self._values: dict[str, dict[str, str]] = {}
        self._languages: list[str] = []
        for lang in languages or ():
            if lang not in self._languages:
                self._languages.append(lang)

    # ── Structure ─────────────────────────────────────────────────

    def keys(self) -> list[str]:
        return list(self._keys)

    def languages(self) -> list[str]:
        return list(self._languages)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def row(self, key: str) -> dict[str, str]:
        """All values of *key*, one per known language."""
        values = self._values[key]
        return {lang: values.get(lang, "") for lang in self._languages}

    def set_languages(self, languages: Iterable[str]) -> None:
        """Replace the language list. Values of dropped languages are removed."""
        new = []
        for lang in languages:
            if lang not in new:
                new.append(lang)
        dropped = set(self._languages) - set(new)
        for values in self._values.values():
            for lang in dropped:
                values.pop(lang, None)
        self._languages = new
        self.languages_changed.emit()

    def add_language(self, language: str) -> None:
        if language not in self._languages:
            self._languages.append(language)
            self.languages_changed.emit()

    def has_values(self, language: str) -> bool:
        return any(self.is_filled(k, language) for k in self._keys)

    def add_key(self, key: str) -> str:
        key = _validate_key((key or "").strip())
        if key in self._values:
            raise ValueError(f"Key '{key}' already exists")
        check_nesting(self._keys + [key])
        self._keys.append(key)
        self._values[key] = {}
        self.keys_changed.emit()
        return key

    def remove_key(self, key: str) -> None:
        if key not in self._values:
            raise KeyError(key)
        self._keys.remove(key)
        del self._values[key]
        self.keys_changed.emit()

    def rename_key(self, old: str, new: str) -> str:
        if old not in self._values:
            raise KeyError(old)
        new = _validate_key((new or "").strip())
        if new == old:
            return new
        if new in self._values:
            raise ValueError(f"Key '{new}' already exists")
        others = [k for k in self._keys if k != old]
        try:
            check_nesting(others + [new])
        except KeyConflictError as e:
            raise ValueError(str(e)) from e
        self._keys[self._keys.index(old)] = new
        self._values[new] = self._values.pop(old)
        self.keys_changed.emit()
        return new

    # ── Values ────────────────────────────────────────────────────

    def value(self, key: str, language: str) -> str:
        return self._values[key].get(language, "")

    def set_value(self, key: str, language: str, value: str) -> None:
        if key not in self._values:
            raise KeyError(key)
        if language not in self._languages:
            raise KeyError(f"Unknown language '{language}'")
        value = value or ""
        if self._values[key].get(language, "") == value:
            return
        self._values[key][language] = value
        self.value_changed.emit(key, language)

    def is_filled(self, key: str, language: str) -> bool:
        return bool(self._values[key].get(language, "").strip())

    def import_language(self, language: str, mapping: Mapping[str, str],
                        replace: bool = False) -> ImportResult:
        """Merge a flat ``key -> value`` mapping into *language*.

        Unknown keys are appended in mapping order. With *replace*, values
        of this language whose key is not in *mapping* are cleared.
        """
        new_keys = [_validate_key(k) for k in mapping if k not in self._values]
        check_nesting(self._keys + new_keys)

        result = ImportResult(language=language)
        self.add_language(language)
        touched = []
        for key, value in mapping.items():
            value = value or ""
            if key not in self._values:
                self._keys.append(key)
                self._values[key] = {}
                result.added_keys.append(key)
            current = self._values[key].get(language, "")
            if current == value:
                result.unchanged += 1
                continue
            self._values[key][language] = value
            result.updated_values += 1
            touched.append(key)
        if replace:
            for key in self._keys:
                if key not in mapping and self._values[key].pop(language, ""):
                    result.cleared_values += 1
                    touched.append(key)

        # Listeners see the table only after the whole mapping is applied.
        if result.added_keys:
            self.keys_changed.emit()
        for key in touched:
            self.value_changed.emit(key, language)
        if result.changed:
            self.language_imported.emit(language)
        log.info("Imported %s: %d new keys, %d updated, %d unchanged, %d cleared",
                 language, len(result.added_keys), result.updated_values,
                 result.unchanged, result.cleared_values)
        return result

    # ── Progress & filtering ──────────────────────────────────────

    def progress(self, language: str) -> LanguageProgress:
        filled = sum(1 for k in self._keys if self.is_filled(k, language))
        return LanguageProgress(language=language, filled=filled, total=len(self._keys))

    def completion(self, language: str) -> float:
        """Percentage of keys with a non-empty value, rounded to 0.1."""
        return self.progress(language).percent

    def completion_summary(self, languages: Optional[Iterable[str]] = None) -> list[LanguageProgress]:
        langs = self._languages if languages is None else list(languages)
        return [self.progress(lang) for lang in langs]

    def missing_keys(self, language: str) -> list[str]:
        return [k for k in self._keys if not self.is_filled(k, language)]

    def incomplete_rows(self, languages: Optional[Iterable[str]] = None) -> list[str]:
        """Keys with at least one empty value among *languages*."""
        langs = self._languages if languages is None else list(languages)
        return [k for k in self._keys
                if any(not self.is_filled(k, lang) for lang in langs)]

    def filter_rows(self, text: str = "", languages: Optional[Iterable[str]] = None,
                    only_missing: bool = False) -> list[str]:
        """Keys matching *text* (case-insensitive, key or any value).

        With *only_missing*, keep only rows missing a value in *languages*.
        """
        needle = text.strip().casefold()
        rows = self.incomplete_rows(languages) if only_missing else self._keys
        if not needle:
            return list(rows)
        result = []
        for key in rows:
            values = self._values[key]
            haystack = [key] + [values.get(lang, "") for lang in self._languages]
            if any(needle in s.casefold() for s in haystack):
                result.append(key)
        return result

    # ── Export / persistence ──────────────────────────────────────

    def flat_values(self, language: str, include_empty: bool = True) -> dict[str, str]:
        return {k: self._values[k].get(language, "") for k in self._keys
                if include_empty or self.is_filled(k, language)}

    def export_language(self, language: str, include_empty: bool = True) -> dict:
        """Nested JSON object for *language*."""
        return unflatten(self.flat_values(language, include_empty))

    def to_dict(self) -> dict:
        return {
            "languages": list(self._languages),
            "rows": [{"key": k, "values": dict(self._values[k])} for k in self._keys],
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> TranslationTable:
        """Rebuild a table saved with :meth:`to_dict`.

        Raises ``ValueError`` for an invalid key and ``KeyConflictError``
        when one key is also the group of another.
        """
        table = cls(data.get("languages", []))
        for row in data.get("rows", []):
            key = _validate_key(row["key"])
            if key in table._values:
                continue
            table._keys.append(key)
            table._values[key] = {lang: str(v) for lang, v in row.get("values", {}).items()
                                  if lang in table._languages}
        check_nesting(table._keys)
        return table
