"""Workspace — an open App with its translation table, import and export."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from lingodesk.parsers import languages_match, normalize_language
from lingodesk.parsers.json_parser import (
    JSONFileData, TranslationFileError, parse_json, save_json,
)
from lingodesk.services.settings import Settings
from lingodesk.services.storage import App, AppStore
from lingodesk.services.translations import (
    ImportResult, LanguageProgress, TranslationTable,
)

log = logging.getLogger("lingodesk.workspace")


class LanguageMismatchError(TranslationFileError):
    """The file name says one language, the user picked another."""

    def __init__(self, path: Path, expected: str, detected: str):
        super().__init__(
            f"{path.name} does not match expected language code "
            f"'{expected}' (looks like '{detected}')"
        )
        self.path = path
        self.expected = expected
        self.detected = detected


@dataclass
class FilePreview:
    """Result of checking a file before importing it."""
    data: JSONFileData
    language: str
    detected: Optional[str]
    new_keys: int

    @property
    def matches(self) -> bool:
        return self.detected is None or languages_match(self.language, self.detected)


class Workspace:
    """Binds an App record to its translation table and the store."""

    def __init__(self, store: AppStore, app: App, table: TranslationTable):
        self._store = store
        self._app = app
        self._table = table

    @classmethod
    def open(cls, store: AppStore, app_id: str) -> Workspace:
        app = store.get_app(app_id)
        table = store.load_table(app_id)
        log.info("Opened %s (%d keys)", app.name, len(table))
        return cls(store, app, table)

    @property
    def app(self) -> App:
        return self._app

    @property
    def table(self) -> TranslationTable:
        return self._table

    @property
    def store(self) -> AppStore:
        return self._store

    def save(self) -> None:
        self._store.save_table(self._app.id, self._table)
        self._app = self._store.update_app(self._app.id)

    # ── App settings ──────────────────────────────────────────────

    def update_app(self, *, name: Optional[str] = None,
                   source_language: Optional[str] = None,
                   target_languages: Optional[Iterable[str]] = None) -> App:
        """Rename or change languages; values of removed languages are dropped."""
        self._app = self._store.update_app(
            self._app.id, name=name, source_language=source_language,
            target_languages=target_languages,
        )
        self._table.set_languages(self._app.languages)
        self._store.save_table(self._app.id, self._table)
        return self._app

    def removed_languages_with_values(self, source_language: str,
                                      target_languages: Iterable[str]) -> list[str]:
        """Languages that an update would drop although they hold values."""
        keep = {normalize_language(source_language)}
        keep.update(normalize_language(t) for t in target_languages)
        return [lang for lang in self._app.languages
                if lang not in keep and self._table.has_values(lang)]

    # ── Import ────────────────────────────────────────────────────

    def _expect_language(self, language: str) -> str:
        language = normalize_language(language)
        if language not in self._app.languages:
            raise ValueError(f"'{language}' is not a language of {self._app.name}")
        return language

    def preview_file(self, path: Union[str, Path], language: str) -> FilePreview:
        """Parse *path* and report how it relates to *language* and the table."""
        language = self._expect_language(language)
        data = parse_json(path)
        new_keys = sum(1 for e in data.entries if e.key not in self._table)
        return FilePreview(data=data, language=language,
                           detected=data.language, new_keys=new_keys)

    def import_file(self, path: Union[str, Path], language: str,
                    replace: bool = False,
                    strict_language: Optional[bool] = None) -> ImportResult:
        """Import a JSON file as *language* and save the table."""
        path = Path(path)
        if strict_language is None:
            strict_language = bool(Settings.get()["strict_language_check"])
        preview = self.preview_file(path, language)
        if not preview.matches:
            if strict_language:
                log.warning("Rejected %s: expected %s, detected %s",
                            path.name, preview.language, preview.detected)
                raise LanguageMismatchError(path, preview.language, preview.detected)
            log.warning("Importing %s as %s although it looks like %s",
                        path.name, preview.language, preview.detected)
        elif preview.detected is None:
            log.info("No language code in %s, trusting %s", path.name, preview.language)

        result = self._table.import_language(
            preview.language, preview.data.as_dict(), replace=replace
        )
        self.save()
        return result

    # ── Export ────────────────────────────────────────────────────

    def export_file(self, language: str, path: Union[str, Path],
                    include_empty: Optional[bool] = None) -> Path:
        """Write *language* as nested JSON to *path*."""
        language = self._expect_language(language)
        settings = Settings.get()
        if include_empty is None:
            include_empty = bool(settings["export_include_empty"])
        values = self._table.flat_values(language, include_empty=include_empty)
        return save_json(values, path, **settings.export_options)

    def export_all(self, directory: Union[str, Path],
                   include_empty: Optional[bool] = None) -> list[Path]:
        """Write ``<language>.json`` for every language of the App."""
        directory = Path(directory)
        written = [self.export_file(lang, directory / f"{lang}.json", include_empty)
                   for lang in self._app.languages]
        log.info("Exported %d files to %s", len(written), directory)
        return written

    # ── Progress ──────────────────────────────────────────────────

    def progress(self) -> list[LanguageProgress]:
        """Completion per language, source language first."""
        return self._table.completion_summary(self._app.languages)
