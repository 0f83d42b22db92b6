"""App store — persist projects and their translation tables as JSON.

Layout under ``DATA_DIR``::

    apps.json           list of App records
    apps/<id>.json      translation table of one App
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from lingodesk.parsers import normalize_language
from lingodesk.parsers.json_parser import TranslationFileError
from lingodesk.services.translations import TranslationTable

log = logging.getLogger("lingodesk.storage")

DATA_DIR = Path.home() / ".local" / "share" / "lingodesk"


class StorageError(Exception):
    """The store could not be read or written."""


class AppNotFoundError(StorageError, KeyError):
    """No App with the requested id."""

    def __str__(self) -> str:
        return f"No app with id {self.args[0]!r}" if self.args else "App not found"


@dataclass
class App:
    """A named group of localization files sharing a source language."""
    id: str
    name: str
    source_language: str
    target_languages: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def languages(self) -> list[str]:
        return [self.source_language] + list(self.target_languages)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "source_language": self.source_language,
            "target_languages": list(self.target_languages),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> App:
        return cls(
            id=data["id"],
            name=data["name"],
            source_language=data["source_language"],
            target_languages=list(data.get("target_languages", [])),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


def _write_atomic(path: Path, payload) -> None:
    """Write JSON to *path* through a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
            f.write("\n")
        os.replace(tmp, path)
    except OSError as e:
        Path(tmp).unlink(missing_ok=True)
        raise StorageError(f"Could not write {path}: {e}") from e


def _read_json(path: Path):
    try:
        return json.loads(path.read_text("utf-8"))
    except (OSError, ValueError) as e:
        raise StorageError(f"Could not read {path}: {e}") from e


def _clean_languages(source: str, targets: Iterable[str]) -> tuple[str, list[str]]:
    """Normalize codes; drop duplicates and targets equal to the source."""
    source = normalize_language(source)
    cleaned: list[str] = []
    for t in targets:
        code = normalize_language(t)
        if code != source and code not in cleaned:
            cleaned.append(code)
    return source, cleaned


class AppStore:
    """CRUD for App records plus per-App translation tables."""

    def __init__(self, data_dir: Optional[Path] = None):
        self._dir = Path(data_dir) if data_dir else DATA_DIR

    @property
    def apps_file(self) -> Path:
        return self._dir / "apps.json"

    def table_file(self, app_id: str) -> Path:
        return self._dir / "apps" / f"{app_id}.json"

    # ── Apps ──────────────────────────────────────────────────────

    def _load_apps(self) -> list[App]:
        if not self.apps_file.exists():
            return []
        data = _read_json(self.apps_file)
        if not isinstance(data, list):
            raise StorageError(f"{self.apps_file}: expected a list of apps")
        try:
            return [App.from_dict(d) for d in data]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"{self.apps_file}: malformed app record ({e})") from e

    def _save_apps(self, apps: list[App]) -> None:
        _write_atomic(self.apps_file, [a.to_dict() for a in apps])

    def list_apps(self) -> list[App]:
        """All apps, most recently updated first."""
        return sorted(self._load_apps(), key=lambda a: a.updated_at, reverse=True)

    def get_app(self, app_id: str) -> App:
        for app in self._load_apps():
            if app.id == app_id:
                return app
        raise AppNotFoundError(app_id)

    def _check_name(self, apps: list[App], name: str, exclude_id: str = "") -> str:
        name = (name or "").strip()
        if not name:
            raise ValueError("App name must not be empty")
        for a in apps:
            if a.id != exclude_id and a.name.casefold() == name.casefold():
                raise ValueError(f"An app named '{name}' already exists")
        return name

    def create_app(self, name: str, source_language: str,
                   target_languages: Iterable[str] = ()) -> App:
        apps = self._load_apps()
        name = self._check_name(apps, name)
        source, targets = _clean_languages(source_language, target_languages)
        app = App(id=uuid.uuid4().hex, name=name, source_language=source,
                  target_languages=targets)
        app.updated_at = app.created_at
        apps.append(app)
        self._save_apps(apps)
        log.info("Created app %s (%s -> %s)", name, source, ", ".join(targets) or "-")
        return app

    def update_app(self, app_id: str, *, name: Optional[str] = None,
                   source_language: Optional[str] = None,
                   target_languages: Optional[Iterable[str]] = None) -> App:
        apps = self._load_apps()
        for app in apps:
            if app.id == app_id:
                break
        else:
            raise AppNotFoundError(app_id)

        if name is not None:
            app.name = self._check_name(apps, name, exclude_id=app_id)
        source, targets = _clean_languages(
            source_language if source_language is not None else app.source_language,
            target_languages if target_languages is not None else app.target_languages,
        )
        app.source_language = source
        app.target_languages = targets
        app.updated_at = datetime.now()
        self._save_apps(apps)
        log.info("Updated app %s", app.name)
        return app

    def delete_app(self, app_id: str) -> None:
        apps = self._load_apps()
        remaining = [a for a in apps if a.id != app_id]
        if len(remaining) == len(apps):
            raise AppNotFoundError(app_id)
        self._save_apps(remaining)
        self.table_file(app_id).unlink(missing_ok=True)
        log.info("Deleted app %s", app_id)

    # ── Translation tables ────────────────────────────────────────

    def load_table(self, app_id: str) -> TranslationTable:
        app = self.get_app(app_id)
        path = self.table_file(app_id)
        if not path.exists():
            return TranslationTable(app.languages)
        data = _read_json(path)
        try:
            table = TranslationTable.from_dict(data)
        except (KeyError, TypeError, AttributeError, ValueError, TranslationFileError) as e:
            raise StorageError(f"{path}: malformed translation table ({e})") from e
        # Languages follow the App record, not the saved table
        table.set_languages(app.languages)
        return table

    def save_table(self, app_id: str, table: TranslationTable) -> None:
        if not any(a.id == app_id for a in self._load_apps()):
            raise AppNotFoundError(app_id)
        _write_atomic(self.table_file(app_id), table.to_dict())
        log.info("Saved %d keys for app %s", len(table), app_id)
