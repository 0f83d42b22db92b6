"""File upload — pick one JSON file per language and import it."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QGroupBox, QLabel,
    QLineEdit, QPushButton, QCheckBox, QFileDialog, QMessageBox,
)
from PySide6.QtCore import Signal

from lingodesk.parsers.json_parser import TranslationFileError
from lingodesk.services.settings import Settings, language_label
from lingodesk.services.storage import StorageError
from lingodesk.services.workspace import Workspace

log = logging.getLogger("lingodesk.ui.upload")


class _LanguageRow:
    """Widgets for one language: path field, browse button, status."""

    def __init__(self, language: str):
        self.language = language
        self.label = QLabel(f"{language_label(language)} [{language}]")
        self.path_edit = QLineEdit()
        self.path_edit.setReadOnly(True)
        self.browse_btn = QPushButton("…")
        self.status = QLabel()
        self.status.setWordWrap(True)
        self.ok = False

    @property
    def path(self) -> Optional[Path]:
        text = self.path_edit.text()
        return Path(text) if text else None


class UploadPage(QWidget):
    """Third screen: import localization files into the open app."""

    imported = Signal()
    done = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._workspace: Optional[Workspace] = None
        self._rows: list[_LanguageRow] = []
        self._build_ui()

    def _build_ui(self):
        layout = QVBoxLayout(self)

        self._title = QLabel(self.tr("Upload files"))
        self._title.setStyleSheet("font-size: 20px; font-weight: bold;")
        layout.addWidget(self._title)

        hint = QLabel(self.tr(
            "Choose a JSON localization file for each language. Nested objects "
            "are flattened into dot-separated keys."
        ))
        hint.setWordWrap(True)
        layout.addWidget(hint)

        self._group = QGroupBox(self.tr("Files"))
        self._grid = QGridLayout(self._group)
        layout.addWidget(self._group)

        self._replace_check = QCheckBox(self.tr("Clear values missing from the file"))
        layout.addWidget(self._replace_check)
        self._strict_check = QCheckBox(self.tr("Reject files whose name names another language"))
        self._strict_check.toggled.connect(self._recheck_all)
        layout.addWidget(self._strict_check)
        layout.addStretch()

        buttons = QHBoxLayout()
        buttons.addStretch()
        back_btn = QPushButton(self.tr("Go to Editor"))
        back_btn.clicked.connect(self.done.emit)
        buttons.addWidget(back_btn)
        self._import_btn = QPushButton(self.tr("Import"))
        self._import_btn.setDefault(True)
        self._import_btn.clicked.connect(self._on_import)
        buttons.addWidget(self._import_btn)
        layout.addLayout(buttons)

    def set_workspace(self, workspace: Workspace):
        self._workspace = workspace
        self._title.setText(self.tr("Upload files — %s") % workspace.app.name)
        while self._grid.count():
            w = self._grid.takeAt(0).widget()
            if w is not None:
                w.deleteLater()
        self._rows = []
        for i, lang in enumerate(workspace.app.languages):
            row = _LanguageRow(lang)
            row.browse_btn.clicked.connect(lambda _=False, r=row: self._on_browse(r))
            self._grid.addWidget(row.label, i, 0)
            self._grid.addWidget(row.path_edit, i, 1)
            self._grid.addWidget(row.browse_btn, i, 2)
            self._grid.addWidget(row.status, i, 3)
            self._rows.append(row)
        self._strict_check.setChecked(bool(Settings.get()["strict_language_check"]))
        self._update_import_button()

    # ── Actions ───────────────────────────────────────────────────

    def _on_browse(self, row: _LanguageRow):
        settings = Settings.get()
        path, _ = QFileDialog.getOpenFileName(
            self, self.tr("Open %s file") % row.language,
            settings["last_directory"] or str(Path.home()),
            self.tr("JSON files (*.json);;All files (*)"),
        )
        if not path:
            return
        settings["last_directory"] = str(Path(path).parent)
        settings.save()
        row.path_edit.setText(path)
        self._check_row(row)
        self._update_import_button()

    def _check_row(self, row: _LanguageRow):
        try:
            preview = self._workspace.preview_file(row.path, row.language)
        except (TranslationFileError, ValueError) as e:
            row.ok = False
            row.status.setText(f"✗ {e}")
            row.status.setStyleSheet("color: #c62828;")
            return
        if not preview.matches:
            row.ok = not self._strict_check.isChecked()
            row.status.setText(
                self.tr("⚠ File does not match expected language code (%s ≠ %s)")
                % (preview.detected, row.language)
            )
            row.status.setStyleSheet("color: #ef6c00;")
            return
        row.ok = True
        row.status.setText(
            self.tr("✓ %d keys, %d new") % (preview.data.total_count, preview.new_keys)
        )
        row.status.setStyleSheet("color: #2e7d32;")

    def _recheck_all(self):
        for row in self._rows:
            if row.path:
                self._check_row(row)
        self._update_import_button()

    def _update_import_button(self):
        self._import_btn.setEnabled(any(r.path and r.ok for r in self._rows))

    def _on_import(self):
        if self._workspace is None:
            return
        strict = self._strict_check.isChecked()
        replace = self._replace_check.isChecked()
        summary = []
        for row in self._rows:
            if not row.path or not row.ok:
                continue
            try:
                result = self._workspace.import_file(
                    row.path, row.language, replace=replace, strict_language=strict,
                )
            except (TranslationFileError, ValueError, StorageError) as e:
                log.error("Import of %s failed: %s", row.path, e)
                QMessageBox.warning(self, self.tr("Import failed"), str(e))
                continue
            summary.append(
                self.tr("%s: %d new keys, %d values updated")
                % (row.language, len(result.added_keys), result.updated_values)
            )
            row.path_edit.clear()
            row.status.setText(self.tr("✓ Imported"))
            row.ok = False
        self._update_import_button()
        if summary:
            self.imported.emit()
            QMessageBox.information(self, self.tr("Import complete"), "\n".join(summary))
