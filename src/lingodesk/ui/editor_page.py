"""Editor — key × language grid with search, missing filter and export."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QCheckBox,
    QComboBox, QPushButton, QTableView, QHeaderView, QProgressBar,
    QAbstractItemView, QInputDialog, QMessageBox, QFileDialog,
)
from PySide6.QtCore import Qt, Signal, QTimer

from lingodesk.parsers.json_parser import TranslationFileError
from lingodesk.services.settings import Settings
from lingodesk.services.storage import StorageError
from lingodesk.services.workspace import Workspace
from lingodesk.ui.translation_model import TranslationTableModel

log = logging.getLogger("lingodesk.ui.editor")

_AUTOSAVE_MS = 800


class EditorPage(QWidget):
    """Fourth screen: edit values of the open app."""

    back_requested = Signal()
    upload_requested = Signal()
    settings_requested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._workspace: Optional[Workspace] = None
        self._model: Optional[TranslationTableModel] = None
        self._progress_bars: dict[str, QProgressBar] = {}

        self._save_timer = QTimer(self)
        self._save_timer.setSingleShot(True)
        self._save_timer.setInterval(_AUTOSAVE_MS)
        self._save_timer.timeout.connect(self.save)

        self._progress_timer = QTimer(self)
        self._progress_timer.setSingleShot(True)
        self._progress_timer.setInterval(0)
        self._progress_timer.timeout.connect(self._update_progress)

        self._build_ui()

    def _build_ui(self):
        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        back_btn = QPushButton(self.tr("← Apps"))
        back_btn.clicked.connect(self._on_back)
        header.addWidget(back_btn)
        self._title = QLabel()
        self._title.setStyleSheet("font-size: 20px; font-weight: bold;")
        header.addWidget(self._title, 1)
        upload_btn = QPushButton(self.tr("Upload Files…"))
        upload_btn.clicked.connect(self.upload_requested.emit)
        header.addWidget(upload_btn)
        settings_btn = QPushButton(self.tr("App Settings…"))
        settings_btn.clicked.connect(self.settings_requested.emit)
        header.addWidget(settings_btn)
        layout.addLayout(header)

        self._progress_row = QHBoxLayout()
        layout.addLayout(self._progress_row)

        filters = QHBoxLayout()
        self._search = QLineEdit()
        self._search.setPlaceholderText(self.tr("Search keys and values…"))
        self._search.setClearButtonEnabled(True)
        self._search.textChanged.connect(self._apply_filter)
        filters.addWidget(self._search, 1)
        self._missing_check = QCheckBox(self.tr("Only missing in"))
        self._missing_check.toggled.connect(self._apply_filter)
        filters.addWidget(self._missing_check)
        self._missing_lang = QComboBox()
        self._missing_lang.currentIndexChanged.connect(self._apply_filter)
        filters.addWidget(self._missing_lang)
        self._count_label = QLabel()
        filters.addWidget(self._count_label)
        layout.addLayout(filters)

        self._view = QTableView()
        self._view.setSelectionBehavior(QAbstractItemView.SelectRows)
        self._view.setSelectionMode(QAbstractItemView.SingleSelection)
        self._view.setEditTriggers(
            QAbstractItemView.DoubleClicked | QAbstractItemView.EditKeyPressed
            | QAbstractItemView.AnyKeyPressed
        )
        self._view.setWordWrap(True)
        self._view.verticalHeader().setVisible(False)
        layout.addWidget(self._view, 1)

        buttons = QHBoxLayout()
        add_btn = QPushButton(self.tr("Add Key…"))
        add_btn.clicked.connect(self._on_add_key)
        buttons.addWidget(add_btn)
        rename_btn = QPushButton(self.tr("Rename Key…"))
        rename_btn.clicked.connect(self._on_rename_key)
        buttons.addWidget(rename_btn)
        remove_btn = QPushButton(self.tr("Remove Key"))
        remove_btn.clicked.connect(self._on_remove_key)
        buttons.addWidget(remove_btn)
        buttons.addStretch()
        export_btn = QPushButton(self.tr("Export…"))
        export_btn.clicked.connect(self._on_export)
        buttons.addWidget(export_btn)
        export_all_btn = QPushButton(self.tr("Export All…"))
        export_all_btn.clicked.connect(self.export_all)
        buttons.addWidget(export_all_btn)
        layout.addLayout(buttons)

    # ── Workspace ─────────────────────────────────────────────────

    def set_workspace(self, workspace: Workspace):
        self._detach()
        self._workspace = workspace
        table = workspace.table
        self._model = TranslationTableModel(table, self)
        self._model.rename_failed.connect(
            lambda msg: QMessageBox.warning(self, self.tr("Rename failed"), msg)
        )
        self._view.setModel(self._model)
        table.value_changed.connect(self._on_table_changed)
        table.keys_changed.connect(self._on_table_changed)
        table.language_imported.connect(self.refresh)

        self._title.setText(workspace.app.name)
        self._missing_lang.blockSignals(True)
        self._missing_lang.clear()
        self._missing_lang.addItem(self.tr("any language"), None)
        for lang in workspace.app.target_languages:
            self._missing_lang.addItem(lang, lang)
        self._missing_lang.blockSignals(False)

        self._rebuild_progress()
        self._apply_filter()
        self._view.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)

    def clear_workspace(self):
        """Forget the open app without saving, e.g. after it was deleted."""
        self._detach()
        self._workspace = None
        self._title.clear()
        self._count_label.clear()
        self._missing_lang.blockSignals(True)
        self._missing_lang.clear()
        self._missing_lang.blockSignals(False)
        self._rebuild_progress()

    def _detach(self):
        self._save_timer.stop()
        self._progress_timer.stop()
        if self._model is None:
            return
        table = self._model.table
        table.value_changed.disconnect(self._on_table_changed)
        table.keys_changed.disconnect(self._on_table_changed)
        table.language_imported.disconnect(self.refresh)
        self._view.setModel(None)
        self._model.deleteLater()
        self._model = None

    def refresh(self, *_args):
        """Re-read progress and filtered rows from the table."""
        self._update_progress()
        self._apply_filter()

    def _rebuild_progress(self):
        while self._progress_row.count():
            w = self._progress_row.takeAt(0).widget()
            if w is not None:
                w.deleteLater()
        self._progress_bars = {}
        if self._workspace is None:
            return
        for lang in self._workspace.app.target_languages:
            bar = QProgressBar()
            bar.setRange(0, 1000)
            bar.setMaximumHeight(18)
            self._progress_row.addWidget(bar)
            self._progress_bars[lang] = bar
        self._update_progress()

    def _update_progress(self):
        if self._workspace is None:
            return
        for prog in self._workspace.table.completion_summary(self._progress_bars):
            bar = self._progress_bars[prog.language]
            bar.setValue(int(round(prog.percent * 10)))
            bar.setFormat(f"{prog.language}: {prog.percent:.1f}% ({prog.filled}/{prog.total})")

    def _apply_filter(self, *_args):
        if self._model is None:
            return
        lang = self._missing_lang.currentData()
        languages = [lang] if lang else self._workspace.app.target_languages
        self._model.set_filter(
            self._search.text(),
            only_missing=self._missing_check.isChecked(),
            languages=languages,
        )
        self._count_label.setText(
            self.tr("%d of %d keys") % (self._model.rowCount(), len(self._workspace.table))
        )

    def _on_table_changed(self, *_args):
        self._progress_timer.start()
        self._save_timer.start()

    def save(self):
        """Persist pending edits now."""
        self._save_timer.stop()
        if self._workspace is None:
            return
        try:
            self._workspace.save()
        except StorageError as e:
            log.error("Autosave failed: %s", e)
            QMessageBox.critical(self, self.tr("Storage error"), str(e))

    def _on_back(self):
        self.save()
        self.back_requested.emit()

    # ── Keys ──────────────────────────────────────────────────────

    def _current_key(self) -> Optional[str]:
        idx = self._view.currentIndex()
        if not idx.isValid() or self._model is None:
            return None
        return self._model.key_at(idx.row())

    def _on_add_key(self):
        if self._workspace is None:
            return
        key, ok = QInputDialog.getText(
            self, self.tr("Add Key"), self.tr("Key (use dots for nesting):"),
        )
        if not ok or not key.strip():
            return
        try:
            key = self._workspace.table.add_key(key)
        except (ValueError, TranslationFileError) as e:
            QMessageBox.warning(self, self.tr("Add key failed"), str(e))
            return
        row = self._model.row_of(key)
        if row >= 0:
            self._view.selectRow(row)
            self._view.scrollTo(self._model.index(row, 0))

    def _on_rename_key(self):
        key = self._current_key()
        if key is None:
            return
        new, ok = QInputDialog.getText(
            self, self.tr("Rename Key"), self.tr("New key:"), QLineEdit.Normal, key,
        )
        if not ok or new == key:
            return
        try:
            self._workspace.table.rename_key(key, new)
        except (KeyError, ValueError) as e:
            QMessageBox.warning(self, self.tr("Rename failed"), str(e))

    def _on_remove_key(self):
        key = self._current_key()
        if key is None:
            return
        answer = QMessageBox.question(
            self, self.tr("Remove Key"),
            self.tr("Remove \"%s\" and its values in every language?") % key,
            QMessageBox.Yes | QMessageBox.No, QMessageBox.No,
        )
        if answer == QMessageBox.Yes:
            self._workspace.table.remove_key(key)

    # ── Export ────────────────────────────────────────────────────

    def _on_export(self):
        if self._workspace is None:
            return
        languages = self._workspace.app.languages
        lang, ok = QInputDialog.getItem(
            self, self.tr("Export"), self.tr("Language:"), languages, 0, False,
        )
        if not ok:
            return
        settings = Settings.get()
        start = Path(settings["last_directory"] or Path.home()) / f"{lang}.json"
        path, _ = QFileDialog.getSaveFileName(
            self, self.tr("Export %s") % lang, str(start),
            self.tr("JSON files (*.json)"),
        )
        if not path:
            return
        try:
            out = self._workspace.export_file(lang, path)
        except (TranslationFileError, ValueError, OSError) as e:
            QMessageBox.warning(self, self.tr("Export failed"), str(e))
            return
        settings["last_directory"] = str(out.parent)
        settings.save()

    def export_all(self):
        if self._workspace is None:
            return
        settings = Settings.get()
        directory = QFileDialog.getExistingDirectory(
            self, self.tr("Export all languages to"),
            settings["last_directory"] or str(Path.home()),
        )
        if not directory:
            return
        try:
            written = self._workspace.export_all(directory)
        except (TranslationFileError, ValueError, OSError) as e:
            QMessageBox.warning(self, self.tr("Export failed"), str(e))
            return
        settings["last_directory"] = directory
        settings.save()
        QMessageBox.information(
            self, self.tr("Export complete"),
            self.tr("Wrote %d files:\n%s") % (len(written), "\n".join(p.name for p in written)),
        )
