"""App settings — name, source language and target languages."""

from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox, QLabel,
    QLineEdit, QComboBox, QListWidget, QListWidgetItem, QPushButton,
    QMessageBox, QAbstractItemView,
)
from PySide6.QtCore import Qt, Signal

from lingodesk.parsers import normalize_language
from lingodesk.services.settings import Settings, SUPPORTED_LANGUAGES, language_label
from lingodesk.services.storage import AppStore, StorageError
from lingodesk.services.workspace import Workspace


def _fill_language_combo(combo: QComboBox, selected: str = ""):
    """Supported languages plus free entry of any other code."""
    combo.clear()
    combo.setEditable(True)
    combo.setInsertPolicy(QComboBox.NoInsert)
    for code, label in SUPPORTED_LANGUAGES:
        combo.addItem(f"{label} [{code}]", code)
    if selected:
        idx = combo.findData(selected)
        if idx >= 0:
            combo.setCurrentIndex(idx)
        else:
            combo.setEditText(selected)


def _combo_code(combo: QComboBox) -> str:
    """Language code from a combo, whether picked or typed."""
    idx = combo.findText(combo.currentText())
    if idx >= 0 and combo.itemData(idx):
        return combo.itemData(idx)
    text = combo.currentText().strip()
    if text.endswith("]") and "[" in text:
        text = text[text.rindex("[") + 1:-1]
    return normalize_language(text)


class AppSettingsPage(QWidget):
    """Create a new app or edit an existing one."""

    saved = Signal(str)  # app id
    cancelled = Signal()

    def __init__(self, store: AppStore, parent=None):
        super().__init__(parent)
        self._store = store
        self._workspace: Optional[Workspace] = None
        self._build_ui()

    def _build_ui(self):
        layout = QVBoxLayout(self)

        self._title = QLabel()
        self._title.setStyleSheet("font-size: 20px; font-weight: bold;")
        layout.addWidget(self._title)

        general = QGroupBox(self.tr("General"))
        form = QFormLayout(general)
        form.setFieldGrowthPolicy(QFormLayout.ExpandingFieldsGrow)
        self._name_edit = QLineEdit()
        self._name_edit.setPlaceholderText(self.tr("My App"))
        form.addRow(self.tr("Name:"), self._name_edit)
        self._source_combo = QComboBox()
        form.addRow(self.tr("Source language:"), self._source_combo)
        layout.addWidget(general)

        targets = QGroupBox(self.tr("Target languages"))
        tlayout = QVBoxLayout(targets)
        self._target_list = QListWidget()
        self._target_list.setSelectionMode(QAbstractItemView.ExtendedSelection)
        tlayout.addWidget(self._target_list)

        row = QHBoxLayout()
        self._add_combo = QComboBox()
        _fill_language_combo(self._add_combo)
        row.addWidget(self._add_combo, 1)
        add_btn = QPushButton(self.tr("Add"))
        add_btn.clicked.connect(self._on_add_target)
        row.addWidget(add_btn)
        remove_btn = QPushButton(self.tr("Remove"))
        remove_btn.clicked.connect(self._on_remove_targets)
        row.addWidget(remove_btn)
        tlayout.addLayout(row)
        layout.addWidget(targets, 1)

        buttons = QHBoxLayout()
        buttons.addStretch()
        cancel_btn = QPushButton(self.tr("Cancel"))
        cancel_btn.clicked.connect(self.cancelled.emit)
        buttons.addWidget(cancel_btn)
        self._save_btn = QPushButton(self.tr("Save"))
        self._save_btn.setDefault(True)
        self._save_btn.clicked.connect(self._on_save)
        buttons.addWidget(self._save_btn)
        layout.addLayout(buttons)

    # ── Modes ─────────────────────────────────────────────────────

    def new_app(self):
        self._workspace = None
        self._title.setText(self.tr("New App"))
        self._name_edit.clear()
        _fill_language_combo(self._source_combo, Settings.get()["default_source_language"])
        self._target_list.clear()
        self._name_edit.setFocus()

    def edit_app(self, workspace: Workspace):
        self._workspace = workspace
        app = workspace.app
        self._title.setText(self.tr("Settings — %s") % app.name)
        self._name_edit.setText(app.name)
        _fill_language_combo(self._source_combo, app.source_language)
        self._target_list.clear()
        for code in app.target_languages:
            self._add_target_item(code)

    # ── Targets ───────────────────────────────────────────────────

    def _targets(self) -> list[str]:
        return [self._target_list.item(i).data(Qt.UserRole)
                for i in range(self._target_list.count())]

    def _add_target_item(self, code: str):
        item = QListWidgetItem(f"{language_label(code)} [{code}]")
        item.setData(Qt.UserRole, code)
        self._target_list.addItem(item)

    def _on_add_target(self):
        try:
            code = _combo_code(self._add_combo)
        except ValueError as e:
            QMessageBox.warning(self, self.tr("Invalid language"), str(e))
            return
        if code in self._targets():
            return
        self._add_target_item(code)

    def _on_remove_targets(self):
        for item in self._target_list.selectedItems():
            self._target_list.takeItem(self._target_list.row(item))

    # ── Save ──────────────────────────────────────────────────────

    def _on_save(self):
        try:
            source = _combo_code(self._source_combo)
        except ValueError as e:
            QMessageBox.warning(self, self.tr("Invalid language"), str(e))
            return
        name = self._name_edit.text()
        targets = self._targets()

        try:
            if self._workspace is None:
                app = self._store.create_app(name, source, targets)
            else:
                dropped = self._workspace.removed_languages_with_values(source, targets)
                if dropped and QMessageBox.question(
                    self, self.tr("Remove languages"),
                    self.tr("These languages have translations that will be deleted:\n%s\n\nContinue?")
                    % ", ".join(dropped),
                    QMessageBox.Yes | QMessageBox.No, QMessageBox.No,
                ) != QMessageBox.Yes:
                    return
                app = self._workspace.update_app(
                    name=name, source_language=source, target_languages=targets,
                )
        except ValueError as e:
            QMessageBox.warning(self, self.tr("Invalid settings"), str(e))
            return
        except StorageError as e:
            QMessageBox.critical(self, self.tr("Storage error"), str(e))
            return
        self.saved.emit(app.id)
