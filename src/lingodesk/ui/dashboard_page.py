"""Dashboard — list of apps with per-language completion."""

from __future__ import annotations

import logging

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QTreeWidget, QTreeWidgetItem, QProgressBar, QHeaderView,
    QAbstractItemView, QMessageBox,
)
from PySide6.QtCore import Qt, Signal

from lingodesk.services.settings import language_label
from lingodesk.services.storage import App, AppStore, StorageError

log = logging.getLogger("lingodesk.ui.dashboard")

_ID_ROLE = Qt.UserRole + 1


def _progress_bar(percent: float, text: str) -> QProgressBar:
    bar = QProgressBar()
    bar.setRange(0, 1000)
    bar.setValue(int(round(percent * 10)))
    bar.setFormat(text)
    bar.setTextVisible(True)
    bar.setMaximumHeight(18)
    return bar


class DashboardPage(QWidget):
    """First screen: every app with its target-language progress bars."""

    open_requested = Signal(str)      # app id
    settings_requested = Signal(str)  # app id
    create_requested = Signal()
    deleted = Signal(str)             # app id

    def __init__(self, store: AppStore, parent=None):
        super().__init__(parent)
        self._store = store
        self._build_ui()

    def _build_ui(self):
        layout = QVBoxLayout(self)

        title = QLabel(self.tr("Apps"))
        title.setStyleSheet("font-size: 20px; font-weight: bold;")
        layout.addWidget(title)

        self._empty_label = QLabel(self.tr(
            "No apps yet. Create one to start importing localization files."
        ))
        self._empty_label.setStyleSheet("color: gray;")
        layout.addWidget(self._empty_label)

        self._tree = QTreeWidget()
        self._tree.setHeaderLabels([
            self.tr("Name"), self.tr("Progress"), self.tr("Keys"), self.tr("Updated"),
        ])
        self._tree.setSelectionMode(QAbstractItemView.SingleSelection)
        self._tree.setRootIsDecorated(True)
        header = self._tree.header()
        header.setSectionResizeMode(0, QHeaderView.Stretch)
        header.setSectionResizeMode(1, QHeaderView.Interactive)
        header.resizeSection(1, 220)
        self._tree.itemDoubleClicked.connect(self._on_double_click)
        self._tree.itemSelectionChanged.connect(self._update_buttons)
        layout.addWidget(self._tree, 1)

        buttons = QHBoxLayout()
        self._new_btn = QPushButton(self.tr("New App…"))
        self._new_btn.clicked.connect(self.create_requested.emit)
        buttons.addWidget(self._new_btn)
        buttons.addStretch()

        self._open_btn = QPushButton(self.tr("Open"))
        self._open_btn.clicked.connect(self._on_open)
        buttons.addWidget(self._open_btn)

        self._settings_btn = QPushButton(self.tr("Settings"))
        self._settings_btn.clicked.connect(self._on_settings)
        buttons.addWidget(self._settings_btn)

        self._delete_btn = QPushButton(self.tr("Delete"))
        self._delete_btn.clicked.connect(self._on_delete)
        buttons.addWidget(self._delete_btn)
        layout.addLayout(buttons)

        self._update_buttons()

    # ── Data ──────────────────────────────────────────────────────

    def refresh(self):
        self._tree.clear()
        try:
            apps = self._store.list_apps()
        except StorageError as e:
            log.error("Could not load apps: %s", e)
            QMessageBox.critical(self, self.tr("Storage error"), str(e))
            apps = []
        for app in apps:
            self._add_app_item(app)
        self._empty_label.setVisible(not apps)
        self._update_buttons()

    def _add_app_item(self, app: App):
        try:
            table = self._store.load_table(app.id)
        except StorageError as e:
            log.error("Could not load table of %s: %s", app.name, e)
            table = None

        item = QTreeWidgetItem(self._tree)
        item.setText(0, f"{app.name}  ({app.source_language})")
        item.setData(0, _ID_ROLE, app.id)
        item.setText(2, str(len(table)) if table is not None else "?")
        item.setText(3, app.updated_at.strftime("%Y-%m-%d %H:%M"))

        if table is None:
            return
        summary = table.completion_summary(app.target_languages)
        if summary:
            overall = sum(p.percent for p in summary) / len(summary)
            self._tree.setItemWidget(item, 1, _progress_bar(overall, f"{overall:.1f}%"))
        for prog in summary:
            child = QTreeWidgetItem(item)
            child.setText(0, language_label(prog.language))
            child.setData(0, _ID_ROLE, app.id)
            child.setText(2, f"{prog.filled}/{prog.total}")
            self._tree.setItemWidget(
                child, 1, _progress_bar(prog.percent, f"{prog.language}: {prog.percent:.1f}%")
            )
        item.setExpanded(True)

    def _selected_id(self) -> str:
        items = self._tree.selectedItems()
        return items[0].data(0, _ID_ROLE) if items else ""

    # ── Actions ───────────────────────────────────────────────────

    def _update_buttons(self):
        has = bool(self._selected_id())
        for btn in (self._open_btn, self._settings_btn, self._delete_btn):
            btn.setEnabled(has)

    def _on_double_click(self, item: QTreeWidgetItem, _column: int):
        app_id = item.data(0, _ID_ROLE)
        if app_id:
            self.open_requested.emit(app_id)

    def _on_open(self):
        app_id = self._selected_id()
        if app_id:
            self.open_requested.emit(app_id)

    def _on_settings(self):
        app_id = self._selected_id()
        if app_id:
            self.settings_requested.emit(app_id)

    def _on_delete(self):
        app_id = self._selected_id()
        if not app_id:
            return
        try:
            app = self._store.get_app(app_id)
        except StorageError as e:
            QMessageBox.critical(self, self.tr("Storage error"), str(e))
            return
        answer = QMessageBox.question(
            self, self.tr("Delete App"),
            self.tr("Delete \"%s\" and all its translations? This cannot be undone.") % app.name,
            QMessageBox.Yes | QMessageBox.No, QMessageBox.No,
        )
        if answer != QMessageBox.Yes:
            return
        try:
            self._store.delete_app(app_id)
        except StorageError as e:
            QMessageBox.critical(self, self.tr("Storage error"), str(e))
        else:
            self.deleted.emit(app_id)
        self.refresh()
