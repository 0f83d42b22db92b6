"""Main window — dashboard, app settings, upload and editor screens."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtWidgets import QMainWindow, QStackedWidget, QMessageBox
from PySide6.QtGui import QAction, QKeySequence

from lingodesk import __version__
from lingodesk.services.settings import Settings
from lingodesk.services.storage import AppStore, StorageError
from lingodesk.services.workspace import Workspace
from lingodesk.ui.dashboard_page import DashboardPage
from lingodesk.ui.app_settings_page import AppSettingsPage
from lingodesk.ui.upload_page import UploadPage
from lingodesk.ui.editor_page import EditorPage

log = logging.getLogger("lingodesk.ui.window")


class LingoDeskWindow(QMainWindow):
    """Top-level window switching between the four screens."""

    def __init__(self, store: Optional[AppStore] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("LingoDesk")
        self.resize(1100, 720)
        self._store = store or AppStore()
        self._workspace: Optional[Workspace] = None
        self._return_to_editor = False
        self._build_ui()
        self._build_menu()
        self.show_dashboard()

    def _build_ui(self):
        self._stack = QStackedWidget()
        self.setCentralWidget(self._stack)

        self._dashboard = DashboardPage(self._store)
        self._dashboard.open_requested.connect(self.open_app)
        self._dashboard.settings_requested.connect(self._on_settings_for)
        self._dashboard.create_requested.connect(self.new_app)
        self._dashboard.deleted.connect(self._on_app_deleted)
        self._stack.addWidget(self._dashboard)

        self._settings_page = AppSettingsPage(self._store)
        self._settings_page.saved.connect(self._on_settings_saved)
        self._settings_page.cancelled.connect(self._on_settings_cancelled)
        self._stack.addWidget(self._settings_page)

        self._upload = UploadPage()
        self._upload.imported.connect(self._editor.refresh)
        self._upload.done.connect(self._show_editor)
        self._stack.addWidget(self._upload)

        self._editor = EditorPage()
        self._editor.back_requested.connect(self.show_dashboard)
        self._editor.upload_requested.connect(self._show_upload)
        self._editor.settings_requested.connect(self._on_editor_settings)
        self._stack.addWidget(self._editor)

    def _build_menu(self):
        file_menu = self.menuBar().addMenu(self.tr("&File"))

        new_act = QAction(self.tr("&New App…"), self)
        new_act.setShortcut(QKeySequence.New)
        new_act.triggered.connect(self.new_app)
        file_menu.addAction(new_act)

        dash_act = QAction(self.tr("&Apps"), self)
        dash_act.setShortcut("Ctrl+Shift+A")
        dash_act.triggered.connect(self.show_dashboard)
        file_menu.addAction(dash_act)

        self._export_act = QAction(self.tr("&Export All…"), self)
        self._export_act.setShortcut("Ctrl+E")
        self._export_act.triggered.connect(self._editor.export_all)
        file_menu.addAction(self._export_act)

        file_menu.addSeparator()
        quit_act = QAction(self.tr("&Quit"), self)
        quit_act.setShortcut(QKeySequence.Quit)
        quit_act.triggered.connect(self.close)
        file_menu.addAction(quit_act)

        help_menu = self.menuBar().addMenu(self.tr("&Help"))
        about_act = QAction(self.tr("&About LingoDesk"), self)
        about_act.triggered.connect(self._on_about)
        help_menu.addAction(about_act)

    # ── Navigation ────────────────────────────────────────────────

    def show_dashboard(self):
        if self._stack.currentWidget() is self._editor:
            self._editor.save()
        self._dashboard.refresh()
        self._stack.setCurrentWidget(self._dashboard)
        self._export_act.setEnabled(False)

    def new_app(self):
        self._return_to_editor = False
        self._settings_page.new_app()
        self._stack.setCurrentWidget(self._settings_page)

    def open_app(self, app_id: str):
        """Open an app in the editor; an empty app goes to the upload screen."""
        try:
            self._workspace = Workspace.open(self._store, app_id)
        except StorageError as e:
            log.error("Cannot open app %s: %s", app_id, e)
            QMessageBox.critical(self, self.tr("Cannot open app"), str(e))
            self.show_dashboard()
            return
        settings = Settings.get()
        settings["last_app_id"] = app_id
        settings.save()
        self.setWindowTitle(f"{self._workspace.app.name} — LingoDesk")
        self._editor.set_workspace(self._workspace)
        if len(self._workspace.table) == 0:
            self._show_upload()
        else:
            self._show_editor()

    def _show_editor(self):
        if self._workspace is None:
            return
        self._stack.setCurrentWidget(self._editor)
        self._export_act.setEnabled(True)

    def _show_upload(self):
        if self._workspace is None:
            return
        self._editor.save()
        self._upload.set_workspace(self._workspace)
        self._stack.setCurrentWidget(self._upload)
        self._export_act.setEnabled(False)

    def _on_settings_for(self, app_id: str):
        try:
            workspace = Workspace.open(self._store, app_id)
        except StorageError as e:
            QMessageBox.critical(self, self.tr("Cannot open app"), str(e))
            return
        self._workspace = workspace
        self._editor.set_workspace(workspace)
        self._return_to_editor = False
        self._settings_page.edit_app(workspace)
        self._stack.setCurrentWidget(self._settings_page)

    def _on_editor_settings(self):
        if self._workspace is None:
            return
        self._editor.save()
        self._return_to_editor = True
        self._settings_page.edit_app(self._workspace)
        self._stack.setCurrentWidget(self._settings_page)

    def _on_settings_saved(self, app_id: str):
        if self._return_to_editor and self._workspace is not None:
            self._editor.set_workspace(self._workspace)
            self.setWindowTitle(f"{self._workspace.app.name} — LingoDesk")
            self._show_editor()
        elif self._workspace is not None and self._workspace.app.id == app_id:
            self.show_dashboard()
        else:
            # Freshly created app: continue with the upload screen
            self.open_app(app_id)

    def _on_app_deleted(self, app_id: str):
        if self._workspace is not None and self._workspace.app.id == app_id:
            self._workspace = None
            self._editor.clear_workspace()
            self.setWindowTitle("LingoDesk")
            log.info("Closed deleted app %s", app_id)
        settings = Settings.get()
        if settings["last_app_id"] == app_id:
            settings["last_app_id"] = ""
            settings.save()

    def _on_settings_cancelled(self):
        if self._return_to_editor:
            self._show_editor()
        else:
            self.show_dashboard()

    def _on_about(self):
        QMessageBox.about(
            self, self.tr("About LingoDesk"),
            self.tr("<b>LingoDesk</b> %s<br><br>"
                    "Manage translation keys across JSON localization files.") % __version__,
        )

    # ── Qt events ─────────────────────────────────────────────────

    def closeEvent(self, event):  # noqa: N802
        self._editor.save()
        super().closeEvent(event)
