"""LingoDesk PySide6 application entry point."""

from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from lingodesk import APP_ID
from lingodesk.services.settings import Settings
from lingodesk.services.storage import AppStore, StorageError

log = logging.getLogger("lingodesk.app")


class LingoDeskApp:
    """Main application wrapper."""

    def __init__(self, argv: list[str]):
        self._argv = argv
        self._qt_app = QApplication(argv)
        self._qt_app.setApplicationName("LingoDesk")
        self._qt_app.setApplicationDisplayName("LingoDesk")
        self._qt_app.setOrganizationName("lingodesk")
        self._qt_app.setDesktopFileName(APP_ID)
        self._store = AppStore()

    def _initial_app_id(self) -> str:
        """App to open at start: first argument, else the last one used."""
        if len(self._argv) > 1:
            return self._argv[1]
        return Settings.get()["last_app_id"] or ""

    def run(self) -> int:
        from lingodesk.ui.window import LingoDeskWindow

        settings = Settings.get()
        if not settings.first_run_complete:
            settings["first_run_complete"] = True
            settings.save()

        self._win = LingoDeskWindow(self._store)
        app_id = self._initial_app_id()
        if app_id:
            try:
                self._store.get_app(app_id)
            except StorageError as e:
                log.warning("Not opening %s: %s", app_id, e)
            else:
                self._win.open_app(app_id)
        self._win.show()
        return self._qt_app.exec()


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    app = LingoDeskApp(sys.argv)
    sys.exit(app.run())


if __name__ == "__main__":
    main()
