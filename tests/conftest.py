"""Shared fixtures for LingoDesk tests."""
import os
import sys
from pathlib import Path

import pytest

# Ensure src is on path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir():
    return FIXTURES


@pytest.fixture
def tmp_out(tmp_path):
    """Temp directory for output files."""
    out = tmp_path / "out"
    out.mkdir()
    return out


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.config settings file."""
    settings_file = tmp_path / "config" / "settings.json"
    monkeypatch.setattr("lingodesk.services.settings._SETTINGS_FILE", settings_file)
    from lingodesk.services.settings import Settings
    Settings.reset_instance()
    yield settings_file
    Settings.reset_instance()


@pytest.fixture
def store(tmp_path):
    """An AppStore rooted in a temp directory."""
    from lingodesk.services.storage import AppStore
    return AppStore(tmp_path / "data")


@pytest.fixture(scope="session")
def qapp():
    """A headless QApplication shared by the widget tests."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtWidgets import QApplication
    return QApplication.instance() or QApplication([])
