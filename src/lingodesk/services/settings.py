"""Settings service — load/save ~/.config/lingodesk/settings.json."""

from __future__ import annotations

import json
import locale
import logging
from pathlib import Path
from typing import Any

log = logging.getLogger("lingodesk.settings")

_SETTINGS_FILE = Path.home() / ".config" / "lingodesk" / "settings.json"

# Languages offered in the source/target pickers
SUPPORTED_LANGUAGES = [
    ("ar", "العربية (Arabic)"),
    ("ca", "Català (Catalan)"),
    ("cs", "Čeština (Czech)"),
    ("da", "Dansk (Danish)"),
    ("de", "Deutsch (German)"),
    ("el", "Ελληνικά (Greek)"),
    ("en", "English"),
    ("en-GB", "English (United Kingdom)"),
    ("es", "Español (Spanish)"),
    ("fi", "Suomi (Finnish)"),
    ("fr", "Français (French)"),
    ("he", "עברית (Hebrew)"),
    ("hi", "हिन्दी (Hindi)"),
    ("hu", "Magyar (Hungarian)"),
    ("id", "Bahasa Indonesia (Indonesian)"),
    ("it", "Italiano (Italian)"),
    ("ja", "日本語 (Japanese)"),
    ("ko", "한국어 (Korean)"),
    ("nb", "Norsk bokmål (Norwegian)"),
    ("nl", "Nederlands (Dutch)"),
    ("pl", "Polski (Polish)"),
    ("pt", "Português (Portuguese)"),
    ("pt-BR", "Português do Brasil (Brazilian Portuguese)"),
    ("ro", "Română (Romanian)"),
    ("ru", "Русский (Russian)"),
    ("sv", "Svenska (Swedish)"),
    ("th", "ไทย (Thai)"),
    ("tr", "Türkçe (Turkish)"),
    ("uk", "Українська (Ukrainian)"),
    ("vi", "Tiếng Việt (Vietnamese)"),
    ("zh-CN", "简体中文 (Simplified Chinese)"),
    ("zh-TW", "繁體中文 (Traditional Chinese)"),
]

DEFAULTS: dict[str, Any] = {
    # General
    "language": "en",
    "first_run_complete": False,
    "last_app_id": "",
    "last_directory": "",

    # Projects
    "default_source_language": "en",
    "strict_language_check": True,

    # Export
    "export_indent": 2,
    "export_sort_keys": False,
    "export_ensure_ascii": False,
    "export_include_empty": True,
}


def _detect_system_language() -> str:
    """Try to detect the system language and return a matching code."""
    try:
        loc = locale.getlocale()[0] or ""
    except ValueError:
        loc = ""
    loc = loc.replace("_", "-")
    # Longest codes first so "pt-BR" beats "pt"
    for code, _ in sorted(SUPPORTED_LANGUAGES, key=lambda c: -len(c[0])):
        if loc.startswith(code):
            return code
    return "en"


def language_label(code: str) -> str:
    """Human readable name for a language code, or the code itself."""
    for c, label in SUPPORTED_LANGUAGES:
        if c == code:
            return label
    return code


class Settings:
    """Application settings backed by a JSON file."""

    _instance: Settings | None = None

    def __init__(self):
        self._data: dict[str, Any] = dict(DEFAULTS)
        self._load()

    @classmethod
    def get(cls) -> Settings:
        if cls._instance is None:
            cls._instance = Settings()
        return cls._instance

    @classmethod
    def reset_instance(cls):
        cls._instance = None

    # ── Public API ────────────────────────────────────────────────

    def __getitem__(self, key: str) -> Any:
        return self._data.get(key, DEFAULTS.get(key))

    def __setitem__(self, key: str, value: Any):
        self._data[key] = value

    def get_value(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default if default is not None else DEFAULTS.get(key))

    def set_value(self, key: str, value: Any):
        self._data[key] = value

    @property
    def first_run_complete(self) -> bool:
        return self._data.get("first_run_complete", False)

    def save(self):
        _SETTINGS_FILE.parent.mkdir(parents=True, exist_ok=True)
        _SETTINGS_FILE.write_text(
            json.dumps(self._data, ensure_ascii=False, indent=2), "utf-8"
        )

    # ── Convenience properties ────────────────────────────────────

    @property
    def export_options(self) -> dict[str, Any]:
        """Keyword arguments for ``save_json``/``dumps_json``."""
        return {
            "indent": int(self["export_indent"]),
            "sort_keys": bool(self["export_sort_keys"]),
            "ensure_ascii": bool(self["export_ensure_ascii"]),
        }

    # ── Private ───────────────────────────────────────────────────

    def _load(self):
        if _SETTINGS_FILE.exists():
            try:
                stored = json.loads(_SETTINGS_FILE.read_text("utf-8"))
            except (OSError, ValueError) as e:
                log.warning("Ignoring unreadable settings file %s: %s", _SETTINGS_FILE, e)
                return
            if isinstance(stored, dict):
                self._data.update(stored)
            else:
                log.warning("Ignoring settings file %s: not an object", _SETTINGS_FILE)
        else:
            sys_lang = _detect_system_language()
            self._data["language"] = sys_lang
            self._data["default_source_language"] = sys_lang
