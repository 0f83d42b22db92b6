"""LingoDesk — manage translation keys across JSON localization files."""

__version__ = "0.1.0"
APP_ID = "io.github.lingodesk.LingoDesk"
