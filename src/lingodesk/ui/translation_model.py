"""Qt item model exposing a TranslationTable as key × language columns."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt, Signal
from PySide6.QtGui import QBrush, QColor

from lingodesk.services.translations import TranslationTable

_MISSING_BG = QColor(255, 205, 210, 90)


class TranslationTableModel(QAbstractTableModel):
    """Column 0 is the key, then one column per language.

    Only the keys passing the current filter are shown. Editing a value
    cell writes through to the table, editing a key renames it.
    """

    rename_failed = Signal(str)  # error message

    def __init__(self, table: TranslationTable, parent=None):
        super().__init__(parent)
        self._table = table
        self._rows: list[str] = []
        self._row_index: dict[str, int] = {}
        self._languages: list[str] = []
        self._filter_text = ""
        self._only_missing = False
        self._missing_languages: Optional[list[str]] = None
        table.keys_changed.connect(self.refresh)
        table.languages_changed.connect(self.refresh)
        table.value_changed.connect(self._on_value_changed)
        table.language_imported.connect(self.refresh)
        self.refresh()

    @property
    def table(self) -> TranslationTable:
        return self._table

    def key_at(self, row: int) -> str:
        return self._rows[row]

    def row_of(self, key: str) -> int:
        return self._row_index.get(key, -1)

    def language_at(self, column: int) -> str:
        return self._languages[column - 1]

    def set_filter(self, text: str = "", only_missing: bool = False,
                   languages: Optional[list[str]] = None):
        """Show keys containing *text*; optionally only incomplete rows."""
        self._filter_text = text
        self._only_missing = only_missing
        self._missing_languages = languages
        self.refresh()

    def refresh(self):
        self.beginResetModel()
        self._languages = self._table.languages()
        self._rows = self._table.filter_rows(
            self._filter_text,
            languages=self._missing_languages,
            only_missing=self._only_missing,
        )
        self._row_index = {key: i for i, key in enumerate(self._rows)}
        self.endResetModel()

    def _on_value_changed(self, key: str, language: str):
        row = self.row_of(key)
        if row < 0 or language not in self._languages:
            return
        col = self._languages.index(language) + 1
        idx = self.index(row, col)
        self.dataChanged.emit(idx, idx)

    # ── QAbstractTableModel ───────────────────────────────────────

    def rowCount(self, parent=QModelIndex()):  # noqa: N802
        return 0 if parent.isValid() else len(self._rows)

    def columnCount(self, parent=QModelIndex()):  # noqa: N802
        return 0 if parent.isValid() else len(self._languages) + 1

    def headerData(self, section, orientation, role=Qt.DisplayRole):  # noqa: N802
        if orientation != Qt.Horizontal or role != Qt.DisplayRole:
            return None
        if section == 0:
            return self.tr("Key")
        return self._languages[section - 1]

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        key = self._rows[index.row()]
        if index.column() == 0:
            if role in (Qt.DisplayRole, Qt.EditRole, Qt.ToolTipRole):
                return key
            return None
        lang = self._languages[index.column() - 1]
        if role in (Qt.DisplayRole, Qt.EditRole):
            return self._table.value(key, lang)
        if role == Qt.BackgroundRole and not self._table.is_filled(key, lang):
            return QBrush(_MISSING_BG)
        if role == Qt.ToolTipRole:
            return self._table.value(key, lang) or self.tr("Missing translation")
        return None

    def flags(self, index):
        if not index.isValid():
            return Qt.NoItemFlags
        return Qt.ItemIsEnabled | Qt.ItemIsSelectable | Qt.ItemIsEditable

    def setData(self, index, value, role=Qt.EditRole):  # noqa: N802
        if not index.isValid() or role != Qt.EditRole:
            return False
        key = self._rows[index.row()]
        if index.column() == 0:
            try:
                self._table.rename_key(key, str(value))
            except (KeyError, ValueError) as e:
                self.rename_failed.emit(str(e))
                return False
            return True
        self._table.set_value(key, self._languages[index.column() - 1], str(value or ""))
        return True
