"""JSON localization file parser (nested objects <-> dot-separated keys)."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from lingodesk.parsers import detect_language

log = logging.getLogger("lingodesk.parsers.json")

SEPARATOR = "."


class TranslationFileError(Exception):
    """Raised when a localization file cannot be read or represented."""


class KeyConflictError(TranslationFileError):
    """Two key paths collapse onto the same flat key, or a key is both a
    value and a group."""


@dataclass
class JSONEntry:
    """A single flattened translation unit."""
    key: str  # dot-separated path
    value: str

    @property
    def is_translated(self) -> bool:
        return bool(self.value.strip())


@dataclass
class JSONFileData:
    """Parsed JSON localization file."""
    path: Optional[Path]
    entries: list[JSONEntry] = field(default_factory=list)
    language: Optional[str] = None

    @property
    def translated_count(self) -> int:
        return sum(1 for e in self.entries if e.is_translated)

    @property
    def untranslated_count(self) -> int:
        return sum(1 for e in self.entries if not e.is_translated)

    @property
    def total_count(self) -> int:
        return len(self.entries)

    @property
    def percent_translated(self) -> float:
        total = self.total_count
        return round(self.translated_count / total * 100, 1) if total else 100.0

    def as_dict(self) -> dict[str, str]:
        return {e.key: e.value for e in self.entries}


def _coerce(value: Any, path: str) -> str:
    """Turn a JSON leaf into the string stored in the table."""
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, list):
        raise TranslationFileError(f"Arrays are not supported (at '{path}')")
    raise TranslationFileError(
        f"Unsupported value of type {type(value).__name__} at '{path}'"
    )


def _check_segments(key: str) -> None:
    if not key or any(not part for part in key.split(SEPARATOR)):
        raise TranslationFileError(f"Invalid key '{key}': empty path segment")


def check_nesting(keys) -> None:
    """Raise KeyConflictError if some key is also the prefix of another key.

    Such a set of keys cannot be turned back into nested objects, since
    ``a`` would have to be both a string and an object.
    """
    leaves = set(keys)
    for key in leaves:
        parts = key.split(SEPARATOR)
        for i in range(1, len(parts)):
            prefix = SEPARATOR.join(parts[:i])
            if prefix in leaves:
                raise KeyConflictError(
                    f"Key '{prefix}' is a value and also the parent of '{key}'"
                )


def flatten(obj: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten a nested dict to ``{"dot.separated.key": "value"}``.

    Document order is preserved. Non-string scalars are converted to
    strings, ``null`` becomes an empty string.
    """
    if not isinstance(obj, Mapping):
        raise TranslationFileError(
            f"Expected a JSON object, got {type(obj).__name__}"
        )
    result: dict[str, str] = {}
    _flatten_into(obj, prefix, result)
    check_nesting(result)
    return result


def _flatten_into(obj: Mapping[str, Any], prefix: str, out: dict[str, str]) -> None:
    for k, v in obj.items():
        full_key = f"{prefix}{SEPARATOR}{k}" if prefix else str(k)
        _check_segments(full_key)
        if isinstance(v, Mapping):
            _flatten_into(v, full_key, out)
            continue
        if full_key in out:
            raise KeyConflictError(f"Duplicate key '{full_key}'")
        out[full_key] = _coerce(v, full_key)


def unflatten(mapping: Mapping[str, str]) -> dict:
    """Rebuild nested dicts from dot-separated keys, in first-seen order."""
    result: dict = {}
    for key, value in mapping.items():
        _check_segments(key)
        parts = key.split(SEPARATOR)
        d = result
        for part in parts[:-1]:
            child = d.setdefault(part, {})
            if not isinstance(child, dict):
                raise KeyConflictError(
                    f"Key '{key}' needs '{part}' to be a group, but it holds a value"
                )
            d = child
        leaf = parts[-1]
        if isinstance(d.get(leaf), dict):
            raise KeyConflictError(
                f"Key '{key}' is a value and also the parent of other keys"
            )
        d[leaf] = value
    return result


def loads_json(text: str, path: Optional[Path] = None,
               language: Optional[str] = None) -> JSONFileData:
    """Parse JSON localization content from a string."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        where = path.name if path else "input"
        raise TranslationFileError(f"{where}: invalid JSON ({e})") from e
    flat = flatten(data)
    entries = [JSONEntry(key=k, value=v) for k, v in flat.items()]
    return JSONFileData(path=path, entries=entries, language=language)


def parse_json(path: Union[str, Path], language: Optional[str] = None) -> JSONFileData:
    """Parse a JSON localization file.

    When *language* is not given it is guessed from the file name.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise TranslationFileError(f"{path.name}: not UTF-8 encoded") from e
    except OSError as e:
        raise TranslationFileError(f"{path.name}: {e.strerror or e}") from e
    data = loads_json(text, path=path, language=language or detect_language(path))
    log.info("Parsed %s: %d keys (language: %s)", path.name, data.total_count, data.language)
    return data


def dumps_json(mapping: Mapping[str, str], indent: int = 2,
               sort_keys: bool = False, ensure_ascii: bool = False) -> str:
    """Serialize a flat mapping as nested JSON text with a trailing newline."""
    obj = unflatten(mapping)
    return json.dumps(obj, ensure_ascii=ensure_ascii, indent=indent,
                      sort_keys=sort_keys) + "\n"


def save_json(data: Union[JSONFileData, Mapping[str, str]],
              path: Optional[Union[str, Path]] = None, indent: int = 2,
              sort_keys: bool = False, ensure_ascii: bool = False) -> Path:
    """Save a JSON localization file and return the path written."""
    if isinstance(data, JSONFileData):
        mapping = data.as_dict()
        out = Path(path) if path else data.path
    else:
        mapping = data
        out = Path(path) if path else None
    if out is None:
        raise ValueError("No output path given")
    text = dumps_json(mapping, indent=indent, sort_keys=sort_keys,
                      ensure_ascii=ensure_ascii)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        f.write(text)
    log.info("Wrote %s (%d keys)", out, len(mapping))
    return out
