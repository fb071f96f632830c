"""
Persisted export settings.

The store is a flat map of string keys to string values, the way the
settings panel saves them. A missing or unreadable file reads as empty.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..utils.json import load_json, write_json


class SettingsStore(Protocol):
    """Flat string key-value store the export settings are persisted in."""

    def get(self, key: str, default: str = "") -> str: ...

    def set(self, key: str, value: str) -> None: ...


class MemorySettingsStore:
    """In-memory store, mostly for tests and one-shot runs."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(values or {})

    def get(self, key: str, default: str = "") -> str:
        return self.values.get(key, default)

    def set(self, key: str, value: str) -> None:
        self.values[key] = str(value)


class JsonSettingsStore:
    """Store backed by a flat JSON object on disk, written on every ``set``."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.values: dict[str, str] = load_settings(path)

    def get(self, key: str, default: str = "") -> str:
        return self.values.get(key, default)

    def set(self, key: str, value: str) -> None:
        self.values[key] = str(value)
        save_settings(self.path, self.values)


def load_settings(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}

    try:
        data = load_json(path)
    except (OSError, ValueError):
        # ValueError covers bad JSON and bytes that are not UTF-8
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(k): "" if v is None else str(v) for k, v in data.items()}


def save_settings(path: Path, values: dict[str, str]) -> None:
    write_json(path, dict(sorted(values.items())))
