"""
Client-side advisory state: studied pages and display preferences.

Values live in an injected key-value store (``get``/``set`` with a TTL),
the same shape as browser cookies. Nothing here is authoritative for
navigation; unreadable values are treated as absent.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Protocol

from loguru import logger

STUDIED_KEY = "studied_topics"
SIDEBAR_HIDDEN_KEY = "sidebar_hidden"
DARK_MODE_KEY = "dark_mode"

DEFAULT_TTL = timedelta(days=365)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, ttl: timedelta | None = None) -> None: ...


class MemoryKeyValueStore:
    """Process-local store. Expiry is honoured like the file store."""

    def __init__(self):
        self._values: dict[str, tuple[str, datetime | None]] = {}

    def get(self, key: str) -> str | None:
        entry = self._values.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and datetime.now() >= expires_at:
            del self._values[key]
            return None
        return value

    def set(self, key: str, value: str, ttl: timedelta | None = None) -> None:
        expires_at = datetime.now() + ttl if ttl is not None else None
        self._values[key] = (value, expires_at)


class JsonFileKeyValueStore:
    """
    Store persisted as one JSON file.

    File format: {key: {"value": str, "expires_at": iso-datetime | null}}
    A missing or corrupt file reads as empty.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def get(self, key: str) -> str | None:
        entry = self._load().get(key)
        if not isinstance(entry, dict) or not isinstance(entry.get("value"), str):
            return None
        expires_at = entry.get("expires_at")
        if expires_at:
            try:
                if datetime.now() >= datetime.fromisoformat(expires_at):
                    return None
            except ValueError:
                return None
        return entry["value"]

    def set(self, key: str, value: str, ttl: timedelta | None = None) -> None:
        data = self._load()
        data[key] = {
            "value": value,
            "expires_at": (datetime.now() + ttl).isoformat() if ttl is not None else None,
        }
        self._save(data)


class StudiedPagesTracker:
    """Remembers which pages were opened: ``"d-t" → [page, ...]``."""

    def __init__(self, store: KeyValueStore, ttl: timedelta = DEFAULT_TTL):
        self.store = store
        self.ttl = ttl

    def all(self) -> dict[str, list[int]]:
        raw = self.store.get(STUDIED_KEY)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Discarding corrupt studied-pages value")
            return {}
        if not isinstance(data, dict):
            return {}
        return {
            str(key): [page for page in pages if isinstance(page, int)]
            for key, pages in data.items()
            if isinstance(pages, list)
        }

    def pages(self, domain_index: int, topic_index: int) -> list[int]:
        return self.all().get(f"{domain_index}-{topic_index}", [])

    def mark(self, domain_index: int, topic_index: int, page_index: int) -> None:
        studied = self.all()
        pages = studied.setdefault(f"{domain_index}-{topic_index}", [])
        if page_index in pages:
            return
        pages.append(page_index)
        self.store.set(STUDIED_KEY, json.dumps(studied), self.ttl)


class StudyPreferences:
    """Sidebar visibility and dark mode, stored as "true"/"false"."""

    def __init__(self, store: KeyValueStore, ttl: timedelta = DEFAULT_TTL):
        self.store = store
        self.ttl = ttl

    def _get_flag(self, key: str) -> bool:
        return self.store.get(key) == "true"

    def _set_flag(self, key: str, value: bool) -> None:
        self.store.set(key, "true" if value else "false", self.ttl)

    @property
    def sidebar_hidden(self) -> bool:
        return self._get_flag(SIDEBAR_HIDDEN_KEY)

    @sidebar_hidden.setter
    def sidebar_hidden(self, value: bool) -> None:
        self._set_flag(SIDEBAR_HIDDEN_KEY, value)

    @property
    def dark_mode(self) -> bool:
        return self._get_flag(DARK_MODE_KEY)

    @dark_mode.setter
    def dark_mode(self, value: bool) -> None:
        self._set_flag(DARK_MODE_KEY, value)
