from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from threading import RLock
from typing import Dict, Optional

TOKEN_KEY = "token"
USER_KEY = "user"
THEME_KEY = "savedTheme"

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class ClientStorage(ABC):
    """String key/value storage that outlives a single page, like browser localStorage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Forget key. Missing keys are ignored."""


class MemoryStorage(ClientStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage(ClientStorage):
    """
    Storage persisted as a flat JSON object on disk. The file is rewritten on
    every change; a missing file reads as empty.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._lock = RLock()

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self._path):
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as exc:
            logger.warning("Ignoring unreadable client state in %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring client state in %s: not a JSON object", self._path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, items: Dict[str, str]) -> None:
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._load()
            items[key] = value
            self._save(items)

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = self._load()
            if key in items:
                del items[key]
                self._save(items)
