"""
Key-value stores for ledger persistence.

Values are JSON strings; the stores only move strings around. Nothing here
is transactional: every ``set`` replaces the whole value for its key.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Protocol

from core.config import get_config

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Durable string storage by key."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class InMemoryStore:
    """Process-local store, for tests and hosts without durable storage."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """
    Store backed by a single JSON document on disk.

    Usage:
        store = JsonFileStore()  # VEO_LEDGER_PATH, or veo_ledger.json
        store.set("veo_history", "[]")
        store.get("veo_history")
    """

    def __init__(self, path: Optional[str] = None, config: Optional[Any] = None):
        """
        Args:
            path: JSON document location (config ledger_path if None)
            config: Optional config override
        """
        self.config = config or get_config()
        self.path = Path(path or self.config.storage.ledger_path)
        self._data: Optional[dict[str, str]] = None

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data

        self._data = {}
        if not self.path.exists():
            return self._data

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read store {self.path}, starting empty: {e}")
            return self._data

        if not isinstance(document, dict):
            logger.error(f"Store {self.path} is not a JSON object, starting empty")
            return self._data

        self._data = {k: v for k, v in document.items() if isinstance(v, str)}
        return self._data

    def _flush(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, ensure_ascii=False, indent=2)
        os.replace(temp_path, self.path)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._flush()
