"""
History/Gallery Ledger

Process-wide record of past generations (history, capped) and saved videos
(gallery, deletable). Every mutation is written through to the key-value
store immediately.

Usage:
    ledger = Ledger(JsonFileStore("veo_ledger.json"))
    ledger.load()

    ledger.append_history(HistoryEntry.from_request(request))
    ledger.append_gallery(asset)
    ledger.delete_gallery(asset.id)
"""

import json
import logging
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from core.config import get_config
from services.orchestrator.state import GalleryEntry, HistoryEntry

from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

_history_adapter = TypeAdapter(list[HistoryEntry])
_gallery_adapter = TypeAdapter(list[GalleryEntry])


class Ledger:
    """Owns the history and gallery collections and mirrors them to storage."""

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[Any] = None,
    ):
        self.config = config or get_config()
        self.store = store
        self.history_key = self.config.storage.history_key
        self.gallery_key = self.config.storage.gallery_key
        self.history_limit = self.config.storage.history_limit

        self._history: list[HistoryEntry] = []
        self._gallery: list[GalleryEntry] = []

    @property
    def history(self) -> list[HistoryEntry]:
        """History entries, newest first."""
        return list(self._history)

    @property
    def gallery(self) -> list[GalleryEntry]:
        """Saved videos, newest first."""
        return list(self._gallery)

    def load(self):
        """Read both collections from the store. Bad data loads as empty."""
        self._history = self._read(self.history_key, _history_adapter)[: self.history_limit]
        self._gallery = self._read(self.gallery_key, _gallery_adapter)
        logger.info(f"Ledger loaded: {len(self._history)} history entries, {len(self._gallery)} videos")

    def _read(self, key: str, adapter: TypeAdapter) -> list:
        try:
            raw = self.store.get(key)
        except Exception as e:
            logger.error(f"Failed to read {key}: {e}")
            return []

        if not raw:
            return []

        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Failed to load {key}, treating as empty: {e.error_count()} error(s)")
            return []

    def _write(self, key: str, entries: list):
        payload = [entry.model_dump(mode="json") for entry in entries]
        self.store.set(key, json.dumps(payload))

    def append_history(self, entry: HistoryEntry):
        """Prepend an entry, keeping only the most recent ``history_limit``."""
        self._history = [entry, *self._history][: self.history_limit]
        self._write(self.history_key, self._history)

    def clear_history(self):
        self._history = []
        self.store.remove(self.history_key)

    def append_gallery(self, asset: GalleryEntry):
        self._gallery = [asset, *self._gallery]
        self._write(self.gallery_key, self._gallery)

    def delete_gallery(self, asset_id: str):
        """Remove a saved video by id. Unknown ids leave the gallery unchanged."""
        self._gallery = [asset for asset in self._gallery if asset.id != asset_id]
        self._write(self.gallery_key, self._gallery)

    def get_gallery(self, asset_id: str) -> Optional[GalleryEntry]:
        return next((asset for asset in self._gallery if asset.id == asset_id), None)

    def known_ids(self) -> set[str]:
        return {entry.id for entry in self._history} | {asset.id for asset in self._gallery}
