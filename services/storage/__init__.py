"""
Ledger Storage

Write-through persistence for generation history and the saved-video gallery.
"""

from .kv_store import InMemoryStore, JsonFileStore, KeyValueStore
from .ledger import Ledger

__all__ = [
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "Ledger",
]
