"""
Content store en memoria.

Store por defecto cuando no se configura CONTENT_STORE_URL; también se usa
en tests como fake del store destino.
"""
from typing import Dict, Iterator, Optional

from notion_ingest.domain.entities.content_entry import StoreEntry
from notion_ingest.domain.repositories.content_store import IContentStore


class InMemoryContentStore(IContentStore):
    """Implementación de IContentStore sobre un dict (orden de inserción)."""

    def __init__(self) -> None:
        self._entries: Dict[str, StoreEntry] = {}

    def clear(self) -> None:
        self._entries.clear()

    def set(self, entry: StoreEntry) -> None:
        self._entries[entry.id] = entry

    def get(self, entry_id: str) -> Optional[StoreEntry]:
        return self._entries.get(entry_id)

    def entries(self) -> Iterator[StoreEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)
