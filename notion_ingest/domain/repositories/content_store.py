"""
Interfaz del content store destino.
Define el contrato que debe cumplir cualquier implementación.

Las operaciones son síncronas desde el punto de vista del sincronizador:
entre `clear()` y el último `set()` no hay puntos de suspensión.
"""
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from notion_ingest.domain.entities.content_entry import StoreEntry


class IContentStore(ABC):
    """
    Interfaz del content store.
    Solo el StoreSynchronizer debe mutarlo.
    """

    @abstractmethod
    def clear(self) -> None:
        """Elimina todas las entradas del store."""
        pass

    @abstractmethod
    def set(self, entry: StoreEntry) -> None:
        """
        Inserta o reemplaza una entrada por su `id`.

        Args:
            entry: Entrada completa a persistir
        """
        pass

    @abstractmethod
    def get(self, entry_id: str) -> Optional[StoreEntry]:
        """
        Obtiene una entrada por id.

        Returns:
            Optional[StoreEntry]: Entrada encontrada o None
        """
        pass

    @abstractmethod
    def entries(self) -> Iterator[StoreEntry]:
        """Itera todas las entradas del store."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    def has_digest(self, entry_id: str, digest: str) -> bool:
        """
        Indica si la entrada existe con el mismo digest.

        El sincronizador no lo usa (siempre reemplaza el store). Usado por el
        consumidor downstream para saltear entradas sin cambios.
        """
        entry = self.get(entry_id)
        return entry is not None and entry.digest == digest
