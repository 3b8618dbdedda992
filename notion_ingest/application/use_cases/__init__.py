"""
Casos de uso de la aplicacion.
"""
from .store_sync_use_cases import StoreSynchronizer

__all__ = ["StoreSynchronizer"]
