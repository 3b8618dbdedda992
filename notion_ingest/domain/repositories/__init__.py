"""
Contratos de repositorio del dominio.
"""
from .content_store import IContentStore

__all__ = ["IContentStore"]
