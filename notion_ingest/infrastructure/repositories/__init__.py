"""
Implementaciones del content store (memoria y SQL).
"""
from .content_entry_repository import SqlContentStore
from .memory_content_store import InMemoryContentStore

__all__ = ["InMemoryContentStore", "SqlContentStore"]
