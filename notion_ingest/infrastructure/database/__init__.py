"""
Infraestructura de base de datos del content store.
"""
from notion_ingest.infrastructure.database.session import (
    Base,
    create_session_factory,
    create_store_engine,
    init_db,
)

__all__ = ["Base", "create_session_factory", "create_store_engine", "init_db"]
