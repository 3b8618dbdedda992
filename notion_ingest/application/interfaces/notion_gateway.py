"""
Interfaz para las operaciones RPC de Notion que necesita la ingesta.

Este contrato existe para:
- Que el pipeline no dependa de httpx directamente.
- Facilitar tests unitarios con clientes fake.

Solo cubre query de database y listado de bloques hijos; no es un cliente
general de la API de Notion.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol


class NotionGateway(Protocol):
    """
    Acceso a la API de Notion.

    Implementaciones:
    - NotionApiClient (httpx).
    - Fake/stub para tests.
    """

    async def query_database(
        self,
        database_id: str,
        *,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        start_cursor: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Retorna el envelope crudo `{object, results, next_cursor, has_more}`."""
        ...

    async def list_block_children(
        self,
        block_id: str,
        *,
        start_cursor: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Retorna una página cruda de bloques hijos."""
        ...
