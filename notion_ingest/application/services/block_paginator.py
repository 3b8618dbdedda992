"""
Paginador de bloques de Notion.

Recorre `blocks/{id}/children` con el cursor de continuación hasta que
Notion indica que no hay más páginas y entrega el árbol completo.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from notion_ingest.application.interfaces.notion_gateway import NotionGateway
from notion_ingest.infrastructure.external.notion_sync.schemas import parse_block_page
from notion_ingest.shared.constants.ingest_constants import DEFAULT_PAGE_SIZE, MAX_BLOCK_PAGES
from notion_ingest.shared.exceptions.ingest import BlockFetchError, NotionApiError


class BlockPaginator:
    """
    Obtiene el árbol de bloques (nivel superior) de un registro.

    Garantías:
    - El orden de Notion se conserva, también entre páginas.
    - Si falla cualquier página, falla el registro completo (nunca se
      devuelve un árbol parcial).
    """

    def __init__(
        self,
        client: NotionGateway,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = MAX_BLOCK_PAGES,
    ) -> None:
        self._client = client
        self._page_size = page_size
        self._max_pages = max_pages

    async def fetch_all_blocks(self, record_id: str) -> List[Dict[str, Any]]:
        """
        Retorna todos los bloques del registro en orden.

        Raises:
            BlockFetchError: si falla algún request o alguna página es inválida.
        """
        blocks: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        for page_number in range(1, self._max_pages + 1):
            try:
                raw = await self._client.list_block_children(
                    record_id, start_cursor=cursor, page_size=self._page_size
                )
            except NotionApiError as e:
                raise BlockFetchError(record_id, e.message) from e
            except (OSError, ValueError, RuntimeError) as e:
                raise BlockFetchError(record_id, f"{type(e).__name__}: {e}") from e

            page = parse_block_page(raw, block_id=record_id)
            blocks.extend(page.results)

            if not page.has_more or not page.next_cursor:
                logger.debug(
                    f"Bloques de {record_id}: {len(blocks)} en {page_number} página(s)"
                )
                return blocks
            cursor = page.next_cursor

        raise BlockFetchError(
            record_id, f"se superó el límite de {self._max_pages} páginas de bloques"
        )
