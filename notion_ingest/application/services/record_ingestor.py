"""
Ingestor de registros de Notion.

Por cada página validada ejecuta, en paralelo entre registros (con límite de
concurrencia):
1. Selección de las propiedades mapeadas
2. Verificación del slug (identidad)
3. Normalización de propiedades + descarga de bloques (concurrentes)
4. Validación contra el schema destino
5. Render del árbol de bloques
6. Construcción del StoreEntry

Un registro que falla no bloquea a los demás: se convierte en RecordSkip.
"""
from __future__ import annotations

import asyncio
import inspect
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from notion_ingest.application.interfaces.block_renderer import BlockRenderer
from notion_ingest.application.services.block_paginator import BlockPaginator
from notion_ingest.application.services.property_normalizer import (
    PropertyNormalizer,
    first_plain_text,
)
from notion_ingest.domain.entities.content_entry import (
    RenderedContent,
    StoreEntry,
    compute_digest,
)
from notion_ingest.domain.entities.ingest_results import IngestResult, RecordSkip
from notion_ingest.infrastructure.external.notion_sync.schemas import (
    NotionPage,
    validate_normalized_record,
)
from notion_ingest.infrastructure.external.notion_sync.sync_config import PropertyMapping
from notion_ingest.shared.constants.ingest_constants import (
    DEFAULT_MAX_CONCURRENCY,
    PropertyType,
    SkipKind,
)
from notion_ingest.shared.exceptions.ingest import BlockFetchError, RecordValidationError


@dataclass
class _RecordOutcome:
    entry: Optional[StoreEntry] = None
    skip: Optional[RecordSkip] = None
    warnings: List[str] = field(default_factory=list)


def slug_text(prop: Optional[Any]) -> str:
    """
    Texto del slug si la propiedad es `rich_text`, o "".

    El slug es la clave de identidad del store: debe ser texto no vacío.
    Una propiedad `title` no cuenta como slug aunque tenga texto.
    """
    prop_type = getattr(prop, "type", None)
    if prop_type != PropertyType.RICH_TEXT.value:
        return ""
    return first_plain_text(prop.rich_text)


class RecordIngestor:
    """
    Orquestador del pipeline por registro.

    Uso:
        ingestor = RecordIngestor(normalizer, paginator, renderer)
        result = await ingestor.ingest(query_result.results)
    """

    def __init__(
        self,
        normalizer: PropertyNormalizer,
        paginator: BlockPaginator,
        renderer: BlockRenderer,
        *,
        mapping: Optional[PropertyMapping] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency debe ser >= 1")
        self._normalizer = normalizer
        self._paginator = paginator
        self._renderer = renderer
        self._mapping = mapping or PropertyMapping()
        self._max_concurrency = max_concurrency

    async def ingest(self, pages: Sequence[NotionPage]) -> IngestResult:
        """
        Ingesta todas las páginas; nunca lanza por un registro individual.

        Returns:
            IngestResult con entries en el orden de `pages`.
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(page: NotionPage) -> _RecordOutcome:
            async with semaphore:
                return await self._ingest_guarded(page)

        outcomes = await asyncio.gather(*(_bounded(page) for page in pages))

        result = IngestResult()
        for outcome in outcomes:
            if outcome.entry is not None:
                result.entries.append(outcome.entry)
            if outcome.skip is not None:
                result.skips.append(outcome.skip)
            result.warnings.extend(outcome.warnings)
        return result

    async def _ingest_guarded(self, page: NotionPage) -> _RecordOutcome:
        """Frontera por registro: cualquier error descarta solo este registro."""
        try:
            return await self._ingest_record(page)
        except BlockFetchError as e:
            logger.error(f"Registro {page.id} descartado: {e.message}")
            return _RecordOutcome(skip=RecordSkip(page.id, SkipKind.BLOCK_FETCH_FAILED, e.reason))
        except RecordValidationError as e:
            logger.warning(f"Registro {page.id} descartado: {e.message}")
            return _RecordOutcome(skip=RecordSkip(page.id, SkipKind.INVALID_RECORD, e.message))
        except Exception as e:
            logger.exception(f"Error inesperado ingestando registro {page.id}")
            return _RecordOutcome(
                skip=RecordSkip(page.id, SkipKind.UNEXPECTED_ERROR, f"{type(e).__name__}: {e}")
            )

    async def _ingest_record(self, page: NotionPage) -> _RecordOutcome:
        selected = {
            field_name: page.properties.get(property_name)
            for field_name, property_name in self._mapping.as_fields().items()
        }

        identity = slug_text(selected["slug"])
        if not identity:
            logger.warning(f"Slug inválido en registro {page.id}; se omite")
            return _RecordOutcome(
                skip=RecordSkip(
                    page.id,
                    SkipKind.INVALID_SLUG,
                    f"la propiedad '{self._mapping.slug}' no es rich text o está vacía",
                )
            )

        normalized, blocks = await asyncio.gather(
            self._normalize_all(selected),
            self._paginator.fetch_all_blocks(page.id),
            return_exceptions=True,
        )
        for failure in (normalized, blocks):
            if isinstance(failure, BaseException):
                raise failure

        values, warnings = normalized
        warnings = [f"{page.id}: {warning}" for warning in warnings]

        record = validate_normalized_record(values)
        html = await self._render(blocks)

        entry = StoreEntry(
            id=identity,
            data=record,
            body=json.dumps(blocks, ensure_ascii=False),
            rendered=RenderedContent(html=html),
            digest=compute_digest(record),
        )
        return _RecordOutcome(entry=entry, warnings=warnings)

    async def _normalize_all(
        self, selected: Dict[str, Optional[Any]]
    ) -> Tuple[Dict[str, Any], List[str]]:
        field_names = list(selected)
        results = await asyncio.gather(
            *(self._normalizer.normalize(selected[name]) for name in field_names)
        )

        values: Dict[str, Any] = {}
        warnings: List[str] = []
        for name, result in zip(field_names, results):
            values[name] = result.value
            if not result.ok:
                warnings.append(f"{name}: {result.error}")
        return values, warnings

    async def _render(self, blocks: List[Dict[str, Any]]) -> str:
        rendered = self._renderer.render(blocks)
        if inspect.isawaitable(rendered):
            rendered = await rendered
        return rendered
