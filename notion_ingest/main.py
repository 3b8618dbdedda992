"""
Punto de entrada principal del pipeline de ingesta.
Arma las dependencias desde la configuracion y ejecuta una corrida.
"""
import asyncio
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from loguru import logger

from notion_ingest.application.services.block_paginator import BlockPaginator
from notion_ingest.application.services.property_normalizer import PropertyNormalizer
from notion_ingest.application.services.record_ingestor import RecordIngestor
from notion_ingest.application.use_cases.store_sync_use_cases import StoreSynchronizer
from notion_ingest.core.config import Settings, get_settings
from notion_ingest.core.events import shutdown_handler, startup_handler, validate_config
from notion_ingest.domain.entities.ingest_results import SyncReport
from notion_ingest.domain.repositories.content_store import IContentStore
from notion_ingest.infrastructure.database.session import create_store_engine
from notion_ingest.infrastructure.external.notion_sync.notion_client import (
    NotionApiClient,
    NotionCredentials,
)
from notion_ingest.infrastructure.external.notion_sync.sync_config import (
    source_config_from_settings,
)
from notion_ingest.infrastructure.media.pillow_transcoder import PillowImageTranscoder
from notion_ingest.infrastructure.rendering.html_renderer import BlockHtmlRenderer
from notion_ingest.infrastructure.repositories.content_entry_repository import SqlContentStore
from notion_ingest.infrastructure.repositories.memory_content_store import InMemoryContentStore
from notion_ingest.shared.exceptions.base import AppException


@dataclass
class IngestApplication:
    """Sincronizador armado + recursos a cerrar al terminar."""

    synchronizer: StoreSynchronizer
    store: IContentStore
    resources: List[Any] = field(default_factory=list)
    log_sink_id: Optional[int] = None

    async def aclose(self) -> None:
        await shutdown_handler(self.resources)()
        if self.log_sink_id is not None:
            logger.remove(self.log_sink_id)
            self.log_sink_id = None


def build_store(settings: Settings, resources: List[Any]) -> IContentStore:
    """Store SQL si hay CONTENT_STORE_URL, si no en memoria."""
    if settings.uses_sql_store:
        engine = create_store_engine(settings.CONTENT_STORE_URL)
        resources.append(engine)
        return SqlContentStore(engine)
    return InMemoryContentStore()


def build_from_env(settings: Optional[Settings] = None, *, validate: bool = True) -> IngestApplication:
    """
    Factory de la aplicacion a partir de Settings (o del entorno).

    Con `validate=False` se asume que la configuracion ya fue validada (startup).

    Raises:
        IngestConfigError: si falta configuracion obligatoria
    """
    settings = settings or get_settings()
    if validate:
        validate_config(settings)

    client = NotionApiClient(
        NotionCredentials(token=settings.NOTION_TOKEN, notion_version=settings.NOTION_VERSION),
        base_url=settings.NOTION_API_URL,
        timeout_s=settings.NOTION_TIMEOUT_S,
        max_retries=settings.NOTION_MAX_RETRIES,
    )
    transcoder = PillowImageTranscoder(
        Path(settings.ASSETS_DIR),
        url_prefix=settings.ASSETS_URL_PREFIX,
        timeout_s=settings.NOTION_TIMEOUT_S,
    )
    resources: List[Any] = [client, transcoder]
    store = build_store(settings, resources)

    source = source_config_from_settings(settings)
    ingestor = RecordIngestor(
        PropertyNormalizer(
            transcoder,
            image_width=settings.SHARE_IMAGE_WIDTH,
            image_height=settings.SHARE_IMAGE_HEIGHT,
        ),
        BlockPaginator(client, page_size=settings.NOTION_PAGE_SIZE),
        BlockHtmlRenderer(),
        mapping=source.property_mapping,
        max_concurrency=settings.INGEST_MAX_CONCURRENCY,
    )
    synchronizer = StoreSynchronizer(
        client=client,
        store=store,
        ingestor=ingestor,
        source=source,
        lock_timeout=settings.SYNC_LOCK_TIMEOUT_S,
    )
    return IngestApplication(synchronizer=synchronizer, store=store, resources=resources)


async def run_sync(settings: Optional[Settings] = None) -> SyncReport:
    """Ejecuta una corrida completa y libera los recursos."""
    settings = settings or get_settings()
    log_sink_id = await startup_handler(settings)()
    try:
        app = build_from_env(settings, validate=False)
    except Exception:
        logger.remove(log_sink_id)
        raise
    app.log_sink_id = log_sink_id

    try:
        return await app.synchronizer.run_once()
    finally:
        await app.aclose()


def main() -> int:
    load_dotenv()
    try:
        report = asyncio.run(run_sync())
    except AppException as e:
        logger.error(f"Corrida abortada: {e.to_dict()}")
        return 1
    return 0 if not report.skips else 2


if __name__ == "__main__":
    sys.exit(main())
