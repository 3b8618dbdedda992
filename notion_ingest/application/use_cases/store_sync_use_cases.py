"""
Caso de uso: sincronización database Notion -> content store.

Una corrida:
- Adquiere el lock de corrida (una sola corrida a la vez por sincronizador)
- Consulta la database una vez (filtro/orden opacos)
- Valida el envelope; si falla, aborta sin tocar el store
- Ingesta todos los registros (RecordIngestor)
- Reemplaza el contenido del store: clear + set de cada entrada

Entre `clear()` y el último `set()` no hay `await`: ningún lector concurrente
del mismo event loop observa el store vacío o a medio llenar.
"""
from __future__ import annotations

import asyncio
from typing import Dict, List

from loguru import logger

from notion_ingest.application.interfaces.notion_gateway import NotionGateway
from notion_ingest.application.services.record_ingestor import RecordIngestor
from notion_ingest.domain.entities.content_entry import StoreEntry
from notion_ingest.domain.entities.ingest_results import RecordSkip, SyncReport
from notion_ingest.domain.repositories.content_store import IContentStore
from notion_ingest.infrastructure.external.notion_sync.schemas import parse_query_result
from notion_ingest.infrastructure.external.notion_sync.sync_config import NotionSourceConfig
from notion_ingest.shared.constants.ingest_constants import DEFAULT_LOCK_TIMEOUT, SkipKind
from notion_ingest.shared.exceptions.ingest import SyncAlreadyRunningError
from notion_ingest.shared.utils.datetime_utils import utc_now


class StoreSynchronizer:
    """
    Dueño exclusivo del ciclo de vida del content store.

    Uso:
        sync = StoreSynchronizer(client=client, store=store, ingestor=ingestor, source=source)
        report = await sync.run_once()
    """

    def __init__(
        self,
        *,
        client: NotionGateway,
        store: IContentStore,
        ingestor: RecordIngestor,
        source: NotionSourceConfig,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        self._client = client
        self._store = store
        self._ingestor = ingestor
        self._source = source
        self._lock_timeout = lock_timeout
        self._run_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    async def run_once(self) -> SyncReport:
        """
        Ejecuta una corrida completa.

        Raises:
            SyncAlreadyRunningError: si el lock no se obtiene dentro del timeout
            NotionApiError: fallo de transporte en la query (store intacto)
            EnvelopeValidationError: respuesta incompatible (store intacto)
        """
        database_id = self._source.database_id
        if not await self._acquire_run_lock():
            logger.warning(f"Sync ya está corriendo para la database {database_id}")
            raise SyncAlreadyRunningError(database_id, self._lock_timeout)

        try:
            return await self._run_locked()
        finally:
            self._run_lock.release()

    async def _acquire_run_lock(self) -> bool:
        """
        Toma el lock de corrida esperando a lo sumo lock_timeout segundos.

        Returns:
            True si el lock quedó tomado por esta corrida, False si venció el timeout.
        """
        if self._lock_timeout <= 0:
            await self._run_lock.acquire()
            return True

        acquire = asyncio.ensure_future(self._run_lock.acquire())
        try:
            done, _ = await asyncio.wait({acquire}, timeout=self._lock_timeout)
        except asyncio.CancelledError:
            await self._abandon_acquire(acquire)
            raise
        if done:
            return acquire.result()

        await self._abandon_acquire(acquire)
        return False

    async def _abandon_acquire(self, acquire: asyncio.Future) -> None:
        # Si la adquisición se completó junto con la cancelación, el lock se libera
        acquire.cancel()
        try:
            acquired = await acquire
        except asyncio.CancelledError:
            return
        if acquired:
            self._run_lock.release()

    async def _run_locked(self) -> SyncReport:
        started_at = utc_now()
        database_id = self._source.database_id
        logger.info(f"Iniciando sync de la database Notion {database_id}")

        raw = await self._client.query_database(
            database_id,
            filter=self._source.filter,
            sorts=self._source.sorts,
        )
        query_result = parse_query_result(raw)
        warnings: List[str] = []
        if query_result.has_more:
            # Solo se procesa la primera página de resultados
            message = (
                f"La query devolvió has_more=True; se procesan solo "
                f"{len(query_result.results)} registros"
            )
            logger.warning(message)
            warnings.append(message)

        logger.info(f"{len(query_result.results)} registros recibidos de Notion")
        result = await self._ingestor.ingest(query_result.results)
        warnings.extend(result.warnings)

        skips = list(result.skips)
        written = self._replace_store(result.entries, skips, warnings)

        report = SyncReport(
            database_id=database_id,
            fetched=len(query_result.results),
            ingested=written,
            skips=tuple(skips),
            warnings=tuple(warnings),
            started_at=started_at,
            finished_at=utc_now(),
        )
        if report.has_warnings:
            logger.warning(
                f"Sync con advertencias: {report.skipped} registros omitidos, "
                f"{len(report.warnings)} advertencias"
            )
            for skip in report.skips:
                logger.warning(f"  - {skip.record_id} [{skip.kind.value}]: {skip.reason}")
        logger.success(
            f"Sync completado: {report.ingested} ingestados, {report.skipped} omitidos "
            f"de {report.fetched} ({database_id})"
        )
        return report

    def _replace_store(
        self,
        entries: List[StoreEntry],
        skips: List[RecordSkip],
        warnings: List[str],
    ) -> int:
        """
        Reemplaza el contenido del store. Sin puntos de suspensión.

        Returns:
            int: entradas escritas
        """
        staged: Dict[str, StoreEntry] = {}
        for entry in entries:
            if entry.id in staged:
                message = f"Slug duplicado '{entry.id}': se conserva el último registro"
                logger.warning(message)
                warnings.append(message)
            staged[entry.id] = entry

        try:
            self._store.clear()
        except Exception as e:
            message = f"No se pudo vaciar el store: {type(e).__name__}: {e}"
            logger.exception(message)
            warnings.append(message)
            skips.extend(
                RecordSkip(entry_id, SkipKind.UNEXPECTED_ERROR, "store no reemplazado")
                for entry_id in staged
            )
            return 0

        written = 0
        for entry in staged.values():
            try:
                self._store.set(entry)
                written += 1
            except Exception as e:
                logger.exception(f"Error escribiendo la entrada '{entry.id}' en el store")
                skips.append(
                    RecordSkip(entry.id, SkipKind.UNEXPECTED_ERROR, f"{type(e).__name__}: {e}")
                )
        return written
