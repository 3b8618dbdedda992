"""
Manejadores de eventos de inicio y cierre del pipeline.
"""
from pathlib import Path
from typing import Any, Awaitable, Callable, List

from loguru import logger

from notion_ingest.core.config import Settings
from notion_ingest.shared.exceptions.ingest import IngestConfigError


def configure_logging(settings: Settings) -> int:
    """
    Agrega el sink de archivo rotativo de loguru.

    Returns:
        int: id del sink (para `logger.remove`)
    """
    Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
    return logger.add(
        settings.LOG_FILE,
        rotation="500 MB",
        retention="10 days",
        level=settings.LOG_LEVEL,
    )


def validate_config(settings: Settings) -> None:
    """
    Valida que la configuracion critica este presente.

    Raises:
        IngestConfigError: si falta el token o la database de Notion
    """
    if not settings.NOTION_TOKEN:
        raise IngestConfigError("NOTION_TOKEN no configurado", setting="NOTION_TOKEN")
    if not settings.NOTION_DATABASE_ID:
        raise IngestConfigError("NOTION_DATABASE_ID no configurado", setting="NOTION_DATABASE_ID")

    warnings = []
    if not settings.uses_sql_store:
        warnings.append("CONTENT_STORE_URL no configurada - el store sera en memoria")
    if settings.INGEST_MAX_CONCURRENCY > 10:
        warnings.append(
            f"INGEST_MAX_CONCURRENCY={settings.INGEST_MAX_CONCURRENCY} puede exceder "
            "el rate limit de Notion (~3 req/s)"
        )

    # Mostrar advertencias
    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")


def startup_handler(settings: Settings) -> Callable[[], Awaitable[int]]:
    """
    Manejador de inicio del pipeline.

    Args:
        settings: Configuracion del proceso

    Returns:
        Callable: Funcion asincrona de inicio; devuelve el id del sink de archivo
    """
    async def startup() -> int:
        try:
            logger.info("Iniciando notion-ingest")
            validate_config(settings)
            sink_id = configure_logging(settings)
            logger.success("Pipeline inicializado correctamente")
            return sink_id
        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            raise

    return startup


def shutdown_handler(resources: List[Any]) -> Callable[[], Awaitable[None]]:
    """
    Manejador de cierre: libera clientes HTTP y engines.

    Args:
        resources: objetos con `aclose()` (async) o `dispose()` (engine SQLAlchemy)
    """
    async def shutdown() -> None:
        logger.info("Cerrando recursos...")
        for resource in resources:
            try:
                if hasattr(resource, "aclose"):
                    await resource.aclose()
                elif hasattr(resource, "dispose"):
                    resource.dispose()
            except Exception as e:
                logger.error(f"Error cerrando {type(resource).__name__}: {e}")
        logger.success("Recursos cerrados correctamente")

    return shutdown
