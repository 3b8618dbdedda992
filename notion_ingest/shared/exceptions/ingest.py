"""
Excepciones del pipeline de ingesta Notion -> content store.

Taxonomia:
- Fallos de envelope/transporte abortan la corrida completa (antes de tocar el store).
- Fallos por registro (bloques, schema destino) descartan solo ese registro.
- Fallos de transcodificacion nunca salen del normalizador.
"""
from typing import Any, List, Optional

from notion_ingest.shared.exceptions.base import AppException


class IngestError(AppException):
    """Excepción base para errores del pipeline de ingesta."""

    def __init__(self, message: str, error_code: str = "INGEST_ERROR", details=None):
        super().__init__(message=message, error_code=error_code, details=details)


class IngestConfigError(IngestError):
    """Configuracion faltante o invalida."""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="INGEST_CONFIG_ERROR",
            details={"setting": setting} if setting else None,
        )


class NotionApiError(IngestError):
    """Error de integración con la API de Notion (HTTP / transporte)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        notion_code: Optional[str] = None,
    ):
        self.status_code = status_code
        self.notion_code = notion_code
        super().__init__(
            message=message,
            error_code="NOTION_API_ERROR",
            details={"status_code": status_code, "notion_code": notion_code},
        )


class EnvelopeValidationError(IngestError):
    """
    La respuesta top-level de Notion no cumple el schema esperado.

    Se trata como un cambio incompatible de la API: se aborta la corrida
    completa y el store no se modifica.
    """

    def __init__(self, message: str, errors: Optional[List[dict[str, Any]]] = None):
        self.errors = errors or []
        super().__init__(
            message=message,
            error_code="ENVELOPE_VALIDATION_ERROR",
            details={"errors": self.errors},
        )


class BlockFetchError(IngestError):
    """No se pudo obtener el árbol completo de bloques de un registro."""

    def __init__(self, record_id: str, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(
            message=f"Error obteniendo bloques del registro {record_id}: {reason}",
            error_code="BLOCK_FETCH_ERROR",
            details={"record_id": record_id},
        )


class RecordValidationError(IngestError):
    """El registro normalizado no cumple el schema destino."""

    def __init__(self, message: str, errors: Optional[List[dict[str, Any]]] = None):
        self.errors = errors or []
        super().__init__(
            message=message,
            error_code="RECORD_VALIDATION_ERROR",
            details={"errors": self.errors},
        )


class TranscodeError(IngestError):
    """Fallo al transcodificar un asset externo."""

    def __init__(self, source_url: str, reason: str):
        self.source_url = source_url
        super().__init__(
            message=f"No se pudo transcodificar {source_url}: {reason}",
            error_code="TRANSCODE_ERROR",
            details={"source_url": source_url},
        )


class SyncAlreadyRunningError(IngestError):
    """Excepcion lanzada cuando no se puede adquirir el lock de corrida dentro del timeout."""

    def __init__(self, database_id: str, timeout: float):
        self.database_id = database_id
        self.timeout = timeout
        super().__init__(
            message=(
                f"Timeout ({timeout}s) esperando el lock de sincronizacion "
                f"para la database: {database_id}"
            ),
            error_code="SYNC_ALREADY_RUNNING",
            details={"database_id": database_id, "timeout": timeout},
        )
