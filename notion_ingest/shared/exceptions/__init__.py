"""
Excepciones de la aplicacion.
"""
from .base import AppException
from .ingest import (
    BlockFetchError,
    EnvelopeValidationError,
    IngestConfigError,
    IngestError,
    NotionApiError,
    RecordValidationError,
    SyncAlreadyRunningError,
    TranscodeError,
)

__all__ = [
    "AppException",
    "IngestError",
    "IngestConfigError",
    "NotionApiError",
    "EnvelopeValidationError",
    "BlockFetchError",
    "RecordValidationError",
    "TranscodeError",
    "SyncAlreadyRunningError",
]
