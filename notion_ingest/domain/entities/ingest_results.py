"""
Resultados tipados del pipeline (normalizacion, ingesta y corrida).

Se mantienen pequeños y deterministas para logging y tests.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from notion_ingest.domain.entities.content_entry import StoreEntry
from notion_ingest.shared.constants.ingest_constants import SkipKind


@dataclass(frozen=True)
class NormalizedValue:
    """
    Resultado de normalizar una propiedad.

    Nunca se lanza una excepción desde el normalizador: si algo falla el
    valor degrada a un default seguro y `error` describe la causa.
    """

    value: Any
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "NormalizedValue":
        return cls(value=value)

    @classmethod
    def degraded(cls, reason: str, value: Any = "") -> "NormalizedValue":
        return cls(value=value, error=reason)


@dataclass(frozen=True)
class RecordSkip:
    """Diagnóstico de un registro que no se ingestó."""

    record_id: str
    kind: SkipKind
    reason: str


@dataclass
class IngestResult:
    """
    Salida del RecordIngestor para una corrida.

    - entries: en el orden de la respuesta de Notion
    - skips: registros descartados con su motivo
    - warnings: degradaciones no fatales (p.ej. imagen no transcodificada)
    """

    entries: List[StoreEntry] = field(default_factory=list)
    skips: List[RecordSkip] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SyncReport:
    """Resumen de una corrida completa del StoreSynchronizer."""

    database_id: str
    fetched: int
    ingested: int
    skips: tuple[RecordSkip, ...]
    warnings: tuple[str, ...]
    started_at: datetime
    finished_at: datetime

    @property
    def skipped(self) -> int:
        return len(self.skips)

    @property
    def has_warnings(self) -> bool:
        return bool(self.skips or self.warnings)
