"""
Entidades del content store: registro normalizado y entrada persistida.

NormalizedRecord es el contrato del store destino, independiente de la forma
en que Notion codifica las propiedades.
"""
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictStr, StringConstraints

from notion_ingest.shared.utils.datetime_utils import coerce_notion_datetime

NotionDateTime = Annotated[datetime, BeforeValidator(coerce_notion_datetime)]
NonEmptyStr = Annotated[str, StringConstraints(strict=True, min_length=1)]


class NormalizedRecord(BaseModel):
    """
    Registro plano listo para el pipeline de render.

    `publishDate` conserva el nombre que consume el sitio; en Python se
    expone como `publish_date`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    title: StrictStr
    slug: NonEmptyStr
    publish_date: NotionDateTime = Field(alias="publishDate")
    share_description: Optional[StrictStr] = None
    share_image: Optional[StrictStr] = None

    def to_store_dict(self) -> Dict[str, Any]:
        """Serializa con los nombres del store (JSON-safe, fechas ISO)."""
        return self.model_dump(mode="json", by_alias=True)


def compute_digest(record: NormalizedRecord) -> str:
    """
    Digest determinista (SHA-256) de los datos normalizados.

    Solo depende de los campos del registro: dos registros con los mismos
    valores producen el mismo digest, cambiar cualquier campo lo cambia.
    """
    serialized = json.dumps(record.to_store_dict(), sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class RenderedContent:
    """Markup producido por el renderer de bloques."""

    html: str


@dataclass(frozen=True)
class StoreEntry:
    """
    Unidad persistida en el content store.

    - id: texto del slug (identidad estable)
    - data: registro normalizado
    - body: árbol de bloques crudo serializado a JSON
    - rendered: HTML del árbol de bloques
    - digest: hash de `data` para detectar entradas sin cambios
    """

    id: str
    data: NormalizedRecord
    body: str
    rendered: RenderedContent
    digest: str
