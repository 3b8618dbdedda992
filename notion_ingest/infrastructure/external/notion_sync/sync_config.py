"""
Configuración del sync (database Notion -> content store).

La idea es que aquí tengas control de:
- database origen y parámetros de query (filtro/orden opacos)
- qué propiedad de Notion alimenta cada campo del registro normalizado

Este módulo no realiza I/O: solo define configuración.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from notion_ingest.core.config import Settings
from notion_ingest.shared.constants.ingest_constants import (
    PROPERTY_PUBLISH_DATE,
    PROPERTY_SHARE_DESCRIPTION,
    PROPERTY_SHARE_IMAGE,
    PROPERTY_SLUG,
    PROPERTY_TITLE,
)


@dataclass(frozen=True)
class PropertyMapping:
    """
    Define qué propiedad de Notion alimenta cada campo de NormalizedRecord.

    Los nombres son sensibles a mayúsculas, igual que en Notion.
    """

    title: str = PROPERTY_TITLE
    slug: str = PROPERTY_SLUG
    publish_date: str = PROPERTY_PUBLISH_DATE
    share_description: str = PROPERTY_SHARE_DESCRIPTION
    share_image: str = PROPERTY_SHARE_IMAGE

    def as_fields(self) -> Dict[str, str]:
        """Campo destino (nombre del store) -> propiedad Notion."""
        return {
            "title": self.title,
            "slug": self.slug,
            "publishDate": self.publish_date,
            "share_description": self.share_description,
            "share_image": self.share_image,
        }


@dataclass(frozen=True)
class NotionSourceConfig:
    """
    Config de una database Notion a sincronizar.

    `filter` y `sorts` se envían sin modificar: la semántica de filtrado y
    orden pertenece a Notion, no se replica localmente.
    """

    database_id: str
    filter: Optional[Dict[str, Any]] = None
    sorts: List[Dict[str, Any]] = field(default_factory=list)
    property_mapping: PropertyMapping = field(default_factory=PropertyMapping)


def source_config_from_settings(settings: Settings) -> NotionSourceConfig:
    """Construye la config de la database a partir de Settings."""
    return NotionSourceConfig(
        database_id=settings.NOTION_DATABASE_ID,
        filter=settings.NOTION_FILTER,
        sorts=list(settings.NOTION_SORTS),
    )
