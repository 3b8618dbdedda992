"""
Normalizador de propiedades de Notion.

Transforma cada variante tipada de propiedad (rich text, title, date,
select, files) a un valor primitivo para el registro plano.

Politica de degradacion:
- Nunca propaga excepciones al caller: devuelve un NormalizedValue con un
  default seguro ("") y la causa en `error`.
- Tipos de propiedad nuevos/no manejados degradan a "" en vez de romper la
  ingesta (Notion evoluciona su schema de forma independiente).
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from loguru import logger

from notion_ingest.application.interfaces.image_transcoder import ImageTranscoder
from notion_ingest.domain.entities.ingest_results import NormalizedValue
from notion_ingest.infrastructure.external.notion_sync.schemas import (
    DateProperty,
    ExternalFile,
    FilesProperty,
    HostedFile,
    RichTextProperty,
    SelectProperty,
    TitleProperty,
)
from notion_ingest.shared.constants.ingest_constants import (
    DEFAULT_SHARE_IMAGE_HEIGHT,
    DEFAULT_SHARE_IMAGE_WIDTH,
    PropertyType,
)


def first_plain_text(spans: Sequence[Any]) -> str:
    """Texto plano del primer span de rich text, o "" si no hay spans."""
    if not spans:
        return ""
    return spans[0].plain_text or ""


def file_source_url(descriptor: Any) -> str:
    """
    URL de origen de un descriptor de archivo.

    Solo se esperan imágenes; cualquier otra forma de descriptor es un error.

    Raises:
        ValueError: si el descriptor no es `external` ni `file`.
    """
    if isinstance(descriptor, ExternalFile):
        return descriptor.external.url
    if isinstance(descriptor, HostedFile):
        return descriptor.file.url
    descriptor_type = getattr(descriptor, "type", None)
    raise ValueError(f"tipo de archivo no manejado: {descriptor_type!r}")


class PropertyNormalizer:
    """
    Normalizador de propiedades.

    Uso:
        normalizer = PropertyNormalizer(transcoder)
        result = await normalizer.normalize(page.properties["Title"])
        if not result.ok:
            logger.warning(result.error)
    """

    def __init__(
        self,
        transcoder: ImageTranscoder,
        *,
        image_width: int = DEFAULT_SHARE_IMAGE_WIDTH,
        image_height: int = DEFAULT_SHARE_IMAGE_HEIGHT,
    ) -> None:
        self._transcoder = transcoder
        self._image_width = image_width
        self._image_height = image_height
        self._dispatch: Dict[str, Callable[[Any], Awaitable[NormalizedValue]]] = {
            PropertyType.RICH_TEXT.value: self._normalize_rich_text,
            PropertyType.TITLE.value: self._normalize_title,
            PropertyType.DATE.value: self._normalize_date,
            PropertyType.SELECT.value: self._normalize_select,
            PropertyType.FILES.value: self._normalize_files,
        }

    async def normalize(self, prop: Optional[Any]) -> NormalizedValue:
        """
        Normaliza una propiedad a un valor primitivo.

        Args:
            prop: Variante de propiedad validada, o None si el registro no la tiene

        Returns:
            NormalizedValue: valor normalizado (y error si hubo degradación)
        """
        if prop is None:
            return NormalizedValue.success(None)

        prop_type = getattr(prop, "type", None)
        handler = self._dispatch.get(prop_type)
        if handler is None:
            logger.info(f"Tipo de propiedad no manejado: {prop_type}")
            return NormalizedValue.degraded(f"tipo de propiedad no manejado: {prop_type}")
        return await handler(prop)

    async def _normalize_rich_text(self, prop: RichTextProperty) -> NormalizedValue:
        return NormalizedValue.success(first_plain_text(prop.rich_text))

    async def _normalize_title(self, prop: TitleProperty) -> NormalizedValue:
        return NormalizedValue.success(first_plain_text(prop.title))

    async def _normalize_date(self, prop: DateProperty) -> NormalizedValue:
        # Fecha vacia en Notion -> None; el schema destino decide si es valido
        return NormalizedValue.success(prop.date.start if prop.date else None)

    async def _normalize_select(self, prop: SelectProperty) -> NormalizedValue:
        return NormalizedValue.success(prop.select.name if prop.select else "")

    async def _normalize_files(self, prop: FilesProperty) -> NormalizedValue:
        """
        Transcodifica el primer archivo a las dimensiones fijas de share image.

        Cualquier fallo (descriptor inesperado, lista vacía, error del
        transcodificador) degrada a "".
        """
        descriptor = prop.files[0] if prop.files else None
        try:
            source_url = file_source_url(descriptor)
            logger.info(f"Cargando imagen: {source_url}")
            asset_ref = await self._transcoder.transcode(
                source_url, self._image_width, self._image_height
            )
            if not isinstance(asset_ref, str) or not asset_ref:
                raise ValueError(f"el transcodificador devolvió una referencia vacía para {source_url}")
            return NormalizedValue.success(asset_ref)
        except Exception as e:
            logger.warning(f"Error normalizando propiedad files '{prop.id}': {e}")
            return NormalizedValue.degraded(f"files '{prop.id}': {e}")
