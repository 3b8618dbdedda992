"""
Schemas pydantic de las respuestas de la API de Notion.

Defienden al pipeline de la variabilidad del schema remoto:
- Los campos extra se ignoran.
- Un campo requerido faltante rechaza la respuesta completa (fail-closed).
- Las uniones (propiedades, archivos, rich text) se discriminan estrictamente
  por `type`; un tag desconocido es un error de validación.
- Solo se coercionan strings tipo fecha; el resto se verifica sin coerción.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
)

from notion_ingest.domain.entities.content_entry import NormalizedRecord, NotionDateTime
from notion_ingest.shared.exceptions.ingest import (
    BlockFetchError,
    EnvelopeValidationError,
    RecordValidationError,
)

# Cantidad maxima de errores que se reportan en excepciones/logs
_MAX_REPORTED_ERRORS = 20


def _check_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"URL inválida: {value!r}")
    return value


NotionUrl = Annotated[StrictStr, AfterValidator(_check_url)]


class _NotionModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


# ---------------------------------------------------------------------------
# Rich text
# ---------------------------------------------------------------------------

class RichTextAnnotations(_NotionModel):
    bold: StrictBool
    italic: StrictBool
    strikethrough: StrictBool
    underline: StrictBool
    code: StrictBool
    color: StrictStr


class _RichTextBase(_NotionModel):
    annotations: RichTextAnnotations
    plain_text: StrictStr
    href: Optional[StrictStr] = None


class TextLink(_NotionModel):
    url: StrictStr


class TextContent(_NotionModel):
    content: StrictStr
    link: Optional[TextLink] = None


class TextRichText(_RichTextBase):
    type: Literal["text"]
    text: TextContent


class MentionRichText(_RichTextBase):
    type: Literal["mention"]
    mention: Dict[str, Any]


class EquationContent(_NotionModel):
    expression: StrictStr


class EquationRichText(_RichTextBase):
    type: Literal["equation"]
    equation: EquationContent


RichText = Annotated[
    Union[TextRichText, MentionRichText, EquationRichText],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Archivos
# ---------------------------------------------------------------------------

class HostedFileContent(_NotionModel):
    url: NotionUrl
    expiry_time: NotionDateTime


class HostedFile(_NotionModel):
    """Archivo alojado por Notion (URL firmada con expiración)."""

    type: Literal["file"]
    name: Optional[StrictStr] = None
    file: HostedFileContent


class ExternalFileContent(_NotionModel):
    url: NotionUrl


class ExternalFile(_NotionModel):
    """Archivo referenciado por URL externa."""

    type: Literal["external"]
    name: Optional[StrictStr] = None
    external: ExternalFileContent


NotionFile = Annotated[Union[HostedFile, ExternalFile], Field(discriminator="type")]


# ---------------------------------------------------------------------------
# Propiedades
# ---------------------------------------------------------------------------

class SelectOption(_NotionModel):
    id: StrictStr
    name: StrictStr
    color: StrictStr


class SelectProperty(_NotionModel):
    type: Literal["select"]
    id: StrictStr
    # Notion envia `null` cuando la propiedad esta vacia
    select: Optional[SelectOption]


class DateValue(_NotionModel):
    start: NotionDateTime
    end: Optional[NotionDateTime]
    time_zone: Optional[StrictStr]


class DateProperty(_NotionModel):
    type: Literal["date"]
    id: StrictStr
    date: Optional[DateValue]


class ButtonProperty(_NotionModel):
    type: Literal["button"]
    id: StrictStr
    button: Dict[str, Any]


class RichTextProperty(_NotionModel):
    type: Literal["rich_text"]
    id: StrictStr
    rich_text: List[RichText]


class TitleProperty(_NotionModel):
    type: Literal["title"]
    id: StrictStr
    title: List[RichText]


class FilesProperty(_NotionModel):
    type: Literal["files"]
    id: StrictStr
    files: List[NotionFile]


NotionProperty = Annotated[
    Union[
        SelectProperty,
        DateProperty,
        ButtonProperty,
        RichTextProperty,
        TitleProperty,
        FilesProperty,
    ],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Páginas y envelopes
# ---------------------------------------------------------------------------

class PartialUser(_NotionModel):
    object: Literal["user"]
    id: StrictStr


class PageParent(_NotionModel):
    type: StrictStr
    database_id: StrictStr


class NotionPage(_NotionModel):
    """Registro (página) de una database de Notion."""

    object: Literal["page"]
    id: StrictStr
    created_time: NotionDateTime
    last_edited_time: NotionDateTime
    created_by: PartialUser
    last_edited_by: PartialUser
    cover: Optional[Any] = None
    icon: Optional[Any] = None
    parent: PageParent
    archived: StrictBool
    in_trash: StrictBool
    properties: Dict[str, NotionProperty]
    url: NotionUrl
    public_url: Optional[NotionUrl]


class NotionQueryResult(_NotionModel):
    """Envelope de `POST /databases/{id}/query`."""

    object: Literal["list"]
    results: List[NotionPage]
    next_cursor: Optional[StrictStr]
    has_more: StrictBool
    type: Optional[StrictStr] = None
    request_id: Optional[StrictStr] = None


class BlockListPage(_NotionModel):
    """
    Una página de `GET /blocks/{id}/children`.

    Los bloques se conservan como dicts crudos: el body persistido debe ser
    exactamente lo que devolvió Notion.
    """

    object: Optional[Literal["list"]] = None
    results: List[Dict[str, Any]]
    next_cursor: Optional[StrictStr]
    has_more: StrictBool

    @field_validator("results")
    @classmethod
    def _blocks_have_identity(cls, blocks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        for index, block in enumerate(blocks):
            if not isinstance(block.get("id"), str) or not isinstance(block.get("type"), str):
                raise ValueError(f"el bloque #{index} no tiene 'id' y 'type'")
        return blocks


# ---------------------------------------------------------------------------
# Funciones de validación
# ---------------------------------------------------------------------------

def compact_errors(error: ValidationError) -> List[Dict[str, Any]]:
    """Resume los errores de pydantic en un formato corto y serializable."""
    return [
        {
            "loc": ".".join(str(part) for part in err["loc"]),
            "type": err["type"],
            "msg": err["msg"],
        }
        for err in error.errors()[:_MAX_REPORTED_ERRORS]
    ]


def parse_query_result(raw: Any) -> NotionQueryResult:
    """
    Valida el envelope completo de una query de database.

    Raises:
        EnvelopeValidationError: si cualquier parte del envelope es inválida.
    """
    try:
        return NotionQueryResult.model_validate(raw)
    except ValidationError as e:
        raise EnvelopeValidationError(
            f"Respuesta de Notion inválida ({e.error_count()} errores de schema)",
            errors=compact_errors(e),
        ) from e


def parse_block_page(raw: Any, *, block_id: str) -> BlockListPage:
    """
    Valida una página del listado de bloques.

    Raises:
        BlockFetchError: si la página no cumple el schema.
    """
    try:
        return BlockListPage.model_validate(raw)
    except ValidationError as e:
        details = "; ".join(f"{err['loc']}: {err['msg']}" for err in compact_errors(e))
        raise BlockFetchError(block_id, f"respuesta inválida ({details})") from e


def validate_normalized_record(values: Dict[str, Any]) -> NormalizedRecord:
    """
    Segunda pasada de validación, contra el schema del store destino.

    Raises:
        RecordValidationError: si el registro no cumple el contrato destino.
    """
    try:
        return NormalizedRecord.model_validate(values)
    except ValidationError as e:
        errors = compact_errors(e)
        fields = ", ".join(err["loc"] for err in errors)
        raise RecordValidationError(
            f"Registro no cumple el schema destino ({fields})", errors=errors
        ) from e
