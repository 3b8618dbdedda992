"""
Constantes del pipeline de ingesta Notion.
"""
from enum import Enum


class SkipKind(str, Enum):
    """Motivos por los que un registro no llega al store."""
    INVALID_SLUG = "invalid_slug"
    BLOCK_FETCH_FAILED = "block_fetch_failed"
    INVALID_RECORD = "invalid_record"
    UNEXPECTED_ERROR = "unexpected_error"


class PropertyType(str, Enum):
    """Tipos de propiedad Notion que entiende el validador."""
    RICH_TEXT = "rich_text"
    TITLE = "title"
    DATE = "date"
    SELECT = "select"
    FILES = "files"
    BUTTON = "button"


# Nombres de propiedades en la database de Notion
PROPERTY_TITLE = "Title"
PROPERTY_SLUG = "Slug"
PROPERTY_PUBLISH_DATE = "Publish Date"
PROPERTY_SHARE_DESCRIPTION = "Sharing Description"
PROPERTY_SHARE_IMAGE = "Sharing Image"

# Dimensiones fijas de la imagen para compartir (open graph)
DEFAULT_SHARE_IMAGE_WIDTH = 1600
DEFAULT_SHARE_IMAGE_HEIGHT = 900

# Paginacion de la API de Notion (max permitido: 100)
DEFAULT_PAGE_SIZE = 100
MAX_BLOCK_PAGES = 1000

DEFAULT_MAX_CONCURRENCY = 5
DEFAULT_LOCK_TIMEOUT = 60.0  # segundos
