"""
Configuracion central del pipeline de ingesta.
Gestiona variables de entorno (o `.env`) y valores por defecto.

Los valores de Notion (token, database, filtro y orden) son opacos para el
core: se pasan tal cual a la API.
"""
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuracion del pipeline.

    NOTION_FILTER y NOTION_SORTS se leen como JSON desde el entorno, p.ej.:
    - NOTION_FILTER='{"property": "Status", "select": {"equals": "Published"}}'
    - NOTION_SORTS='[{"property": "Publish Date", "direction": "ascending"}]'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # Ignorar campos extra del .env
    )

    # Notion
    NOTION_TOKEN: str = Field(default="")
    NOTION_DATABASE_ID: str = Field(default="")
    NOTION_FILTER: Optional[Dict[str, Any]] = Field(default=None)
    NOTION_SORTS: List[Dict[str, Any]] = Field(default_factory=list)
    NOTION_API_URL: str = Field(default="https://api.notion.com/v1")
    NOTION_VERSION: str = Field(default="2022-06-28")
    NOTION_TIMEOUT_S: float = Field(default=30.0)
    NOTION_MAX_RETRIES: int = Field(default=5)
    NOTION_PAGE_SIZE: int = Field(default=100)

    # Ingesta
    INGEST_MAX_CONCURRENCY: int = Field(default=5)
    SYNC_LOCK_TIMEOUT_S: float = Field(default=60.0)

    # Imagenes para compartir (open graph)
    SHARE_IMAGE_WIDTH: int = Field(default=1600)
    SHARE_IMAGE_HEIGHT: int = Field(default=900)
    ASSETS_DIR: str = Field(default="public/_assets")
    ASSETS_URL_PREFIX: str = Field(default="/_assets")

    # Store destino. Vacio -> store en memoria.
    CONTENT_STORE_URL: str = Field(default="")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/notion_ingest.log")

    @computed_field
    @property
    def uses_sql_store(self) -> bool:
        """Indica si el store destino es una base de datos SQL."""
        return bool(self.CONTENT_STORE_URL)


@lru_cache
def get_settings() -> Settings:
    """Instancia cacheada de configuracion (una por proceso)."""
    return Settings()
