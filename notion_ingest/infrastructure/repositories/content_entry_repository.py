"""
Content store sobre SQL (SQLAlchemy).

Cada operación abre y confirma su propia transacción: `set()` es atómico
por entrada.
"""
from typing import Iterator, Optional

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine

from notion_ingest.domain.entities.content_entry import (
    NormalizedRecord,
    RenderedContent,
    StoreEntry,
)
from notion_ingest.domain.repositories.content_store import IContentStore
from notion_ingest.infrastructure.database.models import ContentEntryModel
from notion_ingest.infrastructure.database.session import create_session_factory, init_db
from notion_ingest.shared.utils.datetime_utils import utc_now


def _to_entry(model: ContentEntryModel) -> StoreEntry:
    return StoreEntry(
        id=model.id,
        data=NormalizedRecord.model_validate(model.data),
        body=model.body,
        rendered=RenderedContent(html=model.rendered_html),
        digest=model.digest,
    )


class SqlContentStore(IContentStore):
    """
    Implementación de IContentStore persistida en la tabla `content_entries`.

    Uso:
        engine = create_store_engine("sqlite:///content.db")
        store = SqlContentStore(engine)
    """

    def __init__(self, engine: Engine, *, create_tables: bool = True) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        if create_tables:
            init_db(engine)

    def clear(self) -> None:
        with self._session_factory.begin() as session:
            result = session.execute(delete(ContentEntryModel))
        logger.debug(f"Content store vaciado ({result.rowcount} filas)")

    def set(self, entry: StoreEntry) -> None:
        with self._session_factory.begin() as session:
            session.merge(
                ContentEntryModel(
                    id=entry.id,
                    data=entry.data.to_store_dict(),
                    body=entry.body,
                    rendered_html=entry.rendered.html,
                    digest=entry.digest,
                    synced_at=utc_now(),
                )
            )

    def get(self, entry_id: str) -> Optional[StoreEntry]:
        with self._session_factory() as session:
            model = session.get(ContentEntryModel, entry_id)
            return _to_entry(model) if model is not None else None

    def entries(self) -> Iterator[StoreEntry]:
        with self._session_factory() as session:
            models = session.scalars(select(ContentEntryModel).order_by(ContentEntryModel.id)).all()
            return iter([_to_entry(model) for model in models])

    def __len__(self) -> int:
        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(ContentEntryModel)) or 0
