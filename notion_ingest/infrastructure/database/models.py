"""
Modelos de base de datos (ORM).
"""
from sqlalchemy import Column, DateTime, JSON, String, Text

from notion_ingest.infrastructure.database.session import Base


class ContentEntryModel(Base):
    """
    Modelo de base de datos para entradas del content store.
    Una fila por slug; `digest` permite al consumidor detectar cambios.
    """

    __tablename__ = "content_entries"

    id = Column(String(512), primary_key=True)
    data = Column(JSON, nullable=False)
    body = Column(Text, nullable=False)
    rendered_html = Column(Text, nullable=False)
    digest = Column(String(64), nullable=False, index=True)
    synced_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<ContentEntry(id={self.id}, digest={self.digest[:12]})>"
