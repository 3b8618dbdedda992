"""
Entidades del dominio.
"""
from notion_ingest.domain.entities.content_entry import (
    NormalizedRecord,
    RenderedContent,
    StoreEntry,
    compute_digest,
)
from notion_ingest.domain.entities.ingest_results import (
    IngestResult,
    NormalizedValue,
    RecordSkip,
    SyncReport,
)

__all__ = [
    "NormalizedRecord",
    "RenderedContent",
    "StoreEntry",
    "compute_digest",
    "IngestResult",
    "NormalizedValue",
    "RecordSkip",
    "SyncReport",
]
