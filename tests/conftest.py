"""
Configuración de fixtures para pytest.

Payloads de Notion construidos a mano (forma real de la API 2022-06-28) y
fakes inyectables del gateway, del transcodificador y del store.
"""
from __future__ import annotations

import hashlib
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from notion_ingest.application.services.block_paginator import BlockPaginator
from notion_ingest.application.services.property_normalizer import PropertyNormalizer
from notion_ingest.application.services.record_ingestor import RecordIngestor
from notion_ingest.application.use_cases.store_sync_use_cases import StoreSynchronizer
from notion_ingest.infrastructure.external.notion_sync.sync_config import NotionSourceConfig
from notion_ingest.infrastructure.rendering.html_renderer import BlockHtmlRenderer
from notion_ingest.infrastructure.repositories.memory_content_store import InMemoryContentStore
from notion_ingest.shared.exceptions.ingest import TranscodeError

DATABASE_ID = "db-123"


# =========================================================================
# Builders de payloads Notion
# =========================================================================

def _span(text: str, *, bold: bool = False, href: Optional[str] = None) -> Dict[str, Any]:
    return {
        "type": "text",
        "text": {"content": text, "link": {"url": href} if href else None},
        "annotations": {
            "bold": bold,
            "italic": False,
            "strikethrough": False,
            "underline": False,
            "code": False,
            "color": "default",
        },
        "plain_text": text,
        "href": href,
    }


def _title(text: str, prop_id: str = "title") -> Dict[str, Any]:
    return {"id": prop_id, "type": "title", "title": [_span(text)] if text else []}


def _rich_text(text: str, prop_id: str = "rt") -> Dict[str, Any]:
    return {"id": prop_id, "type": "rich_text", "rich_text": [_span(text)] if text else []}


def _date(start: Optional[str], prop_id: str = "date") -> Dict[str, Any]:
    value = {"start": start, "end": None, "time_zone": None} if start else None
    return {"id": prop_id, "type": "date", "date": value}


def _select(name: Optional[str], prop_id: str = "sel") -> Dict[str, Any]:
    value = {"id": "opt-1", "name": name, "color": "blue"} if name is not None else None
    return {"id": prop_id, "type": "select", "select": value}


def _files(urls: List[str], prop_id: str = "img", hosted: bool = False) -> Dict[str, Any]:
    if hosted:
        files = [
            {
                "type": "file",
                "name": "cover.png",
                "file": {"url": url, "expiry_time": "2024-01-01T01:00:00.000Z"},
            }
            for url in urls
        ]
    else:
        files = [{"type": "external", "name": "cover.png", "external": {"url": url}} for url in urls]
    return {"id": prop_id, "type": "files", "files": files}


def _button(prop_id: str = "btn") -> Dict[str, Any]:
    return {"id": prop_id, "type": "button", "button": {}}


def _page(
    page_id: str,
    *,
    title: str = "Hello World",
    slug: Optional[str] = "hello-world",
    publish_date: Optional[str] = "2024-01-01",
    description: Optional[str] = None,
    image_urls: Optional[List[str]] = None,
    slug_property: Optional[Dict[str, Any]] = None,
    extra_properties: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    properties: Dict[str, Any] = {
        "Title": _title(title),
        "Publish Date": _date(publish_date),
    }
    if slug_property is not None:
        properties["Slug"] = slug_property
    elif slug is not None:
        properties["Slug"] = _rich_text(slug, prop_id="slug")
    if description is not None:
        properties["Sharing Description"] = _rich_text(description, prop_id="desc")
    if image_urls is not None:
        properties["Sharing Image"] = _files(image_urls)
    properties.update(extra_properties or {})

    user = {"object": "user", "id": "user-1"}
    return {
        "object": "page",
        "id": page_id,
        "created_time": "2024-01-01T10:00:00.000Z",
        "last_edited_time": "2024-01-02T10:00:00.000Z",
        "created_by": user,
        "last_edited_by": user,
        "cover": None,
        "icon": None,
        "parent": {"type": "database_id", "database_id": DATABASE_ID},
        "archived": False,
        "in_trash": False,
        "properties": properties,
        "url": f"https://www.notion.so/{page_id}",
        "public_url": None,
    }


def _envelope(pages: List[Dict[str, Any]], *, has_more: bool = False) -> Dict[str, Any]:
    return {
        "object": "list",
        "results": pages,
        "next_cursor": "cursor-next" if has_more else None,
        "has_more": has_more,
        "type": "page_or_database",
        "page_or_database": {},
        "request_id": "req-1",
    }


def _paragraph(block_id: str, text: str) -> Dict[str, Any]:
    return {
        "object": "block",
        "id": block_id,
        "type": "paragraph",
        "has_children": False,
        "paragraph": {"rich_text": [_span(text)], "color": "default"},
    }


def _block(block_type: str, content: Dict[str, Any], block_id: str = "b") -> Dict[str, Any]:
    return {"object": "block", "id": block_id, "type": block_type, block_type: content}


@pytest.fixture
def notion() -> SimpleNamespace:
    """Builders de payloads crudos de Notion."""
    return SimpleNamespace(
        span=_span,
        title=_title,
        rich_text=_rich_text,
        date=_date,
        select=_select,
        files=_files,
        button=_button,
        page=_page,
        envelope=_envelope,
        paragraph=_paragraph,
        block=_block,
    )


# =========================================================================
# Fakes
# =========================================================================

class FakeNotionGateway:
    """
    Gateway en memoria.

    - query_payload: respuesta de `query_database`
    - block_pages: record_id -> lista de páginas (cada una lista de bloques)
    - block_errors: record_id -> excepción a lanzar al listar bloques
    """

    def __init__(self) -> None:
        self.query_payload: Any = _envelope([])
        self.query_error: Optional[Exception] = None
        self.block_pages: Dict[str, List[List[Dict[str, Any]]]] = {}
        self.block_errors: Dict[str, Exception] = {}
        self.queries: List[Dict[str, Any]] = []
        self.block_calls: List[tuple] = []

    async def query_database(self, database_id, *, filter=None, sorts=None, start_cursor=None, page_size=None):
        self.queries.append({"database_id": database_id, "filter": filter, "sorts": sorts})
        if self.query_error is not None:
            raise self.query_error
        return self.query_payload

    async def list_block_children(self, block_id, *, start_cursor=None, page_size=None):
        self.block_calls.append((block_id, start_cursor))
        if block_id in self.block_errors:
            raise self.block_errors[block_id]

        pages = self.block_pages.get(block_id) or [[]]
        index = int(start_cursor) if start_cursor else 0
        has_more = index + 1 < len(pages)
        return {
            "object": "list",
            "results": pages[index],
            "next_cursor": str(index + 1) if has_more else None,
            "has_more": has_more,
            "type": "block",
            "block": {},
        }


class FakeTranscoder:
    """Transcodificador determinista; `error` fuerza un fallo."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.error: Optional[Exception] = None

    async def transcode(self, source_url: str, width: int, height: int) -> str:
        self.calls.append((source_url, width, height))
        if self.error is not None:
            raise self.error
        digest = hashlib.sha256(source_url.encode("utf-8")).hexdigest()[:12]
        return f"/_assets/{digest}-{width}x{height}.webp"


@pytest.fixture
def gateway() -> FakeNotionGateway:
    return FakeNotionGateway()


@pytest.fixture
def transcoder() -> FakeTranscoder:
    return FakeTranscoder()


@pytest.fixture
def failing_transcoder() -> FakeTranscoder:
    fake = FakeTranscoder()
    fake.error = TranscodeError("https://images.example.com/cover.png", "descarga respondió 500")
    return fake


@pytest.fixture
def store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture
def normalizer(transcoder) -> PropertyNormalizer:
    return PropertyNormalizer(transcoder)


@pytest.fixture
def paginator(gateway) -> BlockPaginator:
    return BlockPaginator(gateway, page_size=2)


@pytest.fixture
def ingestor(normalizer, paginator) -> RecordIngestor:
    return RecordIngestor(normalizer, paginator, BlockHtmlRenderer())


@pytest.fixture
def source() -> NotionSourceConfig:
    return NotionSourceConfig(
        database_id=DATABASE_ID,
        filter={"property": "Status", "select": {"equals": "Published"}},
        sorts=[{"property": "Publish Date", "direction": "descending"}],
    )


@pytest.fixture
def synchronizer(gateway, store, ingestor, source) -> StoreSynchronizer:
    return StoreSynchronizer(client=gateway, store=store, ingestor=ingestor, source=source, lock_timeout=1.0)
