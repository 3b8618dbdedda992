"""
Tests unitarios para PropertyNormalizer.

Cada variante de propiedad se construye con el schema real (TypeAdapter) para
que el normalizador reciba exactamente lo que produce la validación.
"""
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from pydantic import TypeAdapter

from notion_ingest.application.services.property_normalizer import (
    PropertyNormalizer,
    file_source_url,
    first_plain_text,
)
from notion_ingest.infrastructure.external.notion_sync.schemas import FilesProperty, NotionProperty

property_adapter = TypeAdapter(NotionProperty)


def _prop(raw):
    return property_adapter.validate_python(raw)


class TestPrimitiveVariants:
    """Tests para rich_text, title, date y select."""

    @pytest.mark.asyncio
    async def test_rich_text_returns_first_span(self, normalizer, notion) -> None:
        raw = notion.rich_text("primero")
        raw["rich_text"].append(notion.span(" segundo"))

        result = await normalizer.normalize(_prop(raw))

        assert result.ok
        assert result.value == "primero"

    @pytest.mark.asyncio
    async def test_empty_rich_text_returns_empty_string(self, normalizer, notion) -> None:
        result = await normalizer.normalize(_prop(notion.rich_text("")))

        assert result.ok
        assert result.value == ""

    @pytest.mark.asyncio
    async def test_title_returns_plain_text(self, normalizer, notion) -> None:
        result = await normalizer.normalize(_prop(notion.title("Hello World")))

        assert result.value == "Hello World"

    @pytest.mark.asyncio
    async def test_date_returns_start(self, normalizer, notion) -> None:
        result = await normalizer.normalize(_prop(notion.date("2024-01-01")))

        assert result.value == datetime(2024, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_empty_date_returns_none(self, normalizer, notion) -> None:
        result = await normalizer.normalize(_prop(notion.date(None)))

        assert result.ok
        assert result.value is None

    @pytest.mark.asyncio
    async def test_select_returns_option_name(self, normalizer, notion) -> None:
        result = await normalizer.normalize(_prop(notion.select("Published")))

        assert result.value == "Published"

    @pytest.mark.asyncio
    async def test_empty_select_returns_empty_string(self, normalizer, notion) -> None:
        result = await normalizer.normalize(_prop(notion.select(None)))

        assert result.value == ""

    @pytest.mark.asyncio
    async def test_missing_property_returns_none(self, normalizer) -> None:
        result = await normalizer.normalize(None)

        assert result.ok
        assert result.value is None


class TestUnhandledVariants:
    """Tests para variantes que el normalizador no mapea."""

    @pytest.mark.asyncio
    async def test_button_degrades_to_empty_string(self, normalizer, notion) -> None:
        result = await normalizer.normalize(_prop(notion.button()))

        assert result.value == ""
        assert not result.ok
        assert "button" in result.error

    @pytest.mark.asyncio
    async def test_unknown_object_degrades_to_empty_string(self, normalizer) -> None:
        result = await normalizer.normalize(SimpleNamespace(type="formula", id="f"))

        assert result.value == ""
        assert "formula" in result.error


class TestFilesVariant:
    """Tests para la propiedad files (share image)."""

    @pytest.mark.asyncio
    async def test_external_file_is_transcoded(self, normalizer, transcoder, notion) -> None:
        raw = notion.files(["https://cdn.example.com/a.png", "https://cdn.example.com/b.png"])

        result = await normalizer.normalize(_prop(raw))

        assert result.ok
        assert result.value.startswith("/_assets/")
        assert transcoder.calls == [("https://cdn.example.com/a.png", 1600, 900)]

    @pytest.mark.asyncio
    async def test_hosted_file_uses_signed_url(self, normalizer, transcoder, notion) -> None:
        url = "https://s3.example.com/a.png?X-Amz-Signature=abc"

        await normalizer.normalize(_prop(notion.files([url], hosted=True)))

        assert transcoder.calls[0][0] == url

    @pytest.mark.asyncio
    async def test_custom_dimensions_are_used(self, transcoder, notion) -> None:
        normalizer = PropertyNormalizer(transcoder, image_width=1200, image_height=630)

        await normalizer.normalize(_prop(notion.files(["https://cdn.example.com/a.png"])))

        assert transcoder.calls[0][1:] == (1200, 630)

    @pytest.mark.asyncio
    async def test_transcoder_failure_degrades_to_empty_string(
        self, failing_transcoder, notion
    ) -> None:
        normalizer = PropertyNormalizer(failing_transcoder)

        result = await normalizer.normalize(_prop(notion.files(["https://cdn.example.com/a.png"])))

        assert result.value == ""
        assert not result.ok
        assert "img" in result.error

    @pytest.mark.asyncio
    async def test_empty_file_list_degrades(self, normalizer, transcoder, notion) -> None:
        result = await normalizer.normalize(_prop(notion.files([])))

        assert result.value == ""
        assert not result.ok
        assert transcoder.calls == []

    @pytest.mark.asyncio
    async def test_unexpected_descriptor_degrades(self, normalizer, transcoder) -> None:
        prop = FilesProperty.model_construct(
            type="files", id="img", files=[SimpleNamespace(type="s3", url="https://x")]
        )

        result = await normalizer.normalize(prop)

        assert result.value == ""
        assert "tipo de archivo no manejado" in result.error
        assert transcoder.calls == []

    @pytest.mark.asyncio
    async def test_empty_transcoder_result_degrades(self, normalizer, transcoder, notion) -> None:
        async def _empty(source_url, width, height):
            return ""

        transcoder.transcode = _empty

        result = await normalizer.normalize(_prop(notion.files(["https://cdn.example.com/a.png"])))

        assert result.value == ""
        assert not result.ok


class TestHelpers:
    """Tests para helpers puros."""

    def test_first_plain_text_of_empty_list(self) -> None:
        assert first_plain_text([]) == ""

    def test_file_source_url_rejects_none(self) -> None:
        with pytest.raises(ValueError):
            file_source_url(None)
