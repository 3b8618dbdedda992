"""
Tests unitarios para la validación de respuestas de Notion (schemas.py).
"""
from datetime import datetime, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from notion_ingest.domain.entities.content_entry import NormalizedRecord
from notion_ingest.infrastructure.external.notion_sync.schemas import (
    DateProperty,
    FilesProperty,
    NotionProperty,
    parse_block_page,
    parse_query_result,
    validate_normalized_record,
)
from notion_ingest.shared.exceptions.ingest import (
    BlockFetchError,
    EnvelopeValidationError,
    RecordValidationError,
)

property_adapter = TypeAdapter(NotionProperty)


class TestParseQueryResult:
    """Tests para parse_query_result()."""

    def test_valid_envelope_is_parsed(self, notion) -> None:
        raw = notion.envelope([notion.page("p1"), notion.page("p2", slug="second")])

        result = parse_query_result(raw)

        assert [page.id for page in result.results] == ["p1", "p2"]
        assert result.has_more is False
        assert result.results[0].properties["Slug"].type == "rich_text"

    def test_extra_fields_are_ignored(self, notion) -> None:
        page = notion.page("p1")
        page["request_status"] = "ok"
        page["properties"]["Slug"]["future_field"] = {"x": 1}
        raw = notion.envelope([page])
        raw["developer_survey"] = "https://example.com"

        result = parse_query_result(raw)

        assert result.results[0].id == "p1"
        assert not hasattr(result.results[0], "request_status")

    def test_missing_required_field_rejects_whole_envelope(self, notion) -> None:
        bad = notion.page("p2")
        del bad["last_edited_time"]
        raw = notion.envelope([notion.page("p1"), bad])

        with pytest.raises(EnvelopeValidationError) as exc_info:
            parse_query_result(raw)

        assert exc_info.value.error_code == "ENVELOPE_VALIDATION_ERROR"
        assert any("last_edited_time" in err["loc"] for err in exc_info.value.errors)

    def test_unknown_property_tag_rejects_whole_envelope(self, notion) -> None:
        page = notion.page("p1", extra_properties={"Votes": {"id": "v", "type": "number", "number": 3}})

        with pytest.raises(EnvelopeValidationError):
            parse_query_result(notion.envelope([page]))

    def test_unknown_file_tag_rejects_envelope(self, notion) -> None:
        page = notion.page("p1")
        page["properties"]["Sharing Image"] = {
            "id": "img",
            "type": "files",
            "files": [{"type": "s3", "s3": {"url": "https://x.example.com/a.png"}}],
        }

        with pytest.raises(EnvelopeValidationError):
            parse_query_result(notion.envelope([page]))

    def test_envelope_object_must_be_list(self, notion) -> None:
        raw = notion.envelope([notion.page("p1")])
        raw["object"] = "page"

        with pytest.raises(EnvelopeValidationError):
            parse_query_result(raw)

    def test_non_mapping_payload_is_rejected(self) -> None:
        with pytest.raises(EnvelopeValidationError):
            parse_query_result(["not", "an", "envelope"])

    def test_primitive_fields_are_not_coerced(self, notion) -> None:
        raw = notion.envelope([notion.page("p1")])
        raw["has_more"] = "false"

        with pytest.raises(EnvelopeValidationError):
            parse_query_result(raw)

    def test_invalid_page_url_is_rejected(self, notion) -> None:
        page = notion.page("p1")
        page["url"] = "notion.so/p1"

        with pytest.raises(EnvelopeValidationError):
            parse_query_result(notion.envelope([page]))

    def test_error_list_is_capped(self, notion) -> None:
        pages = []
        for index in range(30):
            page = notion.page(f"p{index}")
            del page["id"]
            pages.append(page)

        with pytest.raises(EnvelopeValidationError) as exc_info:
            parse_query_result(notion.envelope(pages))

        assert len(exc_info.value.errors) == 20


class TestPropertyVariants:
    """Tests para la unión discriminada de propiedades."""

    def test_empty_select_is_valid(self, notion) -> None:
        prop = property_adapter.validate_python(notion.select(None))

        assert prop.type == "select"
        assert prop.select is None

    def test_empty_date_is_valid(self, notion) -> None:
        prop = property_adapter.validate_python(notion.date(None))

        assert isinstance(prop, DateProperty)
        assert prop.date is None

    def test_date_only_start_becomes_midnight_utc(self, notion) -> None:
        prop = property_adapter.validate_python(notion.date("2024-01-01"))

        assert prop.date.start == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_iso_datetime_start_is_parsed(self, notion) -> None:
        prop = property_adapter.validate_python(notion.date("2024-03-05T10:30:00.000Z"))

        assert prop.date.start == datetime(2024, 3, 5, 10, 30, tzinfo=timezone.utc)

    def test_invalid_date_string_is_rejected(self, notion) -> None:
        with pytest.raises(ValidationError):
            property_adapter.validate_python(notion.date("not-a-date"))

    def test_hosted_and_external_files(self, notion) -> None:
        hosted = property_adapter.validate_python(
            notion.files(["https://s3.example.com/a.png?X-Amz=1"], hosted=True)
        )
        external = property_adapter.validate_python(notion.files(["https://cdn.example.com/b.png"]))

        assert isinstance(hosted, FilesProperty)
        assert hosted.files[0].type == "file"
        assert external.files[0].external.url == "https://cdn.example.com/b.png"

    def test_button_property_is_valid(self, notion) -> None:
        prop = property_adapter.validate_python(notion.button())

        assert prop.type == "button"

    def test_rich_text_span_variants(self, notion) -> None:
        mention = {
            "type": "mention",
            "mention": {"type": "date", "date": {"start": "2024-01-01"}},
            "annotations": notion.span("x")["annotations"],
            "plain_text": "2024-01-01",
            "href": None,
        }
        equation = {
            "type": "equation",
            "equation": {"expression": "e=mc^2"},
            "annotations": notion.span("x")["annotations"],
            "plain_text": "e=mc^2",
            "href": None,
        }
        raw = {"id": "rt", "type": "rich_text", "rich_text": [mention, equation]}

        prop = property_adapter.validate_python(raw)

        assert [span.type for span in prop.rich_text] == ["mention", "equation"]


class TestParseBlockPage:
    """Tests para parse_block_page()."""

    def test_blocks_are_kept_raw(self, notion) -> None:
        block = notion.paragraph("b1", "Hola")
        raw = {"object": "list", "results": [block], "next_cursor": None, "has_more": False}

        page = parse_block_page(raw, block_id="p1")

        assert page.results == [block]

    def test_block_without_type_raises_block_fetch_error(self) -> None:
        raw = {"object": "list", "results": [{"id": "b1"}], "next_cursor": None, "has_more": False}

        with pytest.raises(BlockFetchError) as exc_info:
            parse_block_page(raw, block_id="p1")

        assert exc_info.value.record_id == "p1"


class TestValidateNormalizedRecord:
    """Tests para validate_normalized_record()."""

    def test_valid_record(self) -> None:
        record = validate_normalized_record(
            {
                "title": "Hola",
                "slug": "hola",
                "publishDate": datetime(2024, 1, 1, tzinfo=timezone.utc),
                "share_description": None,
                "share_image": "",
            }
        )

        assert isinstance(record, NormalizedRecord)
        assert record.publish_date.year == 2024

    def test_missing_publish_date_is_rejected(self) -> None:
        with pytest.raises(RecordValidationError) as exc_info:
            validate_normalized_record({"title": "Hola", "slug": "hola", "publishDate": None})

        assert "publishDate" in exc_info.value.message

    def test_empty_slug_is_rejected(self) -> None:
        with pytest.raises(RecordValidationError):
            validate_normalized_record(
                {"title": "Hola", "slug": "", "publishDate": "2024-01-01"}
            )

    def test_unknown_field_is_rejected(self) -> None:
        with pytest.raises(RecordValidationError):
            validate_normalized_record(
                {"title": "Hola", "slug": "hola", "publishDate": "2024-01-01", "tags": []}
            )
