"""Tests for structural validation of uploaded files."""

import io
import json

import pytest
from fastapi import UploadFile

from tcgtracker.importing.file_parser import CSV_CONTENT_TYPE, JSON_CONTENT_TYPE, FileParser
from tcgtracker.models.failure import FailureKind, FileParseError


def make_upload(content: bytes, filename: str | None) -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)


@pytest.fixture
def parser() -> FileParser:
    return FileParser()


class TestMissingFile:
    async def test_no_upload(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError, match="File required."):
            await parser.parse(None)

    async def test_no_filename(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError, match="File required."):
            await parser.parse(make_upload(b"name,set,number\n", None))

    async def test_empty_content(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError, match="File required."):
            await parser.parse(make_upload(b"", "cards.csv"))

    async def test_unsupported_extension(self, parser: FileParser) -> None:
        """Only .csv and .json uploads are accepted."""
        with pytest.raises(FileParseError) as exc_info:
            await parser.parse(make_upload(b"<cards/>", "cards.xml"))

        assert exc_info.value.message == "Unsupported file type. Expected .csv or .json."
        assert exc_info.value.kind == FailureKind.INVALID_FILE


class TestCsvValidation:
    async def test_valid_csv(self, parser: FileParser, sample_csv: bytes) -> None:
        result = await parser.parse(make_upload(sample_csv, "cards.csv"))

        assert result.content_type == CSV_CONTENT_TYPE
        assert result.open_read().read() == sample_csv

    async def test_extension_is_case_insensitive(
        self, parser: FileParser, sample_csv: bytes
    ) -> None:
        result = await parser.parse(make_upload(sample_csv, "CARDS.CSV"))

        assert result.content_type == CSV_CONTENT_TYPE

    async def test_header_matching_ignores_case_and_whitespace(self, parser: FileParser) -> None:
        result = await parser.parse(make_upload(b" Name , SET ,Number\nA,B,1\n", "cards.csv"))

        assert result.content_type == CSV_CONTENT_TYPE

    async def test_utf8_bom_accepted(self, parser: FileParser) -> None:
        content = "\ufeffname,set,number\nÉtoile,TFC,1\n".encode()

        result = await parser.parse(make_upload(content, "cards.csv"))

        assert result.content_type == CSV_CONTENT_TYPE

    async def test_missing_columns(self, parser: FileParser) -> None:
        """Missing required columns are listed under 'missing'."""
        with pytest.raises(FileParseError) as exc_info:
            await parser.parse(make_upload(b"name,rarity\nA,common\n", "cards.csv"))

        error = exc_info.value
        assert error.message == "CSV missing required columns."
        assert error.field_errors == {"missing": ["set", "number"]}
        assert error.errors == {"missing": ["set", "number"]}

    async def test_non_utf8(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError, match="CSV must be UTF-8 encoded."):
            await parser.parse(make_upload(b"name,set,number\n\xff\xfe\xfa,A,1\n", "cards.csv"))

    async def test_no_header_row(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError, match="Empty CSV file."):
            await parser.parse(make_upload(b"\xef\xbb\xbf", "cards.csv"))

    async def test_data_rows_not_checked(self, parser: FileParser) -> None:
        """Bad data rows are left for the importer to report."""
        result = await parser.parse(make_upload(b"name,set,number\n,,\n", "cards.csv"))

        assert result.content_type == CSV_CONTENT_TYPE


class TestJsonValidation:
    async def test_valid_json(self, parser: FileParser) -> None:
        content = json.dumps(
            [
                {"name": "Elsa", "set": "TFC", "number": "42"},
                {"name": "Anna", "set_code": "TFC", "collector_number": "1"},
            ]
        ).encode()

        result = await parser.parse(make_upload(content, "cards.json"))

        assert result.content_type == JSON_CONTENT_TYPE

    async def test_invalid_json(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError, match="Invalid JSON file."):
            await parser.parse(make_upload(b"[{", "cards.json"))

    async def test_top_level_must_be_array(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError, match="Top-level JSON must be an array."):
            await parser.parse(make_upload(b'{"cards": []}', "cards.json"))

    async def test_item_not_object(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError) as exc_info:
            await parser.parse(make_upload(b'[{"name":"A","set":"B","number":"1"}, 3]', "c.json"))

        assert exc_info.value.message == "Item 2 is not an object."
        assert exc_info.value.errors == {"file": ["Item 2 is not an object."]}

    async def test_item_missing_name(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError) as exc_info:
            await parser.parse(make_upload(b'[{"set": "TFC", "number": "1"}]', "cards.json"))

        assert exc_info.value.message == "Item 1 missing 'name'."

    async def test_item_missing_set(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError) as exc_info:
            await parser.parse(make_upload(b'[{"name": "Elsa", "number": "1"}]', "cards.json"))

        assert exc_info.value.message == "Item 1 missing 'set' or 'set_code'."

    async def test_item_missing_number(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError) as exc_info:
            await parser.parse(make_upload(b'[{"name": "Elsa", "set": "TFC"}]', "cards.json"))

        assert exc_info.value.message == "Item 1 missing 'number' or 'collector_number'."

    async def test_blank_strings_count_as_missing(self, parser: FileParser) -> None:
        with pytest.raises(FileParseError, match="Item 1 missing 'name'."):
            await parser.parse(
                make_upload(b'[{"name": "  ", "set": "TFC", "number": "1"}]', "cards.json")
            )

    async def test_items_beyond_limit_not_checked(self, parser: FileParser) -> None:
        """Only the first `limit` elements are validated."""
        items = [{"name": "A", "set": "TFC", "number": "1"}, {"bogus": True}]
        content = json.dumps(items).encode()

        result = await parser.parse(make_upload(content, "cards.json"), limit=1)
        assert result.content_type == JSON_CONTENT_TYPE

        with pytest.raises(FileParseError, match="Item 2 missing 'set' or 'set_code'."):
            await parser.parse(make_upload(content, "cards.json"), limit=2)


class TestFileParseResult:
    async def test_buffer_rewound_for_rereading(
        self, parser: FileParser, sample_csv: bytes
    ) -> None:
        """The importer can read the upload again from the start."""
        result = await parser.parse(make_upload(sample_csv, "cards.csv"))

        first = result.open_read().read()
        second = result.open_read().read()

        assert first == second == sample_csv

    async def test_context_manager_releases_buffer(
        self, parser: FileParser, sample_csv: bytes
    ) -> None:
        with await parser.parse(make_upload(sample_csv, "cards.csv")) as result:
            assert not result.closed

        assert result.closed
