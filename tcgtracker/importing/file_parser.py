"""
Structural validation for uploaded catalog files.

Supports:
- CSV: header must contain name, set and number (data rows are not checked)
- JSON: top-level array of objects with name, set/set_code and number/collector_number

The upload is buffered in memory and rewound, so the importer can read it
again without re-uploading. Rows are validated by the importer, not here.
"""

import csv
import io
import json
import logging
from pathlib import PurePath
from types import TracebackType
from typing import Any, Protocol

from tcgtracker.config import DEFAULT_PREVIEW_LIMIT
from tcgtracker.models.failure import FileParseError

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = "text/csv"
JSON_CONTENT_TYPE = "application/json"

REQUIRED_CSV_COLUMNS = ("name", "set", "number")


class Upload(Protocol):
    """What the parser needs from an uploaded file (FastAPI's UploadFile fits)."""

    filename: str | None

    async def read(self, size: int = -1) -> bytes: ...


class FileParseResult:
    """
    A parsed upload: an in-memory buffer plus its detected content type.

    The caller owns the buffer and must release it once the importer is done,
    normally by using the result as a context manager.
    """

    def __init__(self, stream: io.BytesIO, content_type: str):
        self.stream = stream
        self.content_type = content_type

    def open_read(self) -> io.BytesIO:
        """Rewind and return the buffer."""
        self.stream.seek(0)
        return self.stream

    @property
    def closed(self) -> bool:
        return self.stream.closed

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> "FileParseResult":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def _has_string(item: dict[str, Any], *keys: str) -> bool:
    return any(isinstance(item.get(k), str) and item[k].strip() for k in keys)


class FileParser:
    """Validates uploads against the CSV or JSON-array contract."""

    async def parse(self, upload: Upload | None, limit: int | None = None) -> FileParseResult:
        """
        Buffer and validate an upload.

        Args:
            upload: The uploaded file
            limit: JSON elements to validate (defaults to DEFAULT_PREVIEW_LIMIT)

        Returns:
            FileParseResult rewound to position zero

        Raises:
            FileParseError: If the file is missing, unsupported or malformed
        """
        if upload is None or not upload.filename:
            raise FileParseError("File required.")

        content = await upload.read()
        if not content:
            raise FileParseError("File required.")

        extension = PurePath(upload.filename).suffix.lower()
        if extension == ".csv":
            self._validate_csv(content)
            content_type = CSV_CONTENT_TYPE
        elif extension == ".json":
            self._validate_json(content, limit)
            content_type = JSON_CONTENT_TYPE
        else:
            raise FileParseError("Unsupported file type. Expected .csv or .json.")

        logger.debug("Parsed %s upload %s (%d bytes)", content_type, upload.filename, len(content))
        buffer = io.BytesIO(content)
        buffer.seek(0)
        return FileParseResult(buffer, content_type)

    @staticmethod
    def _validate_csv(content: bytes) -> None:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FileParseError("CSV must be UTF-8 encoded.") from e

        header = next(csv.reader(io.StringIO(text)), None)
        if header is None:
            raise FileParseError("Empty CSV file.")

        columns = {column.strip().lower() for column in header}
        missing = [column for column in REQUIRED_CSV_COLUMNS if column not in columns]
        if missing:
            raise FileParseError("CSV missing required columns.", {"missing": missing})

    @staticmethod
    def _validate_json(content: bytes, limit: int | None) -> None:
        try:
            document = json.loads(content)
        except ValueError as e:
            raise FileParseError("Invalid JSON file.") from e

        if not isinstance(document, list):
            raise FileParseError("Top-level JSON must be an array.")

        effective_limit = limit if limit is not None else DEFAULT_PREVIEW_LIMIT
        for index, item in enumerate(document[:effective_limit], start=1):
            if not isinstance(item, dict):
                raise FileParseError(f"Item {index} is not an object.")
            if not _has_string(item, "set", "set_code"):
                raise FileParseError(f"Item {index} missing 'set' or 'set_code'.")
            if not _has_string(item, "number", "collector_number"):
                raise FileParseError(f"Item {index} missing 'number' or 'collector_number'.")
            if not _has_string(item, "name"):
                raise FileParseError(f"Item {index} missing 'name'.")
