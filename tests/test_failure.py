"""Tests for failure classification and problem documents."""

from tcgtracker.models.failure import (
    FailureKind,
    FileParseError,
    ImportFailedError,
    InvalidLimitError,
    InvalidRequestError,
    KnownError,
    SourceNotFoundError,
)


class TestKnownErrors:
    def test_all_are_known_errors(self) -> None:
        errors = [
            InvalidRequestError(),
            InvalidLimitError(1, 1000),
            SourceNotFoundError("x"),
            FileParseError("Empty CSV file."),
            ImportFailedError("boom"),
        ]

        assert all(isinstance(e, KnownError) for e in errors)
        assert all(e.status_code == 400 for e in errors)

    def test_kinds(self) -> None:
        assert InvalidRequestError().kind == FailureKind.INVALID_REQUEST
        assert InvalidLimitError(1, 1000).kind == FailureKind.INVALID_LIMIT
        assert SourceNotFoundError(None).kind == FailureKind.SOURCE_NOT_FOUND
        assert FileParseError("x").kind == FailureKind.INVALID_FILE
        assert ImportFailedError("x").kind == FailureKind.IMPORT_FAILED

    def test_blank_source_named_none(self) -> None:
        assert SourceNotFoundError("  ").errors == {
            "source": ["No importer is registered for source '(none)'."]
        }

    def test_file_error_without_field_map(self) -> None:
        error = FileParseError("Invalid JSON file.")

        assert error.field_errors is None
        assert error.errors == {"file": ["Invalid JSON file."]}


class TestProblemDetails:
    def test_to_response(self) -> None:
        problem = InvalidLimitError(1, 1000).to_response(instance="/import/apply")

        assert problem.type == "https://api.tcgtracker.dev/errors/bad-request"
        assert problem.title == "Invalid limit"
        assert problem.status == 400
        assert problem.detail == "The request parameters were invalid."
        assert problem.instance == "/import/apply"
        assert problem.errors == {"limit": ["limit must be between 1 and 1000"]}

    def test_explicit_detail_kept(self) -> None:
        problem = ImportFailedError("remote timed out", field="file").to_response()

        assert problem.title == "Import failed"
        assert problem.detail == "remote timed out"
        assert problem.errors == {"file": ["remote timed out"]}

    def test_unmapped_status_uses_blank_type(self) -> None:
        error = KnownError(FailureKind.IMPORT_FAILED, "Teapot", status_code=418)

        problem = error.to_response()

        assert problem.type == "about:blank"
        assert problem.detail is None
