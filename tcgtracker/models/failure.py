"""
Failure classification and problem responses.

Every request-level failure the import pipeline can explain is raised as a
``KnownError`` subclass. ``tcgtracker.main`` renders these as RFC 7807
problem documents, so a handler never builds an error payload by hand.

Per-row problems inside an import are NOT failures: they are counted in the
import summary and shown as Invalid preview rows.
"""

from enum import Enum

from pydantic import BaseModel, Field

PROBLEM_CONTENT_TYPE = "application/problem+json"


class FailureKind(str, Enum):
    """Classification of request-level failures."""

    # Request shape
    INVALID_REQUEST = "invalid_request"
    INVALID_LIMIT = "invalid_limit"

    # Resolution
    SOURCE_NOT_FOUND = "source_not_found"

    # Upload structure
    INVALID_FILE = "invalid_file"

    # Importer / storage
    IMPORT_FAILED = "import_failed"


# status -> (type URI, default title, default detail)
PROBLEM_TYPES: dict[int, tuple[str, str, str]] = {
    400: (
        "https://api.tcgtracker.dev/errors/bad-request",
        "Bad Request",
        "The request parameters were invalid.",
    ),
    404: (
        "https://api.tcgtracker.dev/errors/not-found",
        "Not Found",
        "The requested resource could not be found.",
    ),
    500: (
        "https://api.tcgtracker.dev/errors/internal-server-error",
        "Internal Server Error",
        "An unexpected error occurred while processing the request.",
    ),
}


class ProblemDetails(BaseModel):
    """Problem document returned for every failed import request."""

    type: str = Field(default="about:blank", description="Problem type URI")
    title: str = Field(..., description="Short summary of the problem")
    status: int = Field(..., description="HTTP status code")
    detail: str | None = Field(default=None, description="Human-readable explanation")
    instance: str | None = Field(default=None, description="Request path that failed")
    errors: dict[str, list[str]] | None = Field(
        default=None,
        description="Field-keyed validation messages",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        errors: dict[str, list[str]] | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.errors = errors
        self.status_code = status_code
        super().__init__(message)

    def to_response(self, instance: str | None = None) -> ProblemDetails:
        """Convert to a problem document."""
        type_uri, _, default_detail = PROBLEM_TYPES.get(
            self.status_code, ("about:blank", "", None)
        )
        return ProblemDetails(
            type=type_uri,
            title=self.message,
            status=self.status_code,
            detail=self.detail if self.detail is not None else default_detail,
            instance=instance,
            errors=self.errors,
        )


class InvalidRequestError(KnownError):
    """Raised when the request body is empty, unparseable or names no source."""

    def __init__(self, reason: str = "A valid import request is required."):
        super().__init__(
            kind=FailureKind.INVALID_REQUEST,
            message="Invalid request.",
            errors={"request": [reason]},
        )


class InvalidLimitError(KnownError):
    """Raised when a row limit is not an integer or falls outside the allowed range."""

    def __init__(self, minimum: int, maximum: int):
        super().__init__(
            kind=FailureKind.INVALID_LIMIT,
            message="Invalid limit",
            errors={"limit": [f"limit must be between {minimum} and {maximum}"]},
        )


class SourceNotFoundError(KnownError):
    """Raised when a source name does not resolve to a registered importer."""

    def __init__(self, source: str | None):
        self.source = source
        shown = (source or "").strip() or "(none)"
        super().__init__(
            kind=FailureKind.SOURCE_NOT_FOUND,
            message="Unknown import source.",
            errors={"source": [f"No importer is registered for source '{shown}'."]},
        )


class FileParseError(KnownError):
    """
    Raised when an upload fails structural validation.

    ``errors`` carries a field-keyed map when the parser can localize the
    problem (e.g. ``{"missing": ["number"]}``); otherwise the message is
    reported under ``file``.
    """

    def __init__(self, message: str, errors: dict[str, list[str]] | None = None):
        self.field_errors = errors
        super().__init__(
            kind=FailureKind.INVALID_FILE,
            message=message,
            errors=errors if errors is not None else {"file": [message]},
        )


class ImportFailedError(KnownError):
    """
    Raised when an importer aborts (remote fetch, decoding or storage failure).

    The transaction has already been rolled back when this is raised.
    """

    def __init__(self, reason: str, field: str = "request"):
        super().__init__(
            kind=FailureKind.IMPORT_FAILED,
            message="Import failed",
            detail=reason,
            errors={field: [reason]},
        )
