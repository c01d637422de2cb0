from tcgtracker.models.db import Base, CardDB, CardPrintingDB
from tcgtracker.models.failure import (
    PROBLEM_CONTENT_TYPE,
    FailureKind,
    FileParseError,
    ImportFailedError,
    InvalidLimitError,
    InvalidRequestError,
    KnownError,
    ProblemDetails,
    SourceNotFoundError,
)

__all__ = [
    "PROBLEM_CONTENT_TYPE",
    "Base",
    "CardDB",
    "CardPrintingDB",
    "FailureKind",
    "FileParseError",
    "ImportFailedError",
    "InvalidLimitError",
    "InvalidRequestError",
    "KnownError",
    "ProblemDetails",
    "SourceNotFoundError",
]
