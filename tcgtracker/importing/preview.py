"""
Dry-run preview builder.

Turns an ImportSummary into the table an admin reviews before applying.
Rows are synthesized from the summary: one aggregate row each for new and
updated records, then one row per error message and per info message.
"""

from tcgtracker.importing.base import SourceImporter
from tcgtracker.importing.models import ERROR_PREFIX, ImportSummary
from tcgtracker.importing.schemas import (
    ImportPreviewResponse,
    ImportPreviewRow,
    ImportPreviewSummary,
)


def is_error_message(message: str) -> bool:
    return message[: len(ERROR_PREFIX)].lower() == ERROR_PREFIX.lower()


def build_preview(
    summary: ImportSummary,
    importer: SourceImporter,
    set_code: str | None = None,
) -> ImportPreviewResponse:
    """
    Build the preview response for a dry run.

    The invalid total counts both the summary's error counter and the
    error-prefixed messages, so importers that only fill in one of the two
    are still reported.
    """
    game = next(iter(importer.supported_games), None) or set_code or "Unknown"
    set_label = set_code or "(remote)"

    def row(external_id: str, name: str, status: str, message: str) -> ImportPreviewRow:
        return ImportPreviewRow(
            external_id=external_id,
            name=name,
            game=game,
            set=set_label,
            status=status,
            messages=[message],
        )

    rows: list[ImportPreviewRow] = []
    if summary.created > 0:
        rows.append(
            row("new", "New records", "New", f"{summary.created} new entities will be created.")
        )
    if summary.updated > 0:
        rows.append(
            row(
                "update",
                "Existing records",
                "Update",
                f"{summary.updated} entities will be updated.",
            )
        )

    invalid_messages = [m for m in summary.messages if is_error_message(m)]
    info_messages = [m for m in summary.messages if not is_error_message(m)]

    for index, message in enumerate(invalid_messages):
        rows.append(row(f"invalid-{index}", "Invalid row", "Invalid", message))
    for index, message in enumerate(info_messages):
        rows.append(row(f"info-{index}", "Info", "Info", message))

    return ImportPreviewResponse(
        summary=ImportPreviewSummary(
            new=summary.created,
            update=summary.updated,
            duplicate=0,
            invalid=summary.errors + len(invalid_messages),
        ),
        rows=rows,
    )
