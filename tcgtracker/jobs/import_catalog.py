"""
Run a catalog import from the command line.

Uses the same orchestrator as the HTTP endpoints against the configured
database. Runs as a dry run unless --apply is given.

    python -m tcgtracker.jobs.import_catalog lorcana --set TFC
    python -m tcgtracker.jobs.import_catalog dummy --file cards.csv --apply
"""

import argparse
import asyncio
import logging
from pathlib import Path

from tcgtracker.db.database import async_session_factory, dispose_db, init_db
from tcgtracker.importing.orchestrator import ImportOrchestrator, ImportRequest
from tcgtracker.importing.registry import build_default_registry
from tcgtracker.models.failure import KnownError

logger = logging.getLogger(__name__)


class LocalUpload:
    """A file on disk, read the way the parser reads an HTTP upload."""

    def __init__(self, path: Path):
        self.path = path
        self.filename: str | None = path.name

    async def read(self, size: int = -1) -> bytes:
        data = self.path.read_bytes()
        return data if size < 0 else data[:size]


async def run_import(
    source: str,
    set_code: str | None = None,
    file: Path | None = None,
    limit: int | None = None,
    apply: bool = False,
) -> int:
    """
    Run one import and log its outcome.

    Returns:
        Process exit code: 0 on success, 1 if the import was rejected or failed
    """
    await init_db()
    orchestrator = ImportOrchestrator(build_default_registry())
    request = ImportRequest(
        source=source,
        set_code=set_code,
        limit=limit,
        file=LocalUpload(file) if file is not None else None,
    )

    async with async_session_factory() as session:
        try:
            if apply:
                result = await orchestrator.apply(session, request)
                logger.info(
                    "Applied: created=%d updated=%d skipped=%d invalid=%d",
                    result.created,
                    result.updated,
                    result.skipped,
                    result.invalid,
                )
            else:
                preview = await orchestrator.dry_run(session, request)
                for row in preview.rows:
                    logger.info("[%s] %s: %s", row.status, row.name, "; ".join(row.messages))
                logger.info(
                    "Dry run: new=%d update=%d duplicate=%d invalid=%d",
                    preview.summary.new,
                    preview.summary.update,
                    preview.summary.duplicate,
                    preview.summary.invalid,
                )
        except KnownError as e:
            logger.error("%s %s", e.message, e.errors or e.detail or "")
            return 1

    return 0


async def _run_cli(args: argparse.Namespace) -> int:
    try:
        return await run_import(args.source, args.set_code, args.file, args.limit, args.apply)
    finally:
        await dispose_db()


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Import card catalog data")
    parser.add_argument("source", help="Source name or alias (e.g. scryfall, lorcana, dummy)")
    parser.add_argument("--set", dest="set_code", help="Set code to import")
    parser.add_argument("--file", type=Path, help="CSV or JSON file to import instead of remote")
    parser.add_argument("--limit", type=int, help="Record limit (1-1000, default 100)")
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Commit the import (default is a dry run)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    raise SystemExit(asyncio.run(_run_cli(args)))


if __name__ == "__main__":
    main()
