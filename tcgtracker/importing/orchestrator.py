"""
Import orchestrator.

Single entry point behind the dry-run, apply and options endpoints:
resolves the source, validates the limit, parses an optional upload,
invokes the importer and shapes the result.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.config import DEFAULT_PREVIEW_LIMIT, MAX_PREVIEW_LIMIT, MIN_PREVIEW_LIMIT
from tcgtracker.importing.base import SourceImporter
from tcgtracker.importing.file_parser import FileParser, Upload
from tcgtracker.importing.models import ImportOptions, ImportSummary
from tcgtracker.importing.preview import build_preview
from tcgtracker.importing.registry import (
    ImporterRegistry,
    canonical_source,
    importer_key_for,
    resolve_importer,
    set_options_for,
)
from tcgtracker.importing.schemas import (
    ImportApplyResponse,
    ImportOptionsResponse,
    ImportPreviewResponse,
    ImportSetOption,
    ImportSourceOption,
)
from tcgtracker.models.failure import ImportFailedError, InvalidLimitError, KnownError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImportRequest:
    """
    A request after its HTTP shape (JSON body or multipart form) is unpacked.

    Attributes:
        source: Raw source name or alias
        set_code: Optional set to import
        limit: Optional record limit, not yet range-checked
        file: Optional upload
    """

    source: str
    set_code: str | None = None
    limit: int | None = None
    file: Upload | None = None


def effective_limit(requested: int | None) -> int:
    """Apply the default and range-check a caller-supplied limit."""
    if requested is None:
        return DEFAULT_PREVIEW_LIMIT
    if requested < MIN_PREVIEW_LIMIT or requested > MAX_PREVIEW_LIMIT:
        raise InvalidLimitError(MIN_PREVIEW_LIMIT, MAX_PREVIEW_LIMIT)
    return requested


class ImportOrchestrator:
    """Facade over the registry, file parser and importers."""

    def __init__(self, registry: ImporterRegistry, parser: FileParser | None = None):
        self.registry = registry
        self.parser = parser or FileParser()

    async def dry_run(
        self,
        session: AsyncSession,
        request: ImportRequest,
        user_id: int | None = None,
    ) -> ImportPreviewResponse:
        """Compute the pending changes without committing anything."""
        importer, summary = await self._run(session, request, user_id, dry_run=True)
        return build_preview(summary, importer, request.set_code)

    async def apply(
        self,
        session: AsyncSession,
        request: ImportRequest,
        user_id: int | None = None,
    ) -> ImportApplyResponse:
        """Run the same computation as dry_run and commit it."""
        _, summary = await self._run(session, request, user_id, dry_run=False)
        return ImportApplyResponse(
            created=summary.created,
            updated=summary.updated,
            skipped=0,
            invalid=summary.errors,
        )

    def options(self) -> ImportOptionsResponse:
        """List the registered sources with their games and known sets."""
        sources: list[ImportSourceOption] = []
        for importer in self.registry.all:
            canonical = canonical_source(importer.key)
            games: list[str] = []
            for game in importer.supported_games:
                if game.lower() not in (g.lower() for g in games):
                    games.append(game)
            sources.append(
                ImportSourceOption(
                    key=canonical,
                    importer_key=importer_key_for(canonical),
                    display_name=importer.display_name,
                    games=games,
                    sets=[
                        ImportSetOption(code=code, name=name)
                        for code, name in set_options_for(canonical)
                    ],
                )
            )

        sources.sort(key=lambda s: s.display_name.lower())
        return ImportOptionsResponse(sources=sources)

    async def _run(
        self,
        session: AsyncSession,
        request: ImportRequest,
        user_id: int | None,
        dry_run: bool,
    ) -> tuple[SourceImporter, ImportSummary]:
        importer = resolve_importer(self.registry, request.source)
        limit = effective_limit(request.limit)
        options = ImportOptions(
            dry_run=dry_run,
            upsert=True,
            limit=limit,
            user_id=user_id,
            set_code=request.set_code,
        )
        logger.info(
            "Import %s requested: source=%s set=%s limit=%d file=%s user=%s",
            "dry run" if dry_run else "apply",
            importer.key,
            request.set_code or "(none)",
            limit,
            request.file is not None,
            user_id,
        )

        field = "file" if request.file is not None else "request"
        try:
            if request.file is not None:
                # Apply validates the whole upload; the dry run only what it previews
                parse_limit = limit if dry_run else MAX_PREVIEW_LIMIT
                parsed = await self.parser.parse(request.file, parse_limit)
                with parsed:
                    summary = await importer.import_from_file(
                        session, parsed.open_read(), options
                    )
            else:
                summary = await importer.import_from_remote(session, options)
        except KnownError:
            raise
        except Exception as e:
            logger.exception("Import from %s failed", importer.key)
            raise ImportFailedError(str(e) or type(e).__name__, field=field) from e

        return importer, summary
